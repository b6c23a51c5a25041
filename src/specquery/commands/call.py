"""``specquery call`` -- run one tool and print its result envelope.

Arguments come from a JSON object (``--input``) and/or repeated
``--arg key=value`` pairs; ``--arg`` values are parsed as JSON when
possible (``limit=5``, ``deprecated=false``) and kept as strings
otherwise. ``--arg`` entries win over keys from ``--input``.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import typer

from specquery.commands import spec_source_arguments
from specquery.exceptions import exit_code_for
from specquery.exit_codes import EXIT_INVALID_USAGE
from specquery.output import debug, error, print_envelope
from specquery.service import SpecService
from specquery.tools import call_tool


def call_command(
    ctx: typer.Context,
    tool: str = typer.Argument(help="Tool name, e.g. list_endpoints."),
    spec: Optional[str] = typer.Option(
        None, "--spec", "-s", help="URL or file path of a spec to load first."
    ),
    input_json: Optional[str] = typer.Option(
        None, "--input", "-i", help="Tool arguments as a JSON object."
    ),
    args: Optional[list[str]] = typer.Option(
        None, "--arg", "-a", help="Tool argument as key=value (repeatable)."
    ),
) -> None:
    """Run a single tool against an optionally preloaded spec.

    Exits non-zero with the error's exit code when the tool fails.

    Example::

        specquery call list_endpoints --spec petstore.json --arg tag=pets
        specquery call generate_curl -s petstore.json -i '{"path": "/pets", "method": "post"}'
    """
    arguments = _parse_arguments(input_json, args or [])
    service = SpecService.from_config(ctx.obj["config"])

    if spec and tool != "load_spec":
        loaded = call_tool(service, "load_spec", spec_source_arguments(spec))
        if not loaded["success"]:
            print_envelope(loaded)
            raise typer.Exit(code=exit_code_for(loaded.get("code")))
    elif spec:
        arguments = {**spec_source_arguments(spec), **arguments}

    debug(f"Calling {tool} with {sorted(arguments)}")
    result = call_tool(service, tool, arguments)
    if not print_envelope(result):
        raise typer.Exit(code=exit_code_for(result.get("code")))


def _parse_arguments(input_json: Optional[str], pairs: list[str]) -> dict[str, Any]:
    arguments: dict[str, Any] = {}
    if input_json:
        try:
            parsed = json.loads(input_json)
        except json.JSONDecodeError as exc:
            error(f"--input is not valid JSON: {exc}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None
        if not isinstance(parsed, dict):
            error("--input must be a JSON object")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        arguments.update(parsed)

    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            error(f"Expected key=value, got: {pair}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        arguments[key.strip()] = _parse_value(raw)
    return arguments


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw
