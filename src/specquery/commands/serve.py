"""``specquery serve`` -- run the MCP server over stdio."""

from __future__ import annotations

from typing import Optional

import typer

from specquery.commands import spec_source_arguments
from specquery.exceptions import exit_code_for
from specquery.output import error
from specquery.service import SpecService
from specquery.tools import call_tool


def serve_command(
    ctx: typer.Context,
    spec: Optional[str] = typer.Option(
        None, "--spec", "-s", help="URL or file path of a spec to load before serving."
    ),
) -> None:
    """Run the MCP server over stdio.

    Example::

        specquery serve
        specquery serve --spec ./openapi.yaml
    """
    from specquery import server

    service = SpecService.from_config(ctx.obj["config"])
    if spec:
        result = call_tool(service, "load_spec", spec_source_arguments(spec))
        if not result["success"]:
            error(result["error"])
            raise typer.Exit(code=exit_code_for(result.get("code")))

    server.serve(service)
