"""Typer application and CLI entry point for specquery.

The root callback resolves configuration (see
:func:`~specquery.config.resolve_config`), installs the global
:class:`~specquery.output.OutputManager`, and configures logging on stderr
so that stdout stays free for data and for the MCP protocol.

:func:`main` is the console-script entry point declared in
``pyproject.toml``. Typed :class:`~specquery.exceptions.SpecQueryError`
failures exit with their own exit code.
"""

from __future__ import annotations

import logging
import signal
import sys
from typing import Any, Optional

import typer

from specquery import __version__
from specquery.exit_codes import EXIT_GENERIC_FAILURE

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

app = typer.Typer(
    name="specquery",
    help="Query OpenAPI 2.0/3.x specs: endpoints, schemas, samples, types and cURL.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"specquery {__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Send all log records at *level* or above to stderr."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    logging.basicConfig(stream=sys.stderr, level=numeric, format=LOG_FORMAT, force=True)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Log level (overrides config and SPECQUERY_LOG_LEVEL)."
    ),
) -> None:
    """Resolve configuration, output format and logging before every command."""
    from specquery.config import resolve_config
    from specquery.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    config = resolve_config({"log_level": "DEBUG" if verbose else log_level})
    configure_logging(config.log_level)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose


from specquery.commands.call import call_command  # noqa: E402
from specquery.commands.config import config_app  # noqa: E402
from specquery.commands.serve import serve_command  # noqa: E402
from specquery.commands.tools import tools_command  # noqa: E402

app.command("serve")(serve_command)
app.command("call")(call_command)
app.command("tools")(tools_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _setup_signal_handlers() -> None:
    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``specquery`` console script."""
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except Exception as exc:
        from specquery.exceptions import SpecQueryError
        from specquery.output import error

        if isinstance(exc, SpecQueryError):
            error(exc.message)
            sys.exit(exc.exit_code)
        logging.getLogger(__name__).exception("Unexpected error")
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
