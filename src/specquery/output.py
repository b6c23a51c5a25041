"""Console output for the specquery CLI with stdout/stderr separation.

* **stdout** carries data only: tool envelopes, config dumps, tables.
  ``specquery serve`` speaks MCP over stdout, so nothing else may write
  there while it runs.
* **stderr** carries diagnostics: status lines, errors, debug traces.
* **Formats** -- ``RICH`` (highlighted JSON, styled tables) when stdout is
  an interactive terminal, ``PLAIN`` when piped, ``JSON`` when forced with
  ``--json``. ``NO_COLOR`` and ``TERM=dumb`` disable colour.

:class:`OutputManager` is created once by the root CLI callback and
installed with :func:`set_output`; the module-level helpers delegate to it.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """``AUTO`` resolves to ``RICH`` on a colour-capable TTY and ``PLAIN`` otherwise."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes data to stdout and diagnostics to stderr.

    Args:
        format: Requested output format.
        no_color: Disable colour and Rich markup.
        quiet: Suppress info and success messages.
        verbose: Show debug messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _color_disabled_by_env()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            interactive = sys.stdout.isatty() if hasattr(sys.stdout, "isatty") else False
            format = OutputFormat.RICH if interactive and not self._no_color else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # --- stdout ---

    def format_response(self, data: Any) -> None:
        """Print a JSON-compatible value in the active format."""
        if self._format == OutputFormat.RICH:
            text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        elif self._format == OutputFormat.JSON or isinstance(data, (dict, list)):
            self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        else:
            self.print_data(str(data))

    def print_envelope(self, envelope: dict[str, Any]) -> bool:
        """Print a tool result envelope and report whether the call succeeded.

        A failed call is still printed in full on stdout; outside JSON mode
        its message is repeated on stderr.
        """
        self.format_response(envelope)
        if envelope.get("success"):
            return True
        if self._format != OutputFormat.JSON:
            self.error(str(envelope.get("error", "Tool call failed")))
        return False

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_table(self, headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
        """Print rows as a Rich table, a JSON array of objects, or TSV."""
        if self._format == OutputFormat.JSON:
            self.print_data(json.dumps([dict(zip(headers, row)) for row in rows], indent=2))
        elif self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    # --- stderr ---

    def _diagnostic(self, plain: str, markup: str) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup)

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, f"[green]{message}[/green]")

    def error(self, message: str) -> None:
        self._diagnostic(f"Error: {message}", f"[bold red]Error:[/bold red] {message}")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(f"[debug] {message}", f"[dim]\\[debug] {message}[/dim]")


def _color_disabled_by_env() -> bool:
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# --- Global instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating an ``AUTO`` one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (used between tests)."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_envelope(envelope: dict[str, Any]) -> bool:
    return get_output().print_envelope(envelope)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
