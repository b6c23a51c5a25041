"""``specquery tools`` -- list the tools the server exposes."""

from __future__ import annotations

from specquery.output import print_table
from specquery.tools import TOOLS


def tools_command() -> None:
    """List available tools with their descriptions."""
    rows = [[tool.name, tool.description] for tool in TOOLS.values()]
    print_table(["Tool", "Description"], rows, title="specquery tools")
