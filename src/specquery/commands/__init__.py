"""Built-in CLI sub-commands for specquery.

* :mod:`~specquery.commands.serve` -- run the MCP server over stdio.
* :mod:`~specquery.commands.call` -- run a single tool and print its envelope.
* :mod:`~specquery.commands.tools` -- list the available tools.
* :mod:`~specquery.commands.config` -- view and modify the user config.
"""

from __future__ import annotations

from typing import Any


def spec_source_arguments(source: str) -> dict[str, Any]:
    """Turn a ``--spec`` value into ``load_spec`` tool arguments."""
    if source.startswith(("http://", "https://")):
        return {"url": source}
    return {"filePath": source}
