"""Endpoint-key and status-code helpers shared by the normalizer and accessor.

Endpoints are indexed by a composite ``"<method> </path>"`` key. Both halves
are normalized (lowercase method, leading-slash path) so that ``("users",
"GET")`` and ``("/users", "get")`` address the same entry.
"""

from __future__ import annotations

import re

from specquery.models import HTTPMethod

_METHOD_ORDER = {method.value: index for index, method in enumerate(HTTPMethod)}


def normalize_method(method: str) -> str:
    """Return *method* lowercased (``"GET"`` -> ``"get"``)."""
    return method.strip().lower()


def normalize_path(path: str) -> str:
    """Return *path* with exactly one leading slash."""
    path = path.strip()
    return path if path.startswith("/") else f"/{path}"


def endpoint_key(method: str, path: str) -> str:
    """Build the index key for a method + path pair."""
    return f"{normalize_method(method)} {normalize_path(path)}"


def parse_endpoint_key(key: str) -> tuple[str, str]:
    """Split an index key back into ``(method, path)``."""
    method, _, path = key.partition(" ")
    return method, path


def matches_status_code(actual: str, pattern: str) -> bool:
    """Check whether a status code matches a response key.

    ``X`` in *pattern* stands for any digit, so ``"2XX"`` matches ``"200"``
    through ``"299"``. Matching is case-insensitive on the placeholder.

    Args:
        actual: The requested status code (e.g. ``"201"``).
        pattern: A response key (e.g. ``"201"`` or ``"2XX"``).

    Returns:
        ``True`` on an exact or wildcard match.
    """
    if actual == pattern:
        return True
    if "X" not in pattern.upper():
        return False
    regex = "".join(r"\d" if ch in "Xx" else re.escape(ch) for ch in pattern)
    return re.fullmatch(regex, actual) is not None


def sort_key(path: str, method: str) -> tuple[str, int]:
    """Sort key ordering endpoints by path, then canonical method order."""
    return path, _METHOD_ORDER.get(normalize_method(method), len(_METHOD_ORDER))
