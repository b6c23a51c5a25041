"""Resolve ``$ref`` JSON Reference pointers in OpenAPI documents.

Both Swagger 2.0 (``#/definitions/...``) and OpenAPI 3.x
(``#/components/...``) documents use ``$ref`` pointers to avoid repetition.
This module performs a recursive deep-copy traversal of the document,
replacing every ``$ref`` with the object it points to, so that every schema
reachable from the result is reference-free.

Only **internal** references (those starting with ``#/``) are supported.
External file or URL references raise
:class:`~specquery.exceptions.SpecLoadError`.

A reference that would re-enter itself (``Node.properties.children.items ->
Node``) cannot be inlined. At the cycle point it is replaced by a stub::

    {"x-circular-ref": "#/components/schemas/Node",
     "description": "Circular reference to #/components/schemas/Node",
     "type": "object"}

The stub carries the target's ``type`` when it has one, contains no
``$ref`` key, and keeps the result JSON-serializable.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Optional

from specquery.exceptions import SpecLoadError

logger = logging.getLogger(__name__)

CIRCULAR_REF_KEY = "x-circular-ref"


def resolve_refs(spec: dict[str, Any]) -> dict[str, Any]:
    """Resolve all ``$ref`` pointers in *spec*.

    Args:
        spec: The raw document as parsed from JSON or YAML.

    Returns:
        A **new** dictionary (deep copy) with every resolvable ``$ref``
        replaced by its target and every cyclic one replaced by a stub.

    Raises:
        SpecLoadError: If a ``$ref`` points to a missing location or is
            external.

    Example::

        resolved = resolve_refs(raw)
        # resolved["paths"]["/pets"]["get"]["responses"]["200"]["content"]
        # now contains the inlined schema instead of a $ref pointer.
    """
    root = copy.deepcopy(spec)
    return _deep_resolve(root, root, seen=None)


def _resolve_ref(ref: str, root: dict[str, Any]) -> Any:
    """Follow one ``#/a/b/c`` pointer through *root* (RFC 6901 escaping)."""
    if not ref.startswith("#/"):
        raise SpecLoadError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled.",
            {"ref": ref},
        )

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise SpecLoadError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found",
                    {"ref": ref},
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SpecLoadError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'",
                    {"ref": ref},
                ) from exc
        else:
            raise SpecLoadError(
                f"Cannot resolve $ref '{ref}': cannot navigate into "
                f"{type(current).__name__}",
                {"ref": ref},
            )

    return current


def _circular_stub(ref: str, root: dict[str, Any]) -> dict[str, Any]:
    stub: dict[str, Any] = {
        CIRCULAR_REF_KEY: ref,
        "description": f"Circular reference to {ref}",
    }
    target = _resolve_ref(ref, root)
    if isinstance(target, dict) and isinstance(target.get("type"), str):
        stub["type"] = target["type"]
    return stub


def _deep_resolve(obj: Any, root: dict[str, Any], seen: Optional[set[str]] = None) -> Any:
    """Recursively resolve all ``$ref`` pointers within *obj*.

    ``seen`` holds the references currently on the resolution stack. A new
    set is created per branch so sibling references to the same target are
    each inlined; only a reference that re-enters its own ancestry becomes
    a stub.
    """
    if seen is None:
        seen = set()

    if isinstance(obj, dict):
        if "$ref" in obj and isinstance(obj["$ref"], str):
            ref = obj["$ref"]
            if ref in seen:
                logger.debug("Circular $ref %s replaced by stub", ref)
                return _circular_stub(ref, root)
            resolved = _resolve_ref(ref, root)
            return _deep_resolve(resolved, root, seen | {ref})

        return {key: _deep_resolve(value, root, seen) for key, value in obj.items()}

    if isinstance(obj, list):
        return [_deep_resolve(item, root, seen) for item in obj]

    return obj
