"""Render JSON Schema nodes as TypeScript type declarations.

Object-shaped roots become ``interface`` declarations; every other root
becomes a ``type`` alias. Nested objects are rendered inline. Unlike sample
generation, composition keywords describe every branch: ``allOf`` becomes an
intersection and ``oneOf``/``anyOf`` a union.

Recursion is bounded by ``max_depth``; deeper nodes render as ``unknown``.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from specquery.models import JsonSchema

DEFAULT_TYPE_NAME = "GeneratedType"
DEFAULT_MAX_DEPTH = 10

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_OPENERS = {"{": "}", "<": ">", "(": ")", "[": "]"}


def generate_typescript(
    schema: JsonSchema,
    name: str = DEFAULT_TYPE_NAME,
    export: bool = True,
    include_comments: bool = True,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> str:
    """Render *schema* as one named TypeScript declaration.

    Args:
        schema: A reference-free schema node.
        name: Declaration name.
        export: Prefix the declaration with ``export``.
        include_comments: Emit JSDoc from ``description`` fields.
        max_depth: Nodes nested deeper than this render as ``unknown``.

    Returns:
        The declaration text, without a trailing newline.

    Example::

        generate_typescript({"type": "object", "required": ["id"],
                             "properties": {"id": {"type": "integer"}}},
                            name="Pet")
        # export interface Pet {
        #   id: number;
        # }
    """
    prefix = "export " if export else ""
    lines: list[str] = []

    if include_comments and schema.get("description"):
        lines.extend(_jsdoc_block(str(schema["description"])))

    if _is_interface_root(schema):
        lines.append(f"{prefix}interface {name} {{")
        required = set(schema.get("required") or [])
        for prop_name, prop_schema in schema["properties"].items():
            prop_schema = prop_schema if isinstance(prop_schema, dict) else {}
            if include_comments and prop_schema.get("description"):
                lines.append(f"  /** {_comment_text(str(prop_schema['description']))} */")
            optional = "" if prop_name in required else "?"
            prop_type = schema_to_type(prop_schema, depth=1, max_depth=max_depth)
            lines.append(f"  {_property_name(prop_name)}{optional}: {prop_type};")
        lines.append("}")
    else:
        lines.append(f"{prefix}type {name} = {schema_to_type(schema, max_depth=max_depth)};")

    return "\n".join(lines)


def generate_endpoint_types(
    operation_id: Optional[str],
    path: str,
    method: str,
    request_schema: Optional[JsonSchema],
    response_schema: Optional[JsonSchema],
    export: bool = True,
) -> str:
    """Render ``<Base>Request`` and ``<Base>Response`` declarations for one endpoint.

    ``<Base>`` is the PascalCase operationId, or the PascalCase of
    ``<method>_<path>`` when there is none. Missing or empty schemas are
    skipped; declarations are separated by a blank line.
    """
    base = to_pascal_case(operation_id) if operation_id else to_pascal_case(f"{method}_{path}")

    parts: list[str] = []
    if request_schema:
        parts.append(generate_typescript(request_schema, name=f"{base}Request", export=export))
    if response_schema:
        parts.append(generate_typescript(response_schema, name=f"{base}Response", export=export))
    return "\n\n".join(parts)


def schema_to_type(schema: JsonSchema, depth: int = 0, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Render *schema* as an inline TypeScript type expression."""
    if depth > max_depth or not schema:
        return "unknown"

    rendered = _render(schema, depth, max_depth)
    if schema.get("nullable") and rendered not in ("null", "unknown"):
        return f"{rendered} | null"
    return rendered


def to_pascal_case(value: str) -> str:
    """``"get_/users/{id}"`` -> ``"GetUsersId"``; ``"listPets"`` -> ``"ListPets"``."""
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[^A-Za-z0-9]+", value) if part)


def _render(schema: JsonSchema, depth: int, max_depth: int) -> str:
    enum = schema.get("enum")
    if isinstance(enum, list) and enum:
        return " | ".join(_literal(value) for value in enum)

    if "const" in schema:
        return _literal(schema["const"])

    all_of = schema.get("allOf")
    if isinstance(all_of, list) and all_of:
        branches = [_branch(branch, depth, max_depth) for branch in all_of]
        return " & ".join(_parenthesize(b) for b in branches)

    for keyword in ("oneOf", "anyOf"):
        options = schema.get(keyword)
        if isinstance(options, list) and options:
            return " | ".join(_branch(branch, depth, max_depth) for branch in options)

    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        rendered = [_render_type(t, schema, depth, max_depth) for t in schema_type]
        return " | ".join(dict.fromkeys(rendered))
    return _render_type(schema_type, schema, depth, max_depth)


def _render_type(schema_type: Any, schema: JsonSchema, depth: int, max_depth: int) -> str:
    if schema_type == "string":
        return "string"
    if schema_type in ("number", "integer"):
        return "number"
    if schema_type == "boolean":
        return "boolean"
    if schema_type == "null":
        return "null"
    if schema_type == "array":
        items = schema.get("items")
        if not isinstance(items, dict):
            return "unknown[]"
        return f"{_parenthesize(schema_to_type(items, depth + 1, max_depth))}[]"
    if schema_type == "object" or isinstance(schema.get("properties"), dict):
        return _render_object(schema, depth, max_depth)
    return "unknown"


def _render_object(schema: JsonSchema, depth: int, max_depth: int) -> str:
    properties = schema.get("properties")
    if not isinstance(properties, dict) or not properties:
        additional = schema.get("additionalProperties")
        if isinstance(additional, dict) and additional:
            return f"Record<string, {schema_to_type(additional, depth + 1, max_depth)}>"
        return "Record<string, unknown>"

    required = set(schema.get("required") or [])
    fields = []
    for prop_name, prop_schema in properties.items():
        optional = "" if prop_name in required else "?"
        prop_type = schema_to_type(
            prop_schema if isinstance(prop_schema, dict) else {}, depth + 1, max_depth
        )
        fields.append(f"{_property_name(prop_name)}{optional}: {prop_type}")
    return "{ " + "; ".join(fields) + " }"


def _branch(schema: Any, depth: int, max_depth: int) -> str:
    return schema_to_type(schema if isinstance(schema, dict) else {}, depth + 1, max_depth)


def _is_interface_root(schema: JsonSchema) -> bool:
    properties = schema.get("properties")
    if not isinstance(properties, dict) or not properties:
        return False
    if schema.get("type") not in (None, "object") or schema.get("nullable"):
        return False
    return not any(k in schema for k in ("allOf", "oneOf", "anyOf", "enum", "const"))


def _literal(value: Any) -> str:
    return json.dumps(value)


def _property_name(name: str) -> str:
    return name if _IDENTIFIER.match(name) else json.dumps(name)


def _parenthesize(rendered: str) -> str:
    return f"({rendered})" if _is_compound(rendered) else rendered


def _is_compound(rendered: str) -> bool:
    """Whether *rendered* has a top-level ``|`` or ``&`` (outside brackets and strings)."""
    stack: list[str] = []
    in_string = False
    escaped = False
    for ch in rendered:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in _OPENERS:
            stack.append(_OPENERS[ch])
        elif stack and ch == stack[-1]:
            stack.pop()
        elif not stack and ch in "|&":
            return True
    return False


def _comment_text(text: str) -> str:
    return " ".join(text.split()).replace("*/", "*\\/")


def _jsdoc_block(text: str) -> list[str]:
    lines = ["/**"]
    for line in text.strip().splitlines():
        lines.append(f" * {line.rstrip()}".replace("*/", "*\\/") if line.strip() else " *")
    lines.append(" */")
    return lines
