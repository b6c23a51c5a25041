"""Synthesize example values from JSON Schema nodes.

Generation is deterministic: the same schema and options always produce the
same value, so samples can be compared across calls. At each node the first
applicable rule wins:

1. ``example``, ``default``, ``const``, then the first ``enum`` value,
   returned as a deep copy.
2. ``nullable: true`` without a ``type`` yields ``None``.
3. ``allOf`` samples every branch and merges object results (later keys
   win); ``oneOf``/``anyOf`` sample only their first branch.
4. Dispatch on ``type`` (the first non-null entry of a type list).
5. Schemas without a ``type`` but with ``properties`` are sampled as
   objects; anything else yields ``None``.

Recursion beyond :attr:`~specquery.models.SampleOptions.max_depth` returns
``None``.
"""

from __future__ import annotations

import copy
import math
from typing import Any, Optional

from specquery.models import JsonSchema, SampleOptions

DEFAULT_STRING = "string"

_FORMAT_SAMPLES = {
    "email": "user@example.com",
    "uri": "https://example.com",
    "url": "https://example.com",
    "date": "2024-01-15",
    "date-time": "2024-01-15T10:30:00Z",
    "time": "10:30:00",
    "uuid": "550e8400-e29b-41d4-a716-446655440000",
    "hostname": "example.com",
    "ipv4": "192.168.1.1",
    "ipv6": "2001:0db8:85a3:0000:0000:8a2e:0370:7334",
    "byte": "SGVsbG8gV29ybGQ=",
    "binary": "<binary data>",
    "password": "********",
}


def generate_sample(
    schema: JsonSchema, options: Optional[SampleOptions] = None, depth: int = 0
) -> Any:
    """Generate a sample value for *schema*.

    Args:
        schema: A reference-free schema node. It is never modified.
        options: Generation options; defaults to :class:`SampleOptions()`.
        depth: Current recursion depth (callers normally leave this at 0).

    Returns:
        A JSON-compatible value.

    Example::

        generate_sample({"type": "object", "required": ["a"],
                         "properties": {"a": {"type": "string"},
                                        "b": {"type": "string"}}})
        # -> {"a": "string"}
    """
    opts = options or SampleOptions()

    if depth > opts.max_depth:
        return None

    for keyword in ("example", "default", "const"):
        if keyword in schema and schema[keyword] is not None:
            return copy.deepcopy(schema[keyword])

    enum = schema.get("enum")
    if isinstance(enum, list) and enum:
        return copy.deepcopy(enum[0])

    schema_type = _primary_type(schema)

    if schema.get("nullable") and schema_type is None:
        return None

    all_of = schema.get("allOf")
    if isinstance(all_of, list) and all_of:
        merged: dict[str, Any] = {}
        for branch in all_of:
            sample = generate_sample(branch, opts, depth + 1)
            if isinstance(sample, dict):
                merged.update(sample)
        return merged

    for keyword in ("oneOf", "anyOf"):
        branches = schema.get(keyword)
        if isinstance(branches, list) and branches:
            return generate_sample(branches[0], opts, depth + 1)

    if schema_type == "string":
        return _sample_string(schema)
    if schema_type == "integer":
        return math.floor(_sample_number(schema))
    if schema_type == "number":
        value = _sample_number(schema)
        return int(value) if float(value).is_integer() else value
    if schema_type == "boolean":
        return False
    if schema_type == "null":
        return None
    if schema_type == "array":
        return _sample_array(schema, opts, depth)
    if schema_type == "object" or isinstance(schema.get("properties"), dict):
        return _sample_object(schema, opts, depth)
    return None


def _primary_type(schema: JsonSchema) -> Optional[str]:
    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        return next((t for t in schema_type if t != "null"), None)
    return schema_type if isinstance(schema_type, str) else None


def _sample_string(schema: JsonSchema) -> str:
    fmt = schema.get("format")
    if fmt in _FORMAT_SAMPLES:
        return _FORMAT_SAMPLES[fmt]

    value = DEFAULT_STRING
    min_length = schema.get("minLength")
    if isinstance(min_length, int) and len(value) < min_length:
        value = value.ljust(min_length, "_")
    max_length = schema.get("maxLength")
    if isinstance(max_length, int) and len(value) > max_length:
        value = value[:max_length]
    return value


def _bound(schema: JsonSchema, inclusive: str, exclusive: str) -> Optional[float]:
    # A boolean exclusiveMinimum/Maximum is the draft-4 modifier form, not a bound.
    for keyword in (inclusive, exclusive):
        value = schema.get(keyword)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
    return None


def _sample_number(schema: JsonSchema) -> float:
    minimum = schema.get("minimum")
    if isinstance(minimum, (int, float)) and not isinstance(minimum, bool):
        return math.ceil(minimum) if schema.get("type") == "integer" else minimum

    low = _bound(schema, "minimum", "exclusiveMinimum")
    low = 0 if low is None else low
    high = _bound(schema, "maximum", "exclusiveMaximum")
    high = low + 100 if high is None else high
    return (low + high) / 2


def _sample_array(schema: JsonSchema, opts: SampleOptions, depth: int) -> list[Any]:
    items = schema.get("items")
    if not isinstance(items, dict):
        return []

    min_items = schema.get("minItems")
    if isinstance(min_items, int) and not isinstance(min_items, bool):
        count = max(1, min_items)
    else:
        count = min(1, opts.max_array_items)

    # One sample is replicated rather than varied per index.
    item = generate_sample(items, opts, depth + 1)
    return [copy.deepcopy(item) for _ in range(count)]


def _sample_object(schema: JsonSchema, opts: SampleOptions, depth: int) -> dict[str, Any]:
    properties = schema.get("properties")
    if not isinstance(properties, dict):
        return {}

    required = set(schema.get("required") or [])
    result: dict[str, Any] = {}
    for name, prop_schema in properties.items():
        if name in required or opts.include_optional:
            result[name] = generate_sample(
                prop_schema if isinstance(prop_schema, dict) else {}, opts, depth + 1
            )
    return result
