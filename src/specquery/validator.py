"""Validate payloads against request schemas with ``jsonschema``.

Schemas are compiled once into a :class:`jsonschema.Draft7Validator` (with
a :class:`jsonschema.FormatChecker`, so ``format: email`` and friends are
enforced) and cached under their canonical JSON serialization. Before
compilation a copy of the schema is translated from OpenAPI 2.0/3.0 idioms
to Draft 7:

* ``nullable: true`` adds ``"null"`` to the ``type`` (and ``None`` to an
  ``enum``);
* boolean ``exclusiveMinimum``/``exclusiveMaximum`` modifiers become the
  numeric form.

Every violation is reported, not just the first, as a
:class:`~specquery.models.ValidationIssue` whose ``path`` is a JSON pointer
into the payload.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
from typing import Any

from jsonschema import Draft7Validator, FormatChecker
from jsonschema.exceptions import SchemaError, ValidationError

from specquery.exceptions import ValidationFailedError
from specquery.models import JsonSchema, ValidationIssue, ValidationResult

logger = logging.getLogger(__name__)

_SUBSCHEMA_LISTS = ("allOf", "anyOf", "oneOf")
_SUBSCHEMA_MAPS = ("properties", "patternProperties", "definitions")
_SUBSCHEMA_SINGLE = ("items", "additionalProperties", "not", "additionalItems")


class PayloadValidator:
    """Compiles and caches one validator per distinct schema.

    The cache is guarded by a lock so a validator can be shared between
    threads serving concurrent tool calls.
    """

    def __init__(self) -> None:
        self._validators: dict[str, Draft7Validator] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._validators)

    def validate(self, payload: Any, schema: JsonSchema) -> ValidationResult:
        """Validate *payload* against *schema*.

        Raises:
            ValidationFailedError: If *schema* itself is not a valid schema.
        """
        validator = self._get_validator(schema)
        errors = sorted(
            validator.iter_errors(payload),
            key=lambda e: ([str(p) for p in e.absolute_path], e.validator),
        )
        issues = [
            ValidationIssue(
                path=_json_pointer(error.absolute_path),
                message=error.message,
                keyword=str(error.validator),
                params=_error_params(error),
            )
            for error in errors
        ]
        return ValidationResult(valid=not issues, errors=issues)

    def clear(self) -> None:
        with self._lock:
            self._validators.clear()

    def _get_validator(self, schema: JsonSchema) -> Draft7Validator:
        key = json.dumps(schema, sort_keys=True, default=str)
        with self._lock:
            validator = self._validators.get(key)
            if validator is not None:
                return validator

            draft7 = to_draft7(schema)
            try:
                Draft7Validator.check_schema(draft7)
            except SchemaError as exc:
                raise ValidationFailedError(
                    f"Invalid schema: {exc.message}",
                    {"schemaPath": _json_pointer(exc.absolute_path)},
                ) from exc

            validator = Draft7Validator(draft7, format_checker=FormatChecker())
            self._validators[key] = validator
            logger.debug("Compiled validator (%d cached)", len(self._validators))
            return validator


def to_draft7(schema: JsonSchema) -> JsonSchema:
    """Return a Draft 7 copy of an OpenAPI schema; *schema* is left untouched."""
    return _translate(copy.deepcopy(schema))


def _translate(node: Any) -> Any:
    if not isinstance(node, dict):
        return node

    if node.get("nullable") is True:
        schema_type = node.get("type")
        if isinstance(schema_type, str) and schema_type != "null":
            node["type"] = [schema_type, "null"]
        elif isinstance(schema_type, list) and "null" not in schema_type:
            node["type"] = [*schema_type, "null"]
        if isinstance(node.get("enum"), list) and None not in node["enum"]:
            node["enum"] = [*node["enum"], None]

    for bound, modifier in (("minimum", "exclusiveMinimum"), ("maximum", "exclusiveMaximum")):
        if isinstance(node.get(modifier), bool):
            if node.pop(modifier) and bound in node:
                node[modifier] = node.pop(bound)

    for keyword in _SUBSCHEMA_LISTS:
        if isinstance(node.get(keyword), list):
            node[keyword] = [_translate(branch) for branch in node[keyword]]
    for keyword in _SUBSCHEMA_MAPS:
        if isinstance(node.get(keyword), dict):
            node[keyword] = {name: _translate(sub) for name, sub in node[keyword].items()}
    for keyword in _SUBSCHEMA_SINGLE:
        if isinstance(node.get(keyword), (dict, list)):
            sub = node[keyword]
            node[keyword] = [_translate(s) for s in sub] if isinstance(sub, list) else _translate(sub)
    return node


def _error_params(error: ValidationError) -> dict[str, Any]:
    # One error is raised per missing name; report that name, not the whole list.
    if error.validator == "required" and isinstance(error.validator_value, list):
        for name in error.validator_value:
            if error.message.startswith(repr(name)):
                return {"missingProperty": name}
    return {str(error.validator): error.validator_value}


def _json_pointer(path: Any) -> str:
    segments = [str(p).replace("~", "~0").replace("/", "~1") for p in path]
    return "/" + "/".join(segments) if segments else "/"


_default_validator = PayloadValidator()


def validate_payload(payload: Any, schema: JsonSchema) -> ValidationResult:
    """Validate with the process-wide validator cache."""
    return _default_validator.validate(payload, schema)


def clear_validator_cache() -> None:
    _default_validator.clear()
