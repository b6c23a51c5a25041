"""Tests for specquery.validator."""

from __future__ import annotations

from typing import Any

import pytest

from specquery.exceptions import ValidationFailedError
from specquery.models import ParsedSpec
from specquery.validator import PayloadValidator, clear_validator_cache, to_draft7, validate_payload


@pytest.fixture
def user_schema(petstore_30_spec: ParsedSpec) -> dict[str, Any]:
    return petstore_30_spec.schemas["User"]


@pytest.fixture
def validator() -> PayloadValidator:
    return PayloadValidator()


class TestValidate:
    def test_valid_payload(self, validator: PayloadValidator, user_schema: dict[str, Any]) -> None:
        result = validator.validate({"email": "a@example.com", "username": "alice"}, user_schema)
        assert result.valid is True
        assert result.errors == []

    def test_email_format(self, validator: PayloadValidator, user_schema: dict[str, Any]) -> None:
        result = validator.validate({"email": "not-an-email", "username": "alice"}, user_schema)

        assert result.valid is False
        [issue] = result.errors
        assert issue.path == "/email"
        assert issue.keyword == "format"
        assert issue.params == {"format": "email"}

    def test_missing_required_reported_at_root(
        self, validator: PayloadValidator, user_schema: dict[str, Any]
    ) -> None:
        result = validator.validate({"email": "a@example.com"}, user_schema)

        [issue] = result.errors
        assert issue.path == "/"
        assert issue.keyword == "required"
        assert "'username' is a required property" in issue.message
        assert issue.params == {"missingProperty": "username"}

    def test_each_missing_property_reported_separately(
        self, validator: PayloadValidator, user_schema: dict[str, Any]
    ) -> None:
        result = validator.validate({}, user_schema)

        assert [issue.params for issue in result.errors] == [
            {"missingProperty": "email"},
            {"missingProperty": "username"},
        ]

    def test_all_errors_reported(self, validator: PayloadValidator, user_schema: dict[str, Any]) -> None:
        result = validator.validate({"email": "a@example.com", "username": "al", "age": -1}, user_schema)

        assert [(e.path, e.keyword) for e in result.errors] == [
            ("/age", "minimum"),
            ("/username", "minLength"),
        ]

    def test_nullable_accepts_null(self, validator: PayloadValidator, user_schema: dict[str, Any]) -> None:
        payload = {"email": "a@example.com", "username": "alice", "nickname": None}
        assert validator.validate(payload, user_schema).valid is True

    def test_nested_array_pointer(self, validator: PayloadValidator) -> None:
        schema = {"type": "object", "properties": {"tags": {"type": "array", "items": {"type": "string"}}}}
        [issue] = validator.validate({"tags": ["ok", 3]}, schema).errors
        assert issue.path == "/tags/1"
        assert issue.keyword == "type"

    def test_type_mismatch_at_root(self, validator: PayloadValidator) -> None:
        [issue] = validator.validate("a string", {"type": "object"}).errors
        assert issue.path == "/"
        assert issue.keyword == "type"

    def test_validators_are_cached(self, validator: PayloadValidator, user_schema: dict[str, Any]) -> None:
        validator.validate({}, user_schema)
        validator.validate({"email": "x"}, dict(user_schema))
        assert len(validator) == 1
        validator.clear()
        assert len(validator) == 0

    def test_invalid_schema(self, validator: PayloadValidator) -> None:
        with pytest.raises(ValidationFailedError, match="Invalid schema") as exc_info:
            validator.validate({}, {"type": "object", "required": "name"})
        assert exc_info.value.context == {"schemaPath": "/required"}


class TestToDraft7:
    def test_nullable_type(self) -> None:
        assert to_draft7({"type": "string", "nullable": True}) == {
            "type": ["string", "null"],
            "nullable": True,
        }

    def test_nullable_enum(self) -> None:
        result = to_draft7({"type": "string", "enum": ["a"], "nullable": True})
        assert result["enum"] == ["a", None]

    def test_boolean_exclusive_bounds(self) -> None:
        assert to_draft7({"type": "number", "minimum": 1, "exclusiveMinimum": True}) == {
            "type": "number",
            "exclusiveMinimum": 1,
        }
        assert to_draft7({"type": "number", "maximum": 5, "exclusiveMaximum": False}) == {
            "type": "number",
            "maximum": 5,
        }

    def test_recurses_into_subschemas(self) -> None:
        schema = {
            "type": "object",
            "properties": {"a": {"type": "integer", "nullable": True}},
            "items": [{"type": "string", "nullable": True}],
            "oneOf": [{"type": "boolean", "nullable": True}],
        }
        result = to_draft7(schema)
        assert result["properties"]["a"]["type"] == ["integer", "null"]
        assert result["items"][0]["type"] == ["string", "null"]
        assert result["oneOf"][0]["type"] == ["boolean", "null"]

    def test_original_untouched(self) -> None:
        schema = {"type": "string", "nullable": True}
        to_draft7(schema)
        assert schema == {"type": "string", "nullable": True}


class TestModuleHelpers:
    def test_validate_payload(self) -> None:
        clear_validator_cache()
        result = validate_payload(5, {"type": "integer", "minimum": 10})
        assert result.valid is False
        assert result.errors[0].keyword == "minimum"
        assert result.errors[0].params == {"minimum": 10}
