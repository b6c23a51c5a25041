"""Tools returning request/response schemas and validating payloads."""

from __future__ import annotations

import json
from typing import Any

from specquery.exceptions import NoRequestBodyError
from specquery.service import SpecService
from specquery.tools.inputs import EndpointInput, ResponseSchemaInput, ValidatePayloadInput
from specquery.tools.response import tool_handler
from specquery.validator import validate_payload as run_validation


@tool_handler("get request schema", EndpointInput)
def get_request_schema(service: SpecService, params: EndpointInput) -> dict[str, Any]:
    method = params.method.value
    result = service.get_request_schema(params.path, method)
    if result is None:
        return {
            "hasRequestBody": False,
            "message": f"Endpoint {method.upper()} {params.path} does not have a request body",
        }

    data: dict[str, Any] = {
        "contentType": result.content_type,
        "required": result.required,
        "description": result.description,
        "schema": result.schema_,
    }
    if result.example is not None:
        data["example"] = result.example
    return data


@tool_handler("get response schema", ResponseSchemaInput)
def get_response_schema(service: SpecService, params: ResponseSchemaInput) -> dict[str, Any]:
    method = params.method.value
    result = service.get_response_schema(params.path, method, params.status_code)
    if result is None:
        return {
            "hasResponseBody": False,
            "message": (
                f"No response schema found for {method.upper()} {params.path} "
                f"with status {params.status_code}"
            ),
        }

    data: dict[str, Any] = {
        "statusCode": result.status_code,
        "contentType": result.content_type,
        "description": result.description,
        "schema": result.schema_,
    }
    if result.example is not None:
        data["example"] = result.example
    return data


@tool_handler("validate payload", ValidatePayloadInput)
def validate_payload(service: SpecService, params: ValidatePayloadInput) -> dict[str, Any]:
    method = params.method.value
    request = service.get_request_schema(params.path, method)
    if request is None:
        raise NoRequestBodyError(params.path, method)

    payload = params.payload
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError:
            # Not JSON: validate the raw string, which reports a type error.
            pass

    result = run_validation(payload, request.schema_)
    return {
        "valid": result.valid,
        "errors": [issue.model_dump() for issue in result.errors],
    }
