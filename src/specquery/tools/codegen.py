"""Tools generating sample payloads, TypeScript types and cURL commands."""

from __future__ import annotations

from typing import Any

from specquery.exceptions import InvalidInputError, NoRequestBodyError
from specquery.generator.curl import generate_curl as render_curl
from specquery.generator.sample import generate_sample as render_sample
from specquery.generator.typescript import generate_endpoint_types, generate_typescript
from specquery.models import CurlOptions
from specquery.service import SpecService
from specquery.tools.inputs import GenerateCurlInput, GenerateSampleInput, GenerateTypesInput
from specquery.tools.response import tool_handler


@tool_handler("generate sample", GenerateSampleInput)
def generate_sample(service: SpecService, params: GenerateSampleInput) -> dict[str, Any]:
    method = params.method.value
    request = service.get_request_schema(params.path, method)
    if request is None:
        raise NoRequestBodyError(params.path, method)

    options = service.sample_defaults.model_copy(
        update={"include_optional": params.include_optional}
    )
    return {
        "sample": render_sample(request.schema_, options),
        "contentType": request.content_type,
    }


@tool_handler("generate TypeScript types", GenerateTypesInput)
def generate_typescript_types(service: SpecService, params: GenerateTypesInput) -> dict[str, Any]:
    if params.schema_name:
        schema = service.get_schema(params.schema_name)
        return {
            "schemaName": params.schema_name,
            "typescript": generate_typescript(
                schema,
                name=params.schema_name,
                include_comments=params.include_comments,
                max_depth=service.sample_defaults.max_depth,
            ),
        }

    if not (params.path and params.method):
        raise InvalidInputError(
            "Either schemaName or both path and method must be provided",
            {
                "hint": "Use schemaName for a component schema, or path and method "
                "for endpoint request/response types"
            },
        )

    method = params.method.value
    endpoint = service.get_endpoint(params.path, method)
    request = service.get_request_schema(params.path, method)
    response = service.get_response_schema(params.path, method, "200")

    typescript = generate_endpoint_types(
        endpoint.operation_id,
        endpoint.path,
        method,
        request.schema_ if request else None,
        response.schema_ if response else None,
    )
    if not typescript:
        return {
            "path": endpoint.path,
            "method": method,
            "message": "Endpoint has no request body or response schema",
            "typescript": f"// No types to generate for {method.upper()} {endpoint.path}",
        }

    data: dict[str, Any] = {"path": endpoint.path, "method": method, "typescript": typescript}
    if endpoint.operation_id:
        data["operationId"] = endpoint.operation_id
    return data


@tool_handler("generate cURL", GenerateCurlInput)
def generate_curl(service: SpecService, params: GenerateCurlInput) -> dict[str, Any]:
    method = params.method.value
    endpoint = service.get_endpoint(params.path, method)
    request = service.get_request_schema(params.path, method)

    options = CurlOptions(
        base_url=params.base_url,
        auth_token=params.auth_token,
        auth_type=params.auth_type,
        api_key_header=params.api_key_header,
        path_params=params.path_params,
        query_params=params.query_params,
        include_optional=params.include_optional,
        content_type=request.content_type if request else "application/json",
        sample=service.sample_defaults,
    )
    return {
        "path": endpoint.path,
        "method": method.upper(),
        "curl": render_curl(
            endpoint, request.schema_ if request else None, service.servers, options
        ),
        "hint": "Copy and paste this command into a terminal or import it into Postman",
    }
