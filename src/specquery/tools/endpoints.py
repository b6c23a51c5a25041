"""Tools that list, search and describe endpoints."""

from __future__ import annotations

from typing import Any, Optional

from specquery.models import Endpoint, MediaType
from specquery.service import SpecService
from specquery.tools.inputs import EndpointInput, ListEndpointsInput, SearchEndpointsInput
from specquery.tools.response import tool_handler


def endpoint_summary(endpoint: Endpoint) -> dict[str, Any]:
    summary: dict[str, Any] = {
        "path": endpoint.path,
        "method": endpoint.method.value.upper(),
        "summary": endpoint.summary,
        "tags": endpoint.tags,
        "deprecated": endpoint.deprecated,
    }
    if endpoint.operation_id:
        summary["operationId"] = endpoint.operation_id
    return summary


@tool_handler("list endpoints", ListEndpointsInput)
def list_endpoints(service: SpecService, params: ListEndpointsInput) -> dict[str, Any]:
    """List endpoints, optionally filtered by tag, method and deprecation.

    Deprecated endpoints are only excluded when ``deprecated`` is
    explicitly ``False``. ``totalCount`` counts matches before the limit.
    """
    matches = [
        endpoint
        for endpoint in service.sorted_endpoints()
        if (params.tag is None or params.tag in endpoint.tags)
        and (params.method is None or endpoint.method is params.method)
        and not (params.deprecated is False and endpoint.deprecated)
    ]
    limited = matches[: params.limit] if params.limit else matches
    return {
        "endpoints": [endpoint_summary(e) for e in limited],
        "totalCount": len(matches),
    }


@tool_handler("search endpoints", SearchEndpointsInput)
def search_endpoints(service: SpecService, params: SearchEndpointsInput) -> dict[str, Any]:
    query = params.query.lower()
    matches = [
        endpoint for endpoint in service.sorted_endpoints() if query in _search_text(endpoint)
    ]
    return {
        "endpoints": [endpoint_summary(e) for e in matches[: params.limit]],
        "totalCount": len(matches),
    }


def _search_text(endpoint: Endpoint) -> str:
    fields = [
        endpoint.path,
        endpoint.summary,
        endpoint.description,
        endpoint.operation_id or "",
        *endpoint.tags,
    ]
    return " ".join(fields).lower()


@tool_handler("get endpoint details", EndpointInput)
def get_endpoint_details(service: SpecService, params: EndpointInput) -> dict[str, Any]:
    endpoint = service.get_endpoint(params.path, params.method.value)
    preferred = service.default_content_type

    details: dict[str, Any] = {
        **endpoint_summary(endpoint),
        "description": endpoint.description,
        "parameters": [
            {
                "name": param.name,
                "in": param.location.value,
                "required": param.required,
                "deprecated": param.deprecated,
                "description": param.description,
                "schema": param.schema_,
                **({"example": param.example} if param.example is not None else {}),
            }
            for param in endpoint.parameters
        ],
        "responses": [
            {
                "statusCode": status,
                "description": response.description,
                "contentTypes": list(response.content),
                **_media_fields(response.content, preferred),
            }
            for status, response in endpoint.responses.items()
        ],
        "security": [
            {
                "schemes": list(requirement),
                "scopes": [scope for scopes in requirement.values() for scope in scopes],
            }
            for requirement in endpoint.security
        ],
    }

    body = endpoint.request_body
    if body is not None:
        details["requestBody"] = {
            "required": body.required,
            "description": body.description,
            "contentTypes": list(body.content),
            **_media_fields(body.content, preferred),
        }
    return details


def _media_fields(content: dict[str, MediaType], preferred: str) -> dict[str, Any]:
    media: Optional[MediaType] = content.get(preferred)
    if media is None and content:
        media = next(iter(content.values()))
    if media is None:
        return {}
    fields: dict[str, Any] = {"schema": media.schema_}
    if media.example is not None:
        fields["example"] = media.example
    return fields
