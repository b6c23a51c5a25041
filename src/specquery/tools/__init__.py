"""Tool handlers -- the plain-data boundary around :class:`~specquery.service.SpecService`.

Every handler has the signature ``handler(service, arguments) -> envelope``
where *arguments* is a plain dict and the envelope is described in
:mod:`specquery.tools.response`. :data:`TOOLS` is the registry used by the
MCP server and the ``specquery call`` command.

Typical usage::

    service = SpecService()
    call_tool(service, "load_spec", {"filePath": "petstore.json"})
    call_tool(service, "list_endpoints", {"tag": "pets"})
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from specquery.service import SpecService
from specquery.tools.codegen import generate_curl, generate_sample, generate_typescript_types
from specquery.tools.endpoints import get_endpoint_details, list_endpoints, search_endpoints
from specquery.tools.response import ToolHandler, error_response
from specquery.tools.schemas import get_request_schema, get_response_schema, validate_payload
from specquery.tools.spec import get_auth_schemes, get_servers, load_spec


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    handler: ToolHandler


TOOLS: dict[str, Tool] = {
    tool.name: tool
    for tool in (
        Tool(
            "load_spec",
            "Load an OpenAPI/Swagger spec from a URL or local file. Must be called before other tools.",
            load_spec,
        ),
        Tool(
            "list_endpoints",
            "List API endpoints, optionally filtered by tag, HTTP method or deprecation.",
            list_endpoints,
        ),
        Tool(
            "search_endpoints",
            "Search endpoints by keyword across path, summary, description, operationId and tags.",
            search_endpoints,
        ),
        Tool(
            "get_endpoint_details",
            "Get parameters, request body, responses and security for one endpoint.",
            get_endpoint_details,
        ),
        Tool(
            "get_request_schema",
            "Get the dereferenced request body schema for an endpoint.",
            get_request_schema,
        ),
        Tool(
            "get_response_schema",
            "Get the dereferenced response schema for an endpoint and status code (default 200).",
            get_response_schema,
        ),
        Tool(
            "validate_payload",
            "Validate a JSON payload against an endpoint's request schema.",
            validate_payload,
        ),
        Tool(
            "generate_sample",
            "Generate a sample request payload for an endpoint.",
            generate_sample,
        ),
        Tool(
            "get_auth_schemes",
            "List security schemes and the schemes each endpoint requires.",
            get_auth_schemes,
        ),
        Tool("get_servers", "List the API's base URLs and server variables.", get_servers),
        Tool(
            "generate_typescript_types",
            "Generate TypeScript types from a named schema or an endpoint's request/response.",
            generate_typescript_types,
        ),
        Tool(
            "generate_curl",
            "Generate a ready-to-run cURL command for an endpoint.",
            generate_curl,
        ),
    )
}


def call_tool(
    service: SpecService, name: str, arguments: Optional[dict[str, Any]] = None
) -> dict[str, Any]:
    """Dispatch one tool call by name; unknown names yield an ``INVALID_INPUT`` envelope."""
    tool = TOOLS.get(name)
    if tool is None:
        return error_response(
            f"Unknown tool: {name}", "INVALID_INPUT", {"tool": name, "available": list(TOOLS)}
        )
    return tool.handler(service, arguments or {})


__all__ = ["TOOLS", "Tool", "call_tool"]
