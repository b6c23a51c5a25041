"""MCP transport exposing the tools over stdio.

:func:`build_server` registers one FastMCP tool per entry in
:data:`~specquery.tools.TOOLS`, with typed arguments so clients receive a
JSON Schema for each. Argument names are the camelCase names clients send;
every tool returns the uniform envelope dict.

stdout belongs to the protocol while the server runs, so logging must be
configured on stderr before :func:`serve` is called.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Optional

from mcp.server.fastmcp import FastMCP

from specquery.service import SpecService
from specquery.tools import TOOLS, call_tool

logger = logging.getLogger(__name__)

SERVER_NAME = "specquery"

Method = Literal["get", "post", "put", "patch", "delete", "options", "head", "trace"]


def _arguments(**kwargs: Any) -> dict[str, Any]:
    return {key: value for key, value in kwargs.items() if value is not None}


def build_server(service: SpecService) -> FastMCP:
    """Create a FastMCP server whose tools operate on *service*."""
    mcp = FastMCP(SERVER_NAME)

    def register(name: str):
        return mcp.tool(name=name, description=TOOLS[name].description)

    @register("load_spec")
    def load_spec(url: Optional[str] = None, filePath: Optional[str] = None) -> dict[str, Any]:  # noqa: N803
        return call_tool(service, "load_spec", _arguments(url=url, filePath=filePath))

    @register("list_endpoints")
    def list_endpoints(
        tag: Optional[str] = None,
        method: Optional[Method] = None,
        deprecated: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> dict[str, Any]:
        return call_tool(
            service,
            "list_endpoints",
            _arguments(tag=tag, method=method, deprecated=deprecated, limit=limit),
        )

    @register("search_endpoints")
    def search_endpoints(query: str, limit: int = 20) -> dict[str, Any]:
        return call_tool(service, "search_endpoints", {"query": query, "limit": limit})

    @register("get_endpoint_details")
    def get_endpoint_details(path: str, method: Method) -> dict[str, Any]:
        return call_tool(service, "get_endpoint_details", {"path": path, "method": method})

    @register("get_request_schema")
    def get_request_schema(path: str, method: Method) -> dict[str, Any]:
        return call_tool(service, "get_request_schema", {"path": path, "method": method})

    @register("get_response_schema")
    def get_response_schema(path: str, method: Method, statusCode: str = "200") -> dict[str, Any]:  # noqa: N803
        return call_tool(
            service,
            "get_response_schema",
            {"path": path, "method": method, "statusCode": statusCode},
        )

    @register("validate_payload")
    def validate_payload(path: str, method: Method, payload: Any) -> dict[str, Any]:
        return call_tool(
            service, "validate_payload", {"path": path, "method": method, "payload": payload}
        )

    @register("generate_sample")
    def generate_sample(path: str, method: Method, includeOptional: bool = False) -> dict[str, Any]:  # noqa: N803
        return call_tool(
            service,
            "generate_sample",
            {"path": path, "method": method, "includeOptional": includeOptional},
        )

    @register("get_auth_schemes")
    def get_auth_schemes() -> dict[str, Any]:
        return call_tool(service, "get_auth_schemes")

    @register("get_servers")
    def get_servers() -> dict[str, Any]:
        return call_tool(service, "get_servers")

    @register("generate_typescript_types")
    def generate_typescript_types(
        schemaName: Optional[str] = None,  # noqa: N803
        path: Optional[str] = None,
        method: Optional[Method] = None,
        includeComments: bool = True,  # noqa: N803
    ) -> dict[str, Any]:
        return call_tool(
            service,
            "generate_typescript_types",
            _arguments(
                schemaName=schemaName, path=path, method=method, includeComments=includeComments
            ),
        )

    @register("generate_curl")
    def generate_curl(
        path: str,
        method: Method,
        baseUrl: Optional[str] = None,  # noqa: N803
        authToken: Optional[str] = None,  # noqa: N803
        authType: Optional[Literal["bearer", "basic", "api-key"]] = None,  # noqa: N803
        apiKeyHeader: Optional[str] = None,  # noqa: N803
        pathParams: Optional[dict[str, str]] = None,  # noqa: N803
        queryParams: Optional[dict[str, str]] = None,  # noqa: N803
        includeOptional: bool = False,  # noqa: N803
    ) -> dict[str, Any]:
        return call_tool(
            service,
            "generate_curl",
            _arguments(
                path=path,
                method=method,
                baseUrl=baseUrl,
                authToken=authToken,
                authType=authType,
                apiKeyHeader=apiKeyHeader,
                pathParams=pathParams,
                queryParams=queryParams,
                includeOptional=includeOptional,
            ),
        )

    return mcp


def serve(service: SpecService) -> None:
    """Run the MCP server over stdio until the client disconnects."""
    logger.info("Starting %s MCP server on stdio", SERVER_NAME)
    build_server(service).run(transport="stdio")
