"""Tests for the MCP server wiring in specquery.server."""

from __future__ import annotations

import asyncio

import pytest

from specquery.server import SERVER_NAME, build_server
from specquery.service import SpecService
from specquery.tools import TOOLS


@pytest.fixture
def listed_tools(service: SpecService) -> dict:
    server = build_server(service)
    tools = asyncio.run(server.list_tools())
    return {tool.name: tool for tool in tools}


class TestBuildServer:
    def test_name(self, service: SpecService) -> None:
        assert build_server(service).name == SERVER_NAME

    def test_registers_every_tool(self, listed_tools: dict) -> None:
        assert set(listed_tools) == set(TOOLS)

    def test_descriptions(self, listed_tools: dict) -> None:
        for name, tool in listed_tools.items():
            assert tool.description == TOOLS[name].description

    def test_camel_case_arguments(self, listed_tools: dict) -> None:
        assert set(listed_tools["load_spec"].inputSchema["properties"]) == {"url", "filePath"}
        assert "statusCode" in listed_tools["get_response_schema"].inputSchema["properties"]
        curl_props = listed_tools["generate_curl"].inputSchema["properties"]
        assert {"baseUrl", "authToken", "pathParams", "queryParams", "includeOptional"} <= set(curl_props)

    def test_required_arguments(self, listed_tools: dict) -> None:
        schema = listed_tools["get_endpoint_details"].inputSchema
        assert set(schema["required"]) == {"path", "method"}
        assert "required" not in listed_tools["get_servers"].inputSchema or not listed_tools[
            "get_servers"
        ].inputSchema["required"]
