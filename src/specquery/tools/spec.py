"""Tools that load a spec and report spec-wide metadata."""

from __future__ import annotations

from typing import Any

from specquery.service import SpecService
from specquery.tools.inputs import LoadSpecInput
from specquery.tools.response import tool_handler


@tool_handler("load spec", LoadSpecInput)
def load_spec(service: SpecService, params: LoadSpecInput) -> dict[str, Any]:
    spec = service.load(url=params.url, file_path=params.file_path)
    return {
        "message": "OpenAPI spec loaded successfully",
        "title": spec.info.title,
        "version": spec.info.version,
        "openApiVersion": spec.openapi_version,
        "endpointCount": len(spec.endpoints),
        "schemaCount": len(spec.schemas),
        "source": spec.source,
    }


@tool_handler("get servers")
def get_servers(service: SpecService) -> dict[str, Any]:
    return {
        "servers": [
            server.model_dump(exclude_none=True) for server in service.servers
        ]
    }


@tool_handler("get auth schemes")
def get_auth_schemes(service: SpecService) -> dict[str, Any]:
    """Report schemes, global requirement names, and per-endpoint requirement names.

    Endpoint security already reflects inheritance from the global list, so
    an endpoint that opts out with ``security: []`` reports no schemes.
    """
    requirements = {
        f"{endpoint.method.value.upper()} {endpoint.path}": _scheme_names(endpoint.security)
        for endpoint in service.sorted_endpoints()
    }
    return {
        "schemes": [scheme.to_dict() for scheme in service.security_schemes],
        "globalSecurity": _scheme_names(service.global_security),
        "endpointRequirements": requirements,
    }


def _scheme_names(security: list[dict[str, list[str]]]) -> list[str]:
    names: list[str] = []
    for requirement in security:
        for name in requirement:
            if name not in names:
                names.append(name)
    return names
