"""Build ready-to-run cURL commands for an endpoint.

The command targets the explicit base URL option, else the first declared
server (with variable defaults substituted), else
``https://api.example.com``. Path parameters without a caller value fall
back to the parameter example, ``1`` for numeric types, or a ``<name>``
placeholder. POST, PUT and PATCH requests carry a generated sample body.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional
from urllib.parse import quote

from specquery.generator.sample import generate_sample
from specquery.models import (
    CurlOptions,
    Endpoint,
    JsonSchema,
    Parameter,
    ParameterLocation,
    ServerInfo,
)

FALLBACK_BASE_URL = "https://api.example.com"

_BODY_METHODS = frozenset({"post", "put", "patch"})
_PATH_TEMPLATE = re.compile(r"\{([^{}]+)\}")


def generate_curl(
    endpoint: Endpoint,
    request_schema: Optional[JsonSchema],
    servers: list[ServerInfo],
    options: Optional[CurlOptions] = None,
) -> str:
    """Render a cURL command for *endpoint*.

    Args:
        endpoint: The endpoint to call.
        request_schema: Schema for the request body, or ``None``.
        servers: Declared servers, used when no base URL is given.
        options: Rendering options; defaults to :class:`CurlOptions()`.

    Returns:
        The command. With ``pretty`` set, arguments are joined by a
        backslash continuation and two-space indent.
    """
    opts = options or CurlOptions()
    method = endpoint.method.value
    has_body = bool(request_schema) and method in _BODY_METHODS

    parts = ["curl"]
    if method != "get":
        parts.append(f"-X {method.upper()}")
    parts.append(shell_quote(_build_url(endpoint, servers, opts)))

    for name, value in _headers(endpoint, opts, has_body):
        parts.append(f"-H {shell_quote(f'{name}: {value}')}")

    if has_body:
        sample_options = opts.sample.model_copy(update={"include_optional": opts.include_optional})
        sample = generate_sample(request_schema or {}, sample_options)
        body = json.dumps(sample, indent=2 if opts.pretty else None)
        parts.append(f"-d {shell_quote(body)}")

    separator = " \\\n  " if opts.pretty else " "
    return separator.join(parts)


def shell_quote(value: str) -> str:
    """Wrap *value* in single quotes, escaping embedded single quotes."""
    return "'" + value.replace("'", "'\\''") + "'"


def resolve_base_url(servers: list[ServerInfo], override: Optional[str] = None) -> str:
    """Pick the base URL and strip a trailing slash."""
    if override:
        url = override
    elif servers:
        server = servers[0]
        url = server.url
        for name, variable in (server.variables or {}).items():
            url = url.replace(f"{{{name}}}", variable.default)
    else:
        url = FALLBACK_BASE_URL
    return url.rstrip("/")


def _build_url(endpoint: Endpoint, servers: list[ServerInfo], opts: CurlOptions) -> str:
    params = {p.name: p for p in endpoint.parameters if p.location is ParameterLocation.PATH}

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in opts.path_params:
            return quote(str(opts.path_params[name]), safe="")
        return _path_placeholder(name, params.get(name))

    path = _PATH_TEMPLATE.sub(substitute, endpoint.path)

    query = [(key, str(value)) for key, value in opts.query_params.items()]
    for param in endpoint.parameters:
        if param.location is not ParameterLocation.QUERY or param.name in opts.query_params:
            continue
        if param.required or opts.include_optional:
            query.append((param.name, _example_value(param, use_default=True)))

    url = f"{resolve_base_url(servers, opts.base_url)}{path}"
    if query:
        url += "?" + "&".join(f"{quote(k, safe='')}={quote(v, safe='')}" for k, v in query)
    return url


def _path_placeholder(name: str, param: Optional[Parameter]) -> str:
    if param is not None:
        example = _first_present(param.example, param.schema_.get("example"))
        if example is not None:
            return str(example)
        if param.schema_.get("type") in ("integer", "number"):
            return "1"
    return f"<{name}>"


def _headers(endpoint: Endpoint, opts: CurlOptions, has_body: bool) -> list[tuple[str, str]]:
    headers: list[tuple[str, str]] = []
    if has_body:
        headers.append(("Content-Type", opts.content_type))
    headers.append(("Accept", "application/json"))

    if opts.auth_token:
        if opts.auth_type == "bearer":
            headers.append(("Authorization", f"Bearer {opts.auth_token}"))
        elif opts.auth_type == "basic":
            headers.append(("Authorization", f"Basic {opts.auth_token}"))
        else:
            headers.append((opts.api_key_header, opts.auth_token))
    elif endpoint.security:
        headers.append(("Authorization", "Bearer <YOUR_TOKEN>"))

    for param in endpoint.parameters:
        if param.location is ParameterLocation.HEADER and param.required:
            headers.append((param.name, _example_value(param)))
    return headers


def _example_value(param: Parameter, use_default: bool = False) -> str:
    schema = param.schema_
    candidates: list[Any] = [param.example, schema.get("example")]
    if use_default:
        enum = schema.get("enum")
        candidates.extend([schema.get("default"), enum[0] if isinstance(enum, list) and enum else None])
    value = _first_present(*candidates)
    return "<value>" if value is None else _stringify(value)


def _first_present(*values: Any) -> Any:
    return next((value for value in values if value is not None), None)


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)
