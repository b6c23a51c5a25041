"""Normalize a reference-free OpenAPI 2.0 or 3.x document into a ParsedSpec.

The two dialects disagree on where servers, schemas, security schemes,
request bodies and response payloads live. :func:`normalize` tags the input
as a :class:`Swagger2Document` or :class:`OpenAPI3Document` and dispatches
each of those sections through a per-dialect rule table; everything else
(info, path iteration, parameter merging, security inheritance) is shared.

Swagger 2.0 shapes are translated on the way in:

* a response ``schema`` becomes an ``application/json`` media type, with
  ``examples["application/json"]`` as its example;
* a ``body`` parameter becomes the request body (``application/json``);
* ``formData`` parameters become one synthetic object body, sent as
  ``multipart/form-data`` when any field has ``type: file`` and as
  ``application/x-www-form-urlencoded`` otherwise;
* inline parameter keywords (``type``, ``format``, ``enum``...) become the
  parameter's schema;
* ``securityDefinitions`` become schemes, with ``basic`` mapped to
  ``http``/``basic`` and oauth2 flow names mapped to their 3.x equivalents;
* ``host``/``basePath``/``schemes`` become one server URL per scheme.

Malformed path items, operations and responses are skipped with a WARNING
rather than failing the whole build.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional, Union

from specquery.exceptions import SpecLoadError
from specquery.keys import endpoint_key, normalize_path
from specquery.models import (
    APIInfo,
    Endpoint,
    HTTPMethod,
    JsonSchema,
    MediaType,
    NamedExample,
    Parameter,
    ParameterLocation,
    ParsedSpec,
    RequestBody,
    ResponseDefinition,
    SecurityScheme,
    ServerInfo,
    ServerVariable,
)

logger = logging.getLogger(__name__)

_METHODS = tuple(method.value for method in HTTPMethod)

# Parameter Object keywords that double as JSON Schema keywords in 2.0.
_INLINE_SCHEMA_KEYS = (
    "type",
    "format",
    "items",
    "default",
    "enum",
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "minLength",
    "maxLength",
    "pattern",
    "minItems",
    "maxItems",
    "uniqueItems",
    "multipleOf",
)

_OAUTH2_FLOW_NAMES = {
    "implicit": "implicit",
    "password": "password",
    "application": "clientCredentials",
    "accessCode": "authorizationCode",
}

_JSON = "application/json"


@dataclass(frozen=True)
class Swagger2Document:
    """A document declaring ``swagger: "2.0"``."""

    raw: dict[str, Any]

    @property
    def version(self) -> str:
        return str(self.raw["swagger"])


@dataclass(frozen=True)
class OpenAPI3Document:
    """A document declaring ``openapi: 3.x``."""

    raw: dict[str, Any]

    @property
    def version(self) -> str:
        return str(self.raw["openapi"])


SpecDocument = Union[Swagger2Document, OpenAPI3Document]


@dataclass(frozen=True)
class _DialectRules:
    name: Literal["swagger2", "openapi3"]
    servers: Callable[[dict[str, Any]], list[ServerInfo]]
    schemas: Callable[[dict[str, Any]], dict[str, JsonSchema]]
    security_schemes: Callable[[dict[str, Any]], list[SecurityScheme]]
    request_body: Callable[[dict[str, Any], list[dict[str, Any]]], Optional[RequestBody]]
    response: Callable[[str, dict[str, Any]], ResponseDefinition]


def detect_dialect(document: dict[str, Any], source: str = "") -> SpecDocument:
    """Tag *document* with its dialect.

    Raises:
        SpecLoadError: If the document is neither Swagger 2.0 nor OpenAPI 3.x.
    """
    if str(document.get("swagger", "")) == "2.0":
        return Swagger2Document(document)
    if str(document.get("openapi", "")).startswith("3."):
        return OpenAPI3Document(document)
    raise SpecLoadError(
        "Unrecognized document: expected 'swagger: \"2.0\"' or 'openapi: 3.x'",
        {
            "source": source,
            "swagger": document.get("swagger"),
            "openapi": document.get("openapi"),
        },
    )


def normalize(document: dict[str, Any], source: str) -> ParsedSpec:
    """Build a :class:`~specquery.models.ParsedSpec` from a resolved document.

    Args:
        document: A document with every ``$ref`` already resolved, as
            returned in :attr:`~specquery.parser.loader.LoadResult.document`.
        source: The URL or file path the document was loaded from.

    Returns:
        The normalized spec. Endpoints are keyed by ``"<method> </path>"``.

    Raises:
        SpecLoadError: If the document's dialect cannot be determined.

    Example::

        result = load_spec_document(file_path="petstore.yaml")
        spec = normalize(result.document, result.source)
        spec.endpoints["get /pets"].summary
    """
    tagged = detect_dialect(document, source)
    rules = _SWAGGER2 if isinstance(tagged, Swagger2Document) else _OPENAPI3
    raw = tagged.raw

    global_security = _security_requirements(raw.get("security"))
    spec = ParsedSpec(
        info=_extract_info(raw),
        openapi_version=tagged.version,
        dialect=rules.name,
        servers=rules.servers(raw),
        endpoints=_extract_endpoints(raw, rules, global_security),
        schemas=rules.schemas(raw),
        security_schemes=rules.security_schemes(raw),
        global_security=global_security,
        source=source,
    )
    logger.info(
        "Normalized %s %s: %d endpoints, %d schemas",
        spec.info.title,
        spec.info.version,
        len(spec.endpoints),
        len(spec.schemas),
    )
    return spec


# --- Shared ---


def _extract_info(raw: dict[str, Any]) -> APIInfo:
    info = _as_dict(raw.get("info"))
    contact = _as_dict(info.get("contact"))
    license_info = _as_dict(info.get("license"))
    return APIInfo(
        title=str(info.get("title") or "Untitled API"),
        version=str(info.get("version") or "0.0.0"),
        description=info.get("description"),
        terms_of_service=info.get("termsOfService"),
        contact_name=contact.get("name"),
        contact_email=contact.get("email"),
        contact_url=contact.get("url"),
        license_name=license_info.get("name"),
        license_url=license_info.get("url"),
    )


def _extract_endpoints(
    raw: dict[str, Any],
    rules: _DialectRules,
    global_security: list[dict[str, list[str]]],
) -> dict[str, Endpoint]:
    endpoints: dict[str, Endpoint] = {}

    for path, path_item in _as_dict(raw.get("paths")).items():
        if not isinstance(path_item, dict):
            logger.warning("Skipping malformed path item %s", path)
            continue

        path_params = _as_list(path_item.get("parameters"))
        for method in _METHODS:
            operation = path_item.get(method)
            if operation is None:
                continue
            if not isinstance(operation, dict):
                logger.warning("Skipping malformed operation %s %s", method.upper(), path)
                continue

            endpoint = _extract_endpoint(
                normalize_path(str(path)), method, operation, path_params, global_security, rules
            )
            endpoints[endpoint_key(method, endpoint.path)] = endpoint

    return endpoints


def _extract_endpoint(
    path: str,
    method: str,
    operation: dict[str, Any],
    path_params: list[Any],
    global_security: list[dict[str, list[str]]],
    rules: _DialectRules,
) -> Endpoint:
    params = _merge_parameters(path_params, _as_list(operation.get("parameters")))

    responses: dict[str, ResponseDefinition] = {}
    for status, response in _as_dict(operation.get("responses")).items():
        if not isinstance(response, dict) or "description" not in response:
            logger.warning("Skipping malformed response %s of %s %s", status, method.upper(), path)
            continue
        responses[str(status)] = rules.response(str(status), response)

    # An explicit empty list means "no auth"; only an absent key inherits.
    security = operation.get("security")
    if security is None:
        security_list = global_security
    else:
        security_list = _security_requirements(security)

    return Endpoint(
        path=path,
        method=HTTPMethod(method),
        operation_id=operation.get("operationId"),
        summary=operation.get("summary") or "",
        description=operation.get("description") or "",
        tags=[str(tag) for tag in _as_list(operation.get("tags"))],
        deprecated=bool(operation.get("deprecated", False)),
        parameters=[p for p in map(_extract_parameter, params) if p is not None],
        request_body=rules.request_body(operation, params),
        responses=responses,
        security=security_list,
    )


def _merge_parameters(path_params: list[Any], op_params: list[Any]) -> list[dict[str, Any]]:
    """Combine path-level and operation-level parameters.

    Entries are keyed by ``(in, name)``; an operation-level entry replaces a
    path-level one with the same key but keeps its position.
    """
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    for param in [*path_params, *op_params]:
        if not isinstance(param, dict):
            continue
        merged[(str(param.get("in", "")), str(param.get("name", "")))] = param
    return list(merged.values())


def _extract_parameter(param: dict[str, Any]) -> Optional[Parameter]:
    """Convert a non-body parameter; body and formData entries return ``None``."""
    try:
        location = ParameterLocation(param.get("in"))
    except ValueError:
        return None

    schema = param.get("schema")
    if not isinstance(schema, dict):
        schema = _first_content_schema(param.get("content")) or _inline_schema(param)

    return Parameter(
        name=str(param.get("name", "")),
        location=location,
        required=location is ParameterLocation.PATH or bool(param.get("required", False)),
        deprecated=bool(param.get("deprecated", False)),
        schema=schema,
        description=param.get("description") or "",
        example=param.get("example"),
    )


def _inline_schema(param: dict[str, Any]) -> JsonSchema:
    schema = {key: param[key] for key in _INLINE_SCHEMA_KEYS if key in param}
    if schema.get("type") == "file":
        schema["type"] = "string"
        schema["format"] = "binary"
    return schema


def _first_content_schema(content: Any) -> Optional[JsonSchema]:
    for media in _as_dict(content).values():
        if isinstance(media, dict) and isinstance(media.get("schema"), dict):
            return media["schema"]
    return None


def _security_requirements(value: Any) -> list[dict[str, list[str]]]:
    requirements: list[dict[str, list[str]]] = []
    for item in _as_list(value):
        if isinstance(item, dict):
            requirements.append(
                {str(name): [str(scope) for scope in _as_list(scopes)] for name, scopes in item.items()}
            )
    return requirements


def _extract_content(content: Any) -> dict[str, MediaType]:
    media_types: dict[str, MediaType] = {}
    for content_type, media in _as_dict(content).items():
        if not isinstance(media, dict):
            continue
        examples = {
            name: NamedExample(
                summary=example.get("summary"),
                description=example.get("description"),
                value=example.get("value"),
            )
            for name, example in _as_dict(media.get("examples")).items()
            if isinstance(example, dict)
        }
        media_types[str(content_type)] = MediaType(
            schema=_as_dict(media.get("schema")),
            example=media.get("example"),
            examples=examples or None,
        )
    return media_types


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


# --- OpenAPI 3.x ---


def _openapi3_servers(raw: dict[str, Any]) -> list[ServerInfo]:
    servers: list[ServerInfo] = []
    for server in _as_list(raw.get("servers")):
        if not isinstance(server, dict) or "url" not in server:
            continue
        variables = {
            str(name): ServerVariable(
                default=str(var.get("default", "")),
                enum=[str(v) for v in var["enum"]] if isinstance(var.get("enum"), list) else None,
                description=var.get("description"),
            )
            for name, var in _as_dict(server.get("variables")).items()
            if isinstance(var, dict)
        }
        servers.append(
            ServerInfo(
                url=str(server["url"]),
                description=server.get("description"),
                variables=variables or None,
            )
        )
    return servers


def _openapi3_schemas(raw: dict[str, Any]) -> dict[str, JsonSchema]:
    schemas = _as_dict(_as_dict(raw.get("components")).get("schemas"))
    return {str(name): schema for name, schema in schemas.items() if isinstance(schema, dict)}


def _openapi3_security_schemes(raw: dict[str, Any]) -> list[SecurityScheme]:
    schemes = _as_dict(_as_dict(raw.get("components")).get("securitySchemes"))
    return [
        _security_scheme(str(name), definition)
        for name, definition in schemes.items()
        if isinstance(definition, dict)
    ]


def _security_scheme(name: str, definition: dict[str, Any]) -> SecurityScheme:
    """Keep only the fields that belong to the scheme's type."""
    scheme_type = str(definition.get("type", ""))
    fields: dict[str, Any] = {}
    if scheme_type == "apiKey":
        fields = {"location": definition.get("in"), "parameter_name": definition.get("name")}
    elif scheme_type == "http":
        fields = {"scheme": definition.get("scheme"), "bearer_format": definition.get("bearerFormat")}
    elif scheme_type == "oauth2":
        fields = {"flows": definition.get("flows")}
    elif scheme_type == "openIdConnect":
        fields = {"openid_connect_url": definition.get("openIdConnectUrl")}
    return SecurityScheme(
        name=name, type=scheme_type, description=definition.get("description"), **fields
    )


def _openapi3_request_body(
    operation: dict[str, Any], params: list[dict[str, Any]]
) -> Optional[RequestBody]:
    body = operation.get("requestBody")
    if not isinstance(body, dict):
        return None
    return RequestBody(
        required=bool(body.get("required", False)),
        description=body.get("description") or "",
        content=_extract_content(body.get("content")),
    )


def _openapi3_response(status: str, response: dict[str, Any]) -> ResponseDefinition:
    return ResponseDefinition(
        status_code=status,
        description=response.get("description") or "",
        content=_extract_content(response.get("content")),
    )


# --- Swagger 2.0 ---


def _swagger2_servers(raw: dict[str, Any]) -> list[ServerInfo]:
    host = raw.get("host") or "localhost"
    base_path = raw.get("basePath") or ""
    schemes = [str(s) for s in _as_list(raw.get("schemes"))] or ["https"]
    return [ServerInfo(url=f"{scheme}://{host}{base_path}") for scheme in schemes]


def _swagger2_schemas(raw: dict[str, Any]) -> dict[str, JsonSchema]:
    definitions = _as_dict(raw.get("definitions"))
    return {str(name): schema for name, schema in definitions.items() if isinstance(schema, dict)}


def _swagger2_security_schemes(raw: dict[str, Any]) -> list[SecurityScheme]:
    schemes: list[SecurityScheme] = []
    for name, definition in _as_dict(raw.get("securityDefinitions")).items():
        if not isinstance(definition, dict):
            continue
        scheme_type = definition.get("type")
        if scheme_type == "basic":
            schemes.append(
                SecurityScheme(
                    name=str(name),
                    type="http",
                    scheme="basic",
                    description=definition.get("description"),
                )
            )
        elif scheme_type == "oauth2":
            flow = _OAUTH2_FLOW_NAMES.get(str(definition.get("flow")), str(definition.get("flow")))
            flow_body = {
                key: definition[key]
                for key in ("authorizationUrl", "tokenUrl")
                if key in definition
            }
            flow_body["scopes"] = _as_dict(definition.get("scopes"))
            schemes.append(
                SecurityScheme(
                    name=str(name),
                    type="oauth2",
                    flows={flow: flow_body},
                    description=definition.get("description"),
                )
            )
        else:
            schemes.append(_security_scheme(str(name), definition))
    return schemes


def _swagger2_request_body(
    operation: dict[str, Any], params: list[dict[str, Any]]
) -> Optional[RequestBody]:
    body = next((p for p in params if p.get("in") == "body"), None)
    if body is not None:
        return RequestBody(
            required=bool(body.get("required", False)),
            description=body.get("description") or "",
            content={_JSON: MediaType(schema=_as_dict(body.get("schema")))},
        )

    form_fields = [p for p in params if p.get("in") == "formData"]
    if not form_fields:
        return None

    properties: dict[str, JsonSchema] = {}
    required: list[str] = []
    for field in form_fields:
        field_name = str(field.get("name", ""))
        field_schema = _inline_schema(field)
        if field.get("description"):
            field_schema["description"] = field["description"]
        properties[field_name] = field_schema
        if field.get("required"):
            required.append(field_name)

    schema: JsonSchema = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required

    if any(field.get("type") == "file" for field in form_fields):
        content_type = "multipart/form-data"
    else:
        content_type = "application/x-www-form-urlencoded"

    return RequestBody(required=bool(required), content={content_type: MediaType(schema=schema)})


def _swagger2_response(status: str, response: dict[str, Any]) -> ResponseDefinition:
    content: dict[str, MediaType] = {}
    if isinstance(response.get("schema"), dict):
        content[_JSON] = MediaType(
            schema=response["schema"],
            example=_as_dict(response.get("examples")).get(_JSON),
        )
    return ResponseDefinition(
        status_code=status,
        description=response.get("description") or "",
        content=content,
    )


_OPENAPI3 = _DialectRules(
    name="openapi3",
    servers=_openapi3_servers,
    schemas=_openapi3_schemas,
    security_schemes=_openapi3_security_schemes,
    request_body=_openapi3_request_body,
    response=_openapi3_response,
)

_SWAGGER2 = _DialectRules(
    name="swagger2",
    servers=_swagger2_servers,
    schemas=_swagger2_schemas,
    security_schemes=_swagger2_security_schemes,
    request_body=_swagger2_request_body,
    response=_swagger2_response,
)
