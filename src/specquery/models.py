"""Canonical Pydantic models shared across all specquery modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`CacheConfig`, :class:`SampleConfig`, and :class:`GlobalConfig`.

**Normalized spec models** -- produced by
:func:`~specquery.parser.normalizer.normalize` and consumed by
:class:`~specquery.service.SpecService` and the generators:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`Parameter`,
    :class:`MediaType`, :class:`RequestBody`, :class:`ResponseDefinition`,
    :class:`SecurityScheme`, :class:`Endpoint`, :class:`APIInfo`,
    :class:`ServerInfo`, and :class:`ParsedSpec`.

**Query results and options** -- returned by the accessor and validator, or
passed into the generators:
    :class:`RequestSchema`, :class:`ResponseSchema`, :class:`ValidationIssue`,
    :class:`ValidationResult`, :class:`SampleOptions`, :class:`CurlOptions`.

JSON Schema nodes are deliberately *not* modelled: a schema is a plain
``dict`` (:data:`JsonSchema`) so that every keyword, including ``x-``
extensions, travels through normalization, sampling and emission verbatim.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

JsonSchema = dict[str, Any]
"""A reference-free JSON Schema node, kept as the document's own mapping."""


# --- Config ---


class CacheConfig(BaseModel):
    """Spec cache settings stored in :class:`GlobalConfig`."""

    ttl_seconds: int = Field(default=3600, ge=0, description="Spec cache TTL in seconds")


class SampleConfig(BaseModel):
    """Defaults for generated sample payloads."""

    include_optional: bool = Field(
        default=False, description="Include optional properties in samples"
    )
    max_array_items: int = Field(default=2, ge=0)
    max_depth: int = Field(default=10, ge=1, description="Recursion bound for cyclic schemas")


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specquery/config.json``.

    Loaded and saved by :func:`~specquery.config.load_global_config` and
    :func:`~specquery.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by the project config file,
    environment variables, or CLI flags. See
    :func:`~specquery.config.resolve_config` for the full precedence chain.
    """

    log_level: str = Field(default="WARNING", description="Root log level")
    default_content_type: str = Field(
        default="application/json",
        description="Preferred media type for request/response schema lookups",
    )
    fetch_timeout: float = Field(default=30.0, gt=0, description="Spec fetch timeout in seconds")
    validate_spec: bool = Field(
        default=True, description="Run structural validation before normalizing"
    )
    cache: CacheConfig = Field(default_factory=CacheConfig)
    sample: SampleConfig = Field(default_factory=SampleConfig)


# --- Normalized spec ---


class HTTPMethod(str, enum.Enum):
    """The eight HTTP methods recognised as operations under a path item.

    Declaration order is the canonical sort order used when listing
    endpoints.
    """

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where a non-body parameter can appear (the ``in`` field)."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"


class Parameter(BaseModel):
    """A single path/query/header/cookie parameter of an :class:`Endpoint`.

    Swagger 2.0 inline type keywords are folded into :attr:`schema_` so both
    dialects expose the same shape.
    """

    name: str
    location: ParameterLocation = Field(alias="in")
    required: bool = False
    deprecated: bool = False
    schema_: JsonSchema = Field(default_factory=dict, alias="schema")
    description: str = ""
    example: Any = None

    model_config = ConfigDict(populate_by_name=True)


class NamedExample(BaseModel):
    """An entry of a media type's ``examples`` map."""

    summary: Optional[str] = None
    description: Optional[str] = None
    value: Any = None


class MediaType(BaseModel):
    """A content-type-keyed schema/example pairing."""

    schema_: JsonSchema = Field(default_factory=dict, alias="schema")
    example: Any = None
    examples: Optional[dict[str, NamedExample]] = None

    model_config = ConfigDict(populate_by_name=True)


class RequestBody(BaseModel):
    """Request body of an :class:`Endpoint`, keyed by content type.

    ``content`` keeps the document's declaration order; the first entry is
    the fallback when the preferred content type is missing.
    """

    required: bool = False
    description: str = ""
    content: dict[str, MediaType] = Field(default_factory=dict)


class ResponseDefinition(BaseModel):
    """One declared response. An empty ``content`` map means no body."""

    status_code: str
    description: str = ""
    content: dict[str, MediaType] = Field(default_factory=dict)


class SecurityScheme(BaseModel):
    """A normalized security scheme.

    The ``type`` field discriminates between ``apiKey``, ``http``,
    ``oauth2``, and ``openIdConnect``. Fields belonging to other scheme
    types stay ``None`` and are dropped by :meth:`to_dict`.
    """

    name: str
    type: str
    description: Optional[str] = None
    # apiKey
    location: Optional[str] = Field(default=None, alias="in")
    parameter_name: Optional[str] = None
    # http
    scheme: Optional[str] = None
    bearer_format: Optional[str] = None
    # oauth2
    flows: Optional[dict[str, Any]] = None
    # openIdConnect
    openid_connect_url: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        """Serialise with the document's camelCase keys, omitting fields that do not apply."""
        data = {
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "in": self.location,
            "parameterName": self.parameter_name,
            "scheme": self.scheme,
            "bearerFormat": self.bearer_format,
            "flows": self.flows,
            "openIdConnectUrl": self.openid_connect_url,
        }
        return {key: value for key, value in data.items() if value is not None}


class Endpoint(BaseModel):
    """One HTTP operation: a normalized path plus a lowercase method.

    ``parameters`` is deduplicated by ``(location, name)``; ``responses``
    is keyed by an exact status code, an ``XX`` wildcard such as ``2XX``,
    or ``default``.
    """

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    summary: str = ""
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    deprecated: bool = False
    parameters: list[Parameter] = Field(default_factory=list)
    request_body: Optional[RequestBody] = None
    responses: dict[str, ResponseDefinition] = Field(default_factory=dict)
    security: list[dict[str, list[str]]] = Field(
        default_factory=list, description="Security requirement alternatives"
    )


class APIInfo(BaseModel):
    """API metadata from the document's *Info Object*."""

    title: str
    version: str
    description: Optional[str] = None
    terms_of_service: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_url: Optional[str] = None
    license_name: Optional[str] = None
    license_url: Optional[str] = None


class ServerVariable(BaseModel):
    """A substitution variable of a server URL template."""

    default: str
    enum: Optional[list[str]] = None
    description: Optional[str] = None


class ServerInfo(BaseModel):
    """A base-URL descriptor.

    For Swagger 2.0 documents one entry is synthesised per declared scheme
    from ``host`` and ``basePath``.
    """

    url: str
    description: Optional[str] = None
    variables: Optional[dict[str, ServerVariable]] = None


class ParsedSpec(BaseModel):
    """The single unit of truth for one loaded OpenAPI document.

    Produced by :func:`~specquery.parser.normalizer.normalize`, held by
    :class:`~specquery.service.SpecService` and stored in
    :class:`~specquery.cache.SpecCache`. It is built once per load and
    replaced wholesale; nothing mutates it afterwards.
    """

    info: APIInfo
    openapi_version: str = Field(description="Raw 'openapi' or 'swagger' version string")
    dialect: Literal["swagger2", "openapi3"]
    servers: list[ServerInfo] = Field(default_factory=list)
    endpoints: dict[str, Endpoint] = Field(
        default_factory=dict, description="Keyed by '<method> </path>'"
    )
    schemas: dict[str, JsonSchema] = Field(default_factory=dict)
    security_schemes: list[SecurityScheme] = Field(default_factory=list)
    global_security: list[dict[str, list[str]]] = Field(default_factory=list)
    source: str
    loaded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# --- Query results ---


class RequestSchema(BaseModel):
    """Request body schema selected for one content type."""

    schema_: JsonSchema = Field(alias="schema")
    content_type: str
    required: bool = False
    description: str = ""
    example: Any = None

    model_config = ConfigDict(populate_by_name=True)


class ResponseSchema(BaseModel):
    """Response schema selected for one status code and content type.

    ``status_code`` is the key that matched (``"200"``, ``"2XX"`` or
    ``"default"``), not necessarily the one requested.
    """

    schema_: JsonSchema = Field(alias="schema")
    content_type: str
    status_code: str
    description: str = ""
    example: Any = None

    model_config = ConfigDict(populate_by_name=True)


class ValidationIssue(BaseModel):
    """One schema violation found in a payload."""

    path: str = Field(description="JSON pointer into the payload")
    message: str
    keyword: str = Field(description="The constraint that failed")
    params: dict[str, Any] = Field(default_factory=dict)


class ValidationResult(BaseModel):
    """Outcome of validating a payload; ``errors`` is empty when valid."""

    valid: bool
    errors: list[ValidationIssue] = Field(default_factory=list)


# --- Generator options ---


class SampleOptions(BaseModel):
    """Options for :func:`~specquery.generator.sample.generate_sample`."""

    include_optional: bool = False
    max_array_items: int = Field(default=2, ge=0)
    max_depth: int = Field(default=10, ge=0)


class CurlOptions(BaseModel):
    """Options for :func:`~specquery.generator.curl.generate_curl`."""

    base_url: Optional[str] = None
    auth_token: Optional[str] = None
    auth_type: Literal["bearer", "basic", "api-key"] = "bearer"
    api_key_header: str = "X-API-Key"
    path_params: dict[str, str] = Field(default_factory=dict)
    query_params: dict[str, str] = Field(default_factory=dict)
    include_optional: bool = False
    content_type: str = "application/json"
    pretty: bool = True
    sample: SampleOptions = Field(default_factory=SampleOptions)
