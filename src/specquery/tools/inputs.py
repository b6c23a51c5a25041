"""Pydantic models validating tool arguments.

Field aliases are the camelCase names clients send (``filePath``,
``statusCode``...); the snake_case names are accepted too. Methods are
accepted in any case and normalized to :class:`~specquery.models.HTTPMethod`.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator

from specquery.models import HTTPMethod


class ToolInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _lower(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


def _string_map(value: Any) -> Any:
    if isinstance(value, str):
        value = json.loads(value) if value.strip() else {}
    if isinstance(value, dict):
        return {str(k): v if isinstance(v, str) else json.dumps(v) for k, v in value.items()}
    return value


Method = Annotated[HTTPMethod, BeforeValidator(_lower)]
StringMap = Annotated[dict[str, str], BeforeValidator(_string_map)]


class LoadSpecInput(ToolInput):
    url: Optional[str] = Field(default=None, description="URL to fetch the OpenAPI spec from")
    file_path: Optional[str] = Field(
        default=None, alias="filePath", description="Local file path to the OpenAPI spec"
    )

    @model_validator(mode="after")
    def _require_source(self) -> LoadSpecInput:
        if not self.url and not self.file_path:
            raise ValueError("Either url or filePath must be provided")
        return self


class ListEndpointsInput(ToolInput):
    tag: Optional[str] = Field(default=None, description="Filter by tag")
    method: Optional[Method] = Field(default=None, description="Filter by HTTP method")
    deprecated: Optional[bool] = Field(
        default=None, description="Set to false to exclude deprecated endpoints"
    )
    limit: Optional[int] = Field(default=None, gt=0, description="Maximum number of results")


class SearchEndpointsInput(ToolInput):
    query: str = Field(min_length=1, description="Text matched against path, summary, description, operationId and tags")
    limit: int = Field(default=20, gt=0)


class EndpointInput(ToolInput):
    """Arguments addressing one endpoint."""

    path: str = Field(min_length=1, description="API path, e.g. /users/{id}")
    method: Method = Field(description="HTTP method")


class ResponseSchemaInput(EndpointInput):
    status_code: str = Field(
        default="200",
        alias="statusCode",
        pattern=r"^([1-5][0-9X]{2}|default)$",
        description="Status code such as 200, 404 or 2XX",
    )

    @field_validator("status_code", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return "default" if value.lower() == "default" else value.upper()
        return value


class ValidatePayloadInput(EndpointInput):
    payload: Any = Field(default=None, description="Payload, or a JSON string of it")


class GenerateSampleInput(EndpointInput):
    include_optional: bool = Field(default=False, alias="includeOptional")


class GenerateTypesInput(ToolInput):
    schema_name: Optional[str] = Field(default=None, alias="schemaName")
    path: Optional[str] = None
    method: Optional[Method] = None
    include_comments: bool = Field(default=True, alias="includeComments")


class GenerateCurlInput(EndpointInput):
    base_url: Optional[str] = Field(default=None, alias="baseUrl")
    auth_token: Optional[str] = Field(default=None, alias="authToken")
    auth_type: Literal["bearer", "basic", "api-key"] = Field(default="bearer", alias="authType")
    api_key_header: str = Field(default="X-API-Key", alias="apiKeyHeader")
    path_params: StringMap = Field(default_factory=dict, alias="pathParams")
    query_params: StringMap = Field(default_factory=dict, alias="queryParams")
    include_optional: bool = Field(default=False, alias="includeOptional")
