"""SpecService -- the context object holding the active normalized spec.

A :class:`SpecService` owns at most one :class:`~specquery.models.ParsedSpec`
at a time. It is created explicitly and handed to every tool handler, so
tests and embedders can run several services side by side.

Loading goes through the :class:`~specquery.cache.SpecCache` under one fixed
key: a cached spec whose ``source`` matches the request is reused, anything
else is fetched, normalized, cached and made active. Loads are serialized
with a lock and the active spec is swapped with a single assignment, so a
reader never sees a half-built spec.
"""

from __future__ import annotations

import functools
import logging
import threading
from typing import Any, Callable, Optional

from specquery.cache import SpecCache
from specquery.exceptions import (
    EndpointNotFoundError,
    SchemaNotFoundError,
    SpecNotLoadedError,
)
from specquery.keys import (
    endpoint_key,
    matches_status_code,
    normalize_method,
    normalize_path,
    parse_endpoint_key,
    sort_key,
)
from specquery.models import (
    Endpoint,
    GlobalConfig,
    JsonSchema,
    MediaType,
    ParsedSpec,
    RequestSchema,
    ResponseSchema,
    SampleOptions,
    SecurityScheme,
    ServerInfo,
)
from specquery.parser.loader import LoadResult, load_spec_document
from specquery.parser.normalizer import normalize

logger = logging.getLogger(__name__)

CACHE_KEY = "current_spec"
DEFAULT_CONTENT_TYPE = "application/json"

LoaderFn = Callable[..., LoadResult]

__all__ = [
    "CACHE_KEY",
    "SpecService",
    "endpoint_key",
    "matches_status_code",
    "normalize_method",
    "normalize_path",
    "parse_endpoint_key",
    "sort_key",
]


class SpecService:
    """Holds one active spec and answers lookups against it.

    Args:
        cache: Spec cache to consult on load. A private one is created
            when omitted.
        loader: Callable taking ``url=`` and ``file_path=`` keyword
            arguments and returning a :class:`LoadResult`. Defaults to
            :func:`~specquery.parser.loader.load_spec_document`.
        ttl: TTL in seconds for cached specs; ``None`` uses the cache's
            default.
        default_content_type: Preferred media type for schema lookups when
            the caller does not name one.
        sample_defaults: Generator defaults used by the sample and cURL
            tools; callers may still override ``include_optional``.
    """

    def __init__(
        self,
        cache: Optional[SpecCache] = None,
        loader: Optional[LoaderFn] = None,
        ttl: Optional[float] = None,
        default_content_type: str = DEFAULT_CONTENT_TYPE,
        sample_defaults: Optional[SampleOptions] = None,
    ) -> None:
        self._cache = cache if cache is not None else SpecCache()
        self._loader = loader if loader is not None else load_spec_document
        self._ttl = ttl
        self.default_content_type = default_content_type
        self.sample_defaults = sample_defaults or SampleOptions()
        self._spec: Optional[ParsedSpec] = None
        self._load_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: GlobalConfig) -> SpecService:
        """Build a service whose cache, loader and defaults follow *config*."""
        loader = functools.partial(
            load_spec_document, timeout=config.fetch_timeout, validate=config.validate_spec
        )
        return cls(
            cache=SpecCache(default_ttl=config.cache.ttl_seconds),
            loader=loader,
            default_content_type=config.default_content_type,
            sample_defaults=SampleOptions(**config.sample.model_dump()),
        )

    # --- Loading ---

    def load(self, url: Optional[str] = None, file_path: Optional[str] = None) -> ParsedSpec:
        """Load a spec from *url* or *file_path* and make it active.

        Raises:
            SpecLoadError: Propagated from the loader or normalizer.
        """
        requested = url or file_path
        with self._load_lock:
            cached = self._cache.get(CACHE_KEY)
            if cached is not None and cached.source == requested:
                logger.info("Using cached spec from %s", cached.source)
                self._spec = cached
                return cached

            result = self._loader(url=url, file_path=file_path)
            spec = normalize(result.document, result.source)
            self._cache.set(CACHE_KEY, spec, ttl=self._ttl)
            self._spec = spec
            logger.info(
                "Loaded spec %s (%d endpoints) from %s",
                spec.info.title,
                len(spec.endpoints),
                spec.source,
            )
            return spec

    def clear(self) -> None:
        """Drop the active spec and empty the cache."""
        with self._load_lock:
            self._spec = None
            self._cache.clear()
        logger.info("Spec cleared")

    # --- Accessors ---

    @property
    def is_loaded(self) -> bool:
        return self._spec is not None

    @property
    def spec(self) -> ParsedSpec:
        """The active spec; raises :class:`SpecNotLoadedError` when none."""
        spec = self._spec
        if spec is None:
            raise SpecNotLoadedError()
        return spec

    def get_spec(self) -> ParsedSpec:
        return self.spec

    @property
    def endpoints(self) -> dict[str, Endpoint]:
        return self.spec.endpoints

    @property
    def servers(self) -> list[ServerInfo]:
        return self.spec.servers

    @property
    def security_schemes(self) -> list[SecurityScheme]:
        return self.spec.security_schemes

    @property
    def global_security(self) -> list[dict[str, list[str]]]:
        return self.spec.global_security

    def sorted_endpoints(self) -> list[Endpoint]:
        """All endpoints ordered by path, then canonical method order."""
        return sorted(self.endpoints.values(), key=lambda e: sort_key(e.path, e.method.value))

    def get_endpoint(self, path: str, method: str) -> Endpoint:
        """Look up one endpoint; method case and leading slash do not matter.

        Raises:
            SpecNotLoadedError: If no spec is active.
            EndpointNotFoundError: If the key is absent, carrying the
                normalized path and method.
        """
        endpoint = self.endpoints.get(endpoint_key(method, path))
        if endpoint is None:
            raise EndpointNotFoundError(normalize_path(path), normalize_method(method))
        return endpoint

    def get_schema(self, name: str) -> JsonSchema:
        """Return a named component schema (``definitions`` in 2.0).

        Raises:
            SchemaNotFoundError: With up to 20 available names and the
                total count in its context.
        """
        schemas = self.spec.schemas
        if name not in schemas:
            available = list(schemas)
            raise SchemaNotFoundError(
                f"Schema not found: {name}",
                {
                    "schemaName": name,
                    "availableSchemas": available[:20],
                    "totalSchemas": len(available),
                },
            )
        return schemas[name]

    def get_request_schema(
        self, path: str, method: str, preferred_content_type: Optional[str] = None
    ) -> Optional[RequestSchema]:
        """Select the request body schema for one content type.

        The preferred content type is used when declared, otherwise the
        first content type in declaration order.

        Returns:
            ``None`` when the endpoint has no request body or the body
            declares no content.
        """
        endpoint = self.get_endpoint(path, method)
        body = endpoint.request_body
        if body is None:
            return None

        selected = _select_media(body.content, preferred_content_type or self.default_content_type)
        if selected is None:
            return None

        content_type, media = selected
        return RequestSchema(
            schema=media.schema_,
            content_type=content_type,
            required=body.required,
            description=body.description,
            example=_media_example(media),
        )

    def get_response_schema(
        self,
        path: str,
        method: str,
        status_code: str = "200",
        preferred_content_type: Optional[str] = None,
    ) -> Optional[ResponseSchema]:
        """Select a response schema by status code and content type.

        Status resolution is an exact key, then the first ``XX`` wildcard
        key that matches (in declaration order), then ``default``.

        Returns:
            ``None`` when nothing resolves or the resolved response has no
            content.
        """
        responses = self.get_endpoint(path, method).responses

        matched: Optional[str] = None
        if status_code in responses:
            matched = status_code
        else:
            matched = next(
                (code for code in responses if matches_status_code(status_code, code)),
                None,
            )
            if matched is None and "default" in responses:
                matched = "default"

        if matched is None:
            return None

        response = responses[matched]
        selected = _select_media(
            response.content, preferred_content_type or self.default_content_type
        )
        if selected is None:
            return None

        content_type, media = selected
        return ResponseSchema(
            schema=media.schema_,
            content_type=content_type,
            status_code=matched,
            description=response.description,
            example=_media_example(media),
        )


def _select_media(
    content: dict[str, MediaType], preferred: str
) -> Optional[tuple[str, MediaType]]:
    if preferred in content:
        return preferred, content[preferred]
    for content_type, media in content.items():
        return content_type, media
    return None


def _media_example(media: MediaType) -> Any:
    if media.example is not None:
        return media.example
    for named in (media.examples or {}).values():
        if named.value is not None:
            return named.value
    return None
