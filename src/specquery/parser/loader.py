"""Fetch raw OpenAPI 2.0 / 3.x documents from a URL or a local file.

All I/O for spec loading lives here. A document is fetched with ``httpx``
or read from disk, parsed as JSON (falling back to YAML), checked for a
supported dialect, optionally validated structurally with
``openapi-spec-validator``, and finally passed through
:func:`~specquery.parser.resolver.resolve_refs`.

The public entry points are:

* :func:`load_spec_document` -- The full pipeline; returns a
  :class:`LoadResult` ready for
  :func:`~specquery.parser.normalizer.normalize`.
* :func:`validate_spec_version` -- Check the ``swagger``/``openapi``
  version field.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

import httpx
import yaml
from openapi_spec_validator import validate as validate_structure
from openapi_spec_validator.validation.exceptions import (
    OpenAPIValidationError,
    ValidatorDetectError,
)

from specquery.exceptions import SpecLoadError
from specquery.parser.resolver import resolve_refs

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

_ALLOWED_SCHEMES = ("http", "https")


@dataclass(frozen=True)
class LoadResult:
    """A parsed, version-checked, reference-free document and where it came from."""

    document: dict[str, Any]
    source: str


def load_spec_document(
    url: Optional[str] = None,
    file_path: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
    validate: bool = True,
) -> LoadResult:
    """Load a document from exactly one of *url* or *file_path*.

    When both are given the URL wins.

    Args:
        url: An ``http``/``https`` URL.
        file_path: A local path. Paths containing ``..`` segments are
            rejected.
        timeout: HTTP timeout in seconds.
        validate: Run ``openapi-spec-validator`` once refs are known to resolve.

    Returns:
        A :class:`LoadResult` whose ``document`` contains no ``$ref``.

    Raises:
        SpecLoadError: On any fetch, read, parse, version, validation or
            reference-resolution failure.
    """
    if url:
        raw = _load_from_url(url, timeout=timeout)
        source = url
    elif file_path:
        raw = _load_from_file(file_path)
        source = file_path
    else:
        raise SpecLoadError("Either url or file_path must be provided")

    version = validate_spec_version(raw, source=source)
    logger.debug("Loaded %s document (version %s)", source, version)

    try:
        document = resolve_refs(raw)
    except SpecLoadError as exc:
        raise SpecLoadError(exc.message, {**(exc.context or {}), "source": source}) from exc

    # Every local $ref resolves by now, so the validator only sees structure.
    if validate:
        _validate_structure(raw, source)

    return LoadResult(document=document, source=source)


def validate_spec_version(spec: dict[str, Any], source: str = "") -> str:
    """Return the declared version string if it is supported.

    Accepts ``swagger: "2.0"`` and any ``openapi: 3.x`` value.

    Raises:
        SpecLoadError: If neither field is present or the version is
            unsupported.
    """
    context = {"source": source} if source else None

    if "swagger" in spec:
        version = str(spec["swagger"])
        if version == "2.0":
            return version
        raise SpecLoadError(
            f"Unsupported Swagger version: {version}. Only Swagger 2.0 and OpenAPI 3.x are supported.",
            context,
        )

    version = spec.get("openapi")
    if version is None:
        raise SpecLoadError(
            "Missing 'openapi' or 'swagger' field. Is this an OpenAPI document?",
            context,
        )

    version = str(version)
    if not version.startswith("3."):
        raise SpecLoadError(
            f"Unsupported OpenAPI version: {version}. Only Swagger 2.0 and OpenAPI 3.x are supported.",
            context,
        )
    return version


def _validate_structure(spec: dict[str, Any], source: str) -> None:
    try:
        validate_structure(spec)
    except (OpenAPIValidationError, ValidatorDetectError) as exc:
        detail = getattr(exc, "message", None) or str(exc)
        raise SpecLoadError(f"Invalid OpenAPI spec: {detail}", {"source": source}) from exc


def _load_from_url(url: str, timeout: float = DEFAULT_TIMEOUT) -> dict[str, Any]:
    """Fetch a document over HTTP(S).

    The response ``content-type`` header is used as a parse hint.

    Raises:
        SpecLoadError: On a non-HTTP scheme, a non-2xx status, a timeout,
            or a transport failure.
    """
    scheme = urlparse(url).scheme.lower()
    if scheme not in _ALLOWED_SCHEMES:
        raise SpecLoadError(f"Invalid URL protocol: {scheme or '(none)'}", {"url": url})

    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        raise SpecLoadError(
            f"HTTP {status} fetching spec from {url}", {"url": url, "status": status}
        ) from exc
    except httpx.TimeoutException as exc:
        raise SpecLoadError(
            f"Timed out after {timeout}s fetching spec from {url}", {"url": url}
        ) from exc
    except httpx.RequestError as exc:
        raise SpecLoadError(f"Failed to fetch spec from {url}: {exc}", {"url": url}) from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint, source=url)


def _load_from_file(path: str) -> dict[str, Any]:
    """Read a document from disk, using the file extension as a parse hint.

    Raises:
        SpecLoadError: If the path escapes via ``..``, does not exist, is
            unreadable or empty.
    """
    file_path = Path(path)
    context = {"file_path": path}

    if ".." in file_path.parts:
        raise SpecLoadError("Directory traversal not allowed in file path", context)
    if not file_path.is_file():
        raise SpecLoadError(f"Spec file not found: {path}", context)

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecLoadError(f"Failed to read spec file {path}: {exc}", context) from exc

    if not content.strip():
        raise SpecLoadError(f"Spec file is empty: {path}", context)

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint, source=path)


def _parse_content(content: str, hint: str = "", source: str = "") -> dict[str, Any]:
    """Parse *content* as JSON, then YAML.

    A ``"json"`` hint disables the YAML fallback; a ``"yaml"`` hint skips
    the JSON attempt.

    Raises:
        SpecLoadError: If neither parser yields a mapping.
    """
    context = {"source": source} if source else None
    json_error: Optional[Exception] = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecLoadError(f"Invalid JSON: {exc}", context) from exc
            json_error = exc
        else:
            return _require_mapping(result, context)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse spec as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecLoadError(msg, context) from exc

    return _require_mapping(result, context)


def _require_mapping(result: Any, context: Optional[dict[str, Any]]) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SpecLoadError(f"Spec must be a JSON/YAML object (got {kind})", context)
    return result
