"""Exception hierarchy for specquery.

Every core operation fails with exactly one subclass of
:class:`SpecQueryError`. Each subclass carries a stable string ``code``
(surfaced to tool-call clients) and an ``exit_code`` from
:mod:`specquery.exit_codes` (used by the CLI). Messages are final and
user-presentable; identifiers such as the path, method or schema name are
also stored in :attr:`SpecQueryError.context` so clients do not need to
parse the message.

Subclass hierarchy::

    SpecQueryError            INTERNAL_ERROR      (exit 1)
    +-- SpecNotLoadedError    SPEC_NOT_LOADED     (exit 3)
    +-- EndpointNotFoundError ENDPOINT_NOT_FOUND  (exit 4)
    +-- SchemaNotFoundError   SCHEMA_NOT_FOUND    (exit 4)
    +-- NoRequestBodyError    NO_REQUEST_BODY     (exit 4)
    +-- SpecLoadError         SPEC_LOAD_ERROR     (exit 7)
    +-- InvalidInputError     INVALID_INPUT       (exit 2)
    +-- ValidationFailedError VALIDATION_FAILED   (exit 5)
    +-- ConfigError           CONFIG_ERROR        (exit 1)
"""

from __future__ import annotations

from typing import Any, Optional

from specquery.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SPEC_LOAD_ERROR,
    EXIT_SPEC_NOT_LOADED,
    EXIT_VALIDATION_FAILED,
)


class SpecQueryError(Exception):
    """Base exception for all specquery errors.

    Args:
        message: Human-readable error description, passed through to
            clients unchanged.
        context: Optional structured diagnostics (e.g. ``{"path": ...}``).
    """

    code: str = "INTERNAL_ERROR"
    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Render the error as ``{error, code, context?}``."""
        data: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.context:
            data["context"] = self.context
        return data


class SpecNotLoadedError(SpecQueryError):
    """Raised when a query is issued before a spec has been loaded."""

    code = "SPEC_NOT_LOADED"
    exit_code = EXIT_SPEC_NOT_LOADED

    def __init__(self) -> None:
        super().__init__("No OpenAPI spec is loaded. Use load_spec tool first.")


class EndpointNotFoundError(SpecQueryError):
    """Raised when a path + method pair is absent from the endpoint index."""

    code = "ENDPOINT_NOT_FOUND"
    exit_code = EXIT_NOT_FOUND

    def __init__(self, path: str, method: str) -> None:
        super().__init__(
            f"Endpoint not found: {method.upper()} {path}",
            {"path": path, "method": method},
        )
        self.path = path
        self.method = method


class SchemaNotFoundError(SpecQueryError):
    """Raised when a named component schema does not exist."""

    code = "SCHEMA_NOT_FOUND"
    exit_code = EXIT_NOT_FOUND


class NoRequestBodyError(SpecQueryError):
    """Raised when a body-dependent operation targets an endpoint without one."""

    code = "NO_REQUEST_BODY"
    exit_code = EXIT_NOT_FOUND

    def __init__(self, path: str, method: str) -> None:
        super().__init__(
            f"Endpoint {method.upper()} {path} does not have a request body",
            {"path": path, "method": method},
        )


class SpecLoadError(SpecQueryError):
    """Raised when a spec cannot be fetched, parsed, or structurally validated."""

    code = "SPEC_LOAD_ERROR"
    exit_code = EXIT_SPEC_LOAD_ERROR


class InvalidInputError(SpecQueryError):
    """Raised for missing, ambiguous, or malformed tool arguments."""

    code = "INVALID_INPUT"
    exit_code = EXIT_INVALID_USAGE


class ValidationFailedError(SpecQueryError):
    """Raised when a schema cannot be compiled by the validation engine."""

    code = "VALIDATION_FAILED"
    exit_code = EXIT_VALIDATION_FAILED


class ConfigError(SpecQueryError):
    """Raised for configuration problems (invalid JSON, bad values)."""

    code = "CONFIG_ERROR"
    exit_code = EXIT_GENERIC_FAILURE


_EXIT_CODES = {
    cls.code: cls.exit_code
    for cls in (
        SpecNotLoadedError,
        EndpointNotFoundError,
        SchemaNotFoundError,
        NoRequestBodyError,
        SpecLoadError,
        InvalidInputError,
        ValidationFailedError,
        ConfigError,
    )
}


def exit_code_for(code: Optional[str]) -> int:
    """Map an envelope ``code`` back to a process exit code."""
    return _EXIT_CODES.get(code or "", EXIT_GENERIC_FAILURE)
