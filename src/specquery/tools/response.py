"""The uniform result envelope returned by every tool.

Every tool returns a plain dict::

    {"success": True, "data": {...}}
    {"success": False, "error": "Endpoint not found: GET /nope",
     "code": "ENDPOINT_NOT_FOUND", "context": {"path": "/nope", "method": "get"}}

Keys that do not apply are omitted rather than set to ``None``.
:func:`tool_handler` wraps a handler body so that input validation, typed
errors and unexpected failures all end up in this shape.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from specquery.exceptions import InvalidInputError, SpecQueryError

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT", bound=BaseModel)

ToolHandler = Callable[..., dict[str, Any]]


def success_response(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}


def error_response(
    error: str, code: Optional[str] = None, context: Optional[dict[str, Any]] = None
) -> dict[str, Any]:
    response: dict[str, Any] = {"success": False, "error": error}
    if code:
        response["code"] = code
    if context:
        response["context"] = context
    return response


def parse_input(model: type[InputT], arguments: Optional[dict[str, Any]]) -> InputT:
    """Validate raw tool arguments into *model*.

    Raises:
        InvalidInputError: With one ``"<field>: <message>"`` entry per
            problem in ``context["errors"]``.
    """
    try:
        return model.model_validate(arguments or {})
    except ValidationError as exc:
        problems = [
            f"{'.'.join(str(loc) for loc in err['loc']) or 'input'}: {err['msg']}"
            for err in exc.errors()
        ]
        raise InvalidInputError(
            f"Invalid input: {'; '.join(problems)}", {"errors": problems}
        ) from exc


def tool_handler(action: str, input_model: Optional[type[BaseModel]] = None) -> Callable[
    [Callable[..., Any]], ToolHandler
]:
    """Turn ``fn(service, params) -> data`` into ``handler(service, arguments) -> envelope``.

    Args:
        action: Verb phrase used in the fallback message,
            ``"Failed to <action>: <reason>"``.
        input_model: Pydantic model validating the arguments; handlers
            without one are called as ``fn(service)``.
    """

    def decorator(fn: Callable[..., Any]) -> ToolHandler:
        @functools.wraps(fn)
        def handler(service: Any, arguments: Optional[dict[str, Any]] = None) -> dict[str, Any]:
            try:
                if input_model is None:
                    data = fn(service)
                else:
                    data = fn(service, parse_input(input_model, arguments))
            except SpecQueryError as exc:
                logger.debug("%s failed: [%s] %s", action, exc.code, exc.message)
                return error_response(exc.message, exc.code, exc.context)
            except Exception as exc:  # noqa: BLE001 -- boundary: reported to the client
                logger.exception("Failed to %s", action)
                return error_response(f"Failed to {action}: {exc}")
            return success_response(data)

        return handler

    return decorator
