from __future__ import annotations

import functools
import logging
from typing import Any, Callable

from flask import Response, jsonify
from pydantic import ValidationError as PydanticValidationError

from app.utils.time import iso_now

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Generic user-facing messages, never leak internals
# ---------------------------------------------------------------------------
_GENERIC_MESSAGES: dict[int, str] = {
    400: "Invalid request",
    401: "Authentication required",
    403: "Access denied",
    404: "Resource not found",
    409: "Conflict",
    500: "An internal error occurred",
    502: "Upstream service unavailable",
    503: "Service unavailable",
}


def safe_error(
    exc: BaseException,
    status: int = 500,
    *,
    context: str = "",
) -> Response:
    """Return a generic error response while logging the real exception.

    Parameters
    ----------
    exc:
        The caught exception, logged server-side and never sent to the client.
    status:
        HTTP status code for the response (determines the generic message).
    context:
        Optional human-readable context logged alongside *exc*, e.g.
        ``"ending misting session"``.
    """
    _log.error("API error [%s] %s: %s", status, context, exc, exc_info=exc)
    message = _GENERIC_MESSAGES.get(status, _GENERIC_MESSAGES[500])
    return error_response(message, status)


def success_response(
    data: dict | list | None = None,
    status: int = 200,
    *,
    message: str | None = None,
) -> Response:
    payload: dict[str, Any] = {"ok": True, "data": data, "error": None}
    if message is not None:
        payload["message"] = message
    response = jsonify(payload)
    response.status_code = status
    return response


def error_response(
    message: str,
    status: int = 500,
    *,
    details: dict | list | None = None,
) -> Response:
    payload: dict[str, Any] = {"message": message, "timestamp": iso_now()}
    if details:
        payload["details"] = details
    response = jsonify({"ok": False, "data": None, "error": payload, "message": message})
    response.status_code = status
    return response


def validation_details(exc: PydanticValidationError) -> list[dict[str, Any]]:
    """JSON-safe rendering of pydantic errors for a 400 body."""
    return exc.errors(include_url=False, include_context=False, include_input=False)


def agricool_error_response(exc: BaseException, context: str = "") -> Response:
    """Map an :class:`AgriCoolError` to the envelope; 5xx details stay in the log."""
    status = getattr(exc, "http_status", 500)
    if status >= 500:
        return safe_error(exc, status, context=context)
    return error_response(str(exc) or _GENERIC_MESSAGES.get(status, "Invalid request"), status, details=getattr(exc, "detail", None))


# ---------------------------------------------------------------------------
# Route decorator, removes per-route try/except boilerplate
# ---------------------------------------------------------------------------


def safe_route(
    error_message: str = "An internal error occurred",
    *,
    error_status: int = 500,
) -> Callable:
    """Decorator that wraps a Flask route handler with standardized error handling.

    Catches :class:`~app.domain.exceptions.AgriCoolError` subclasses and maps
    them to the correct HTTP status via ``exc.http_status``. Pydantic
    validation errors become 400 with the error list. Any other
    ``Exception`` is logged and returns a generic 500.

    Usage::

        @misting_api.put("/end/<int:session_id>")
        @safe_route("Failed to end misting session")
        def end_session(session_id):
            ...
    """
    from app.domain.exceptions import AgriCoolError

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Response:
            try:
                return fn(*args, **kwargs)
            except PydanticValidationError as exc:
                return error_response("Invalid request", 400, details=validation_details(exc))
            except AgriCoolError as exc:
                return agricool_error_response(exc, error_message)
            except Exception as exc:
                return safe_error(exc, error_status, context=error_message)

        return wrapper

    return decorator
