"""Centralized exception hierarchy for AgriCool.

All domain and service exceptions inherit from :class:`AgriCoolError` so that
callers can catch a single base class when they need a broad safety net, yet
still match on specific subclasses where narrower handling is appropriate.

Blueprint-level error handling (see ``app/utils/http.safe_route``) maps these
to the correct HTTP status codes automatically.

Hierarchy
---------
::

    AgriCoolError (base, 500)
    ├── ValidationError          (400, bad input from caller)
    ├── AuthenticationError      (401, bad credentials)
    ├── NotFoundError            (404, entity does not exist)
    ├── ConflictError            (409, duplicate / state conflict)
    └── ServiceError             (500, business-logic failure)
        └── RepositoryError      (500, database / persistence)
"""

from __future__ import annotations


class AgriCoolError(Exception):
    """Base exception for all AgriCool application errors.

    Parameters
    ----------
    message:
        Human-readable description (logged server-side, surfaced to the
        HTTP client only for 4xx classes).
    detail:
        Optional machine-readable context dict attached to the error and
        returned in the error envelope for 4xx responses.
    """

    http_status: int = 500

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


# ── Client errors (4xx) ──────────────────────────────────────────────


class ValidationError(AgriCoolError):
    """Caller supplied invalid or incomplete input (HTTP 400)."""

    http_status: int = 400


class AuthenticationError(AgriCoolError):
    """Credentials missing or wrong (HTTP 401)."""

    http_status: int = 401


class NotFoundError(AgriCoolError):
    """Requested entity does not exist (HTTP 404)."""

    http_status: int = 404


class ConflictError(AgriCoolError):
    """Operation conflicts with existing state (HTTP 409)."""

    http_status: int = 409


# ── Server errors (5xx) ──────────────────────────────────────────────


class ServiceError(AgriCoolError):
    """Business-logic failure in a service method (HTTP 500)."""

    http_status: int = 500


class RepositoryError(ServiceError):
    """Database / persistence layer failure (HTTP 500)."""

    http_status: int = 500
