"""
Database Pagination Utilities
==============================
Helper functions for consistent list limits across repositories.

- Default limit: 100
- Maximum limit: 500 (keeps history queries small on the shed gateway)
- Minimum limit: 1
- Minimum offset: 0
"""

from dataclasses import dataclass
from typing import Any

from app.domain.exceptions import ValidationError

DEFAULT_LIMIT = 100
MAX_LIMIT = 500
MIN_LIMIT = 1
MIN_OFFSET = 0


@dataclass
class PaginationParams:
    """Validated pagination parameters."""

    limit: int
    offset: int

    @classmethod
    def from_request(
        cls,
        limit: Any = None,
        offset: Any = None,
        *,
        default_limit: int = DEFAULT_LIMIT,
    ) -> "PaginationParams":
        """
        Create validated pagination parameters from raw query-string values.

        Raises:
            ValidationError: If limit or offset are not integers or are out of range
        """
        validated_limit = _parse_int("limit", limit, default_limit)
        if validated_limit < MIN_LIMIT:
            raise ValidationError(f"limit must be at least {MIN_LIMIT}")
        if validated_limit > MAX_LIMIT:
            raise ValidationError(f"limit cannot exceed {MAX_LIMIT}")

        validated_offset = _parse_int("offset", offset, MIN_OFFSET)
        if validated_offset < MIN_OFFSET:
            raise ValidationError(f"offset must be at least {MIN_OFFSET}")

        return cls(limit=validated_limit, offset=validated_offset)


def _parse_int(name: str, value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{name} must be an integer", detail={name: value}) from exc


def validate_pagination(
    limit: Any = None,
    offset: Any = None,
    *,
    default_limit: int = DEFAULT_LIMIT,
) -> tuple[int, int]:
    """Validate pagination parameters and return ``(limit, offset)``."""
    params = PaginationParams.from_request(limit=limit, offset=offset, default_limit=default_limit)
    return params.limit, params.offset
