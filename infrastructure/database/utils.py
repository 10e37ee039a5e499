"""
Database Utilities
==================

Shared helpers for the ``*Operations`` mixins.
"""

from __future__ import annotations

import functools
import logging
import sqlite3
from typing import Any, Callable, TypeVar

from app.domain.exceptions import RepositoryError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def row_to_dict(row) -> dict[str, Any]:
    """
    Convert database row to dictionary.

    Args:
        row: Database row (sqlite3.Row, dict, or None)

    Returns:
        Dictionary representation of the row, empty for None
    """
    if row is None:
        return {}
    if isinstance(row, dict):
        return row
    return {k: row[k] for k in row.keys()}


def rows_to_dicts(rows) -> list[dict[str, Any]]:
    return [row_to_dict(row) for row in rows]


def db_operation(action: str) -> Callable[[F], F]:
    """
    Log ``sqlite3.Error`` raised by the wrapped operation and re-raise it as
    :class:`RepositoryError`, so callers can tell a failure from an empty result.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except sqlite3.Error as exc:
                logger.error("Failed to %s: %s", action, exc)
                raise RepositoryError(f"Failed to {action}") from exc

        return wrapper  # type: ignore[return-value]

    return decorator
