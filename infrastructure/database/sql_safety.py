"""
SQL Safety Utilities
====================

Helpers that keep dict-key → column-name interpolation limited to an
explicit allowlist. Unknown keys are dropped and logged.
"""

from __future__ import annotations

import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def safe_columns(
    data: dict[str, Any],
    allowed: frozenset[str] | set[str],
    *,
    context: str = "",
    drop_none: bool = False,
) -> dict[str, Any]:
    """Return *data* filtered to keys present in *allowed*."""
    filtered: dict[str, Any] = {}
    rejected: list[str] = []

    for key, value in data.items():
        if key not in allowed or not _IDENT_RE.match(key):
            rejected.append(key)
            continue
        if drop_none and value is None:
            continue
        filtered[key] = value

    if rejected:
        logger.warning("safe_columns(%s): dropped non-allowed keys: %s", context or "?", rejected)

    return filtered


def build_set_clause(cols: dict[str, Any]) -> tuple[str, list[Any]]:
    """Build a ``SET col1 = ?, col2 = ?`` fragment from *cols*.

    >>> build_set_clause({"email": "a@b", "role": "client"})
    ('email = ?, role = ?', ['a@b', 'client'])
    """
    clause = ", ".join(f"{k} = ?" for k in cols)
    return clause, list(cols.values())


def build_insert_parts(cols: dict[str, Any]) -> tuple[str, str, list[Any]]:
    """Build column-list, placeholder-list, and values for INSERT.

    >>> build_insert_parts({"name": "Pig Alpha", "body_temp": 38.6})
    ('name, body_temp', '?, ?', ['Pig Alpha', 38.6])
    """
    keys = list(cols.keys())
    return ", ".join(keys), ", ".join("?" for _ in keys), list(cols.values())
