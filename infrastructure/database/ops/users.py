"""Database operations for dashboard user accounts."""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from app.domain.exceptions import ConflictError
from app.utils.time import iso_now
from infrastructure.database.sql_safety import build_set_clause, safe_columns
from infrastructure.database.utils import db_operation, row_to_dict

logger = logging.getLogger(__name__)

_UPDATABLE_USER_COLUMNS: frozenset[str] = frozenset({"fullname", "email", "password_hash", "role"})


class UserOperations:
    """SQL for the Users table."""

    @db_operation("create user")
    def insert_user(self, *, fullname: str, email: str, password_hash: str, role: str = "client") -> dict[str, Any]:
        try:
            with self.connection() as db:
                cur = db.execute(
                    "INSERT INTO Users (fullname, email, password_hash, role, created_at) VALUES (?, ?, ?, ?, ?)",
                    (fullname, email, password_hash, role, iso_now()),
                )
                row = db.execute("SELECT * FROM Users WHERE id = ?", (cur.lastrowid,)).fetchone()
        except sqlite3.IntegrityError as exc:
            self.get_db().rollback()
            logger.info("Signup rejected for duplicate email %s", email)
            raise ConflictError("Email already registered", detail={"email": email}) from exc
        return row_to_dict(row)

    @db_operation("fetch user")
    def get_user_by_id(self, user_id: int) -> dict[str, Any] | None:
        row = self.get_db().execute("SELECT * FROM Users WHERE id = ?", (user_id,)).fetchone()
        return row_to_dict(row) if row else None

    @db_operation("fetch user by email")
    def get_user_by_email(self, email: str) -> dict[str, Any] | None:
        row = self.get_db().execute("SELECT * FROM Users WHERE email = ?", (email,)).fetchone()
        return row_to_dict(row) if row else None

    @db_operation("update user")
    def update_user(self, user_id: int, fields: dict[str, Any]) -> bool:
        cols = safe_columns(fields, _UPDATABLE_USER_COLUMNS, context="update_user")
        if not cols:
            return False
        set_sql, params = build_set_clause(cols)
        params.append(user_id)
        try:
            with self.connection() as db:
                cur = db.execute(f"UPDATE Users SET {set_sql} WHERE id = ?", params)  # nosec B608
        except sqlite3.IntegrityError as exc:
            self.get_db().rollback()
            raise ConflictError("Email already in use", detail={"email": cols.get("email")}) from exc
        return cur.rowcount > 0
