"""Database operations for livestock thermal scan records."""

from __future__ import annotations

from typing import Any

from app.utils.time import iso_now
from infrastructure.database.sql_safety import build_insert_parts, safe_columns
from infrastructure.database.utils import db_operation, row_to_dict, rows_to_dicts

_THERMAL_COLUMNS: frozenset[str] = frozenset(
    {
        "name",
        "body_temp",
        "avg_temp",
        "min_temp",
        "weight",
        "age",
        "breed",
        "last_fed",
        "ambient_temp",
        "humidity",
        "health_status",
        "notes",
        "scanned_at",
    }
)


class ThermalRecordOperations:
    """SQL for the ThermalRecords table."""

    @db_operation("create thermal record")
    def insert_thermal_record(self, record: dict[str, Any]) -> dict[str, Any]:
        cols = safe_columns(record, _THERMAL_COLUMNS, context="insert_thermal_record")
        cols.setdefault("scanned_at", iso_now())
        col_sql, ph_sql, values = build_insert_parts(cols)
        with self.connection() as db:
            cur = db.execute(f"INSERT INTO ThermalRecords ({col_sql}) VALUES ({ph_sql})", values)  # nosec B608
            row = db.execute("SELECT * FROM ThermalRecords WHERE id = ?", (cur.lastrowid,)).fetchone()
        return row_to_dict(row)

    @db_operation("list thermal records")
    def list_thermal_records(
        self,
        *,
        search: str | None = None,
        month: int | None = None,
        year: int | None = None,
        limit: int = 500,
    ) -> list[dict[str, Any]]:
        """Newest first. ``search`` matches the name or the body temperature text."""
        clauses: list[str] = []
        params: list[Any] = []
        if search:
            clauses.append("(name LIKE ? OR CAST(body_temp AS TEXT) LIKE ?)")
            pattern = f"%{search}%"
            params.extend([pattern, pattern])
        if year is not None:
            clauses.append("substr(scanned_at, 1, 4) = ?")
            params.append(f"{year:04d}")
        if month is not None:
            clauses.append("substr(scanned_at, 6, 2) = ?")
            params.append(f"{month:02d}")

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(limit)
        rows = self.get_db().execute(
            f"SELECT * FROM ThermalRecords {where} ORDER BY scanned_at DESC, id DESC LIMIT ?",  # nosec B608
            params,
        ).fetchall()
        return rows_to_dicts(rows)
