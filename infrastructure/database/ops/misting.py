"""Database operations for misting sessions (MistingLogs)."""

from __future__ import annotations

from typing import Any

from infrastructure.database.utils import db_operation, row_to_dict, rows_to_dicts


class MistingOperations:
    """SQL for opening, closing and listing misting sessions."""

    @db_operation("open misting log")
    def insert_misting_log(
        self,
        *,
        started_at: str,
        misting_type: str,
        temperature: float | None,
        humidity: float | None,
        heat_index: float | None,
        water_level: float | None,
    ) -> dict[str, Any]:
        with self.connection() as db:
            cur = db.execute(
                """
                INSERT INTO MistingLogs (
                    started_at, misting_type, start_temperature, start_humidity,
                    start_heat_index, start_water_level
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (started_at, misting_type, temperature, humidity, heat_index, water_level),
            )
            row = db.execute("SELECT * FROM MistingLogs WHERE id = ?", (cur.lastrowid,)).fetchone()
        return row_to_dict(row)

    @db_operation("close misting log")
    def close_misting_log(
        self,
        log_id: int,
        *,
        ended_at: str,
        temperature: float | None,
        humidity: float | None,
        heat_index: float | None,
        water_level: float | None,
    ) -> bool:
        """Finalize an open session. Returns False if *log_id* is unknown or already closed."""
        with self.connection() as db:
            cur = db.execute(
                """
                UPDATE MistingLogs
                SET ended_at = ?, end_temperature = ?, end_humidity = ?,
                    end_heat_index = ?, end_water_level = ?
                WHERE id = ? AND ended_at IS NULL
                """,
                (ended_at, temperature, humidity, heat_index, water_level, log_id),
            )
        return cur.rowcount == 1

    @db_operation("fetch misting log")
    def get_misting_log(self, log_id: int) -> dict[str, Any] | None:
        db = self.get_db()
        row = db.execute("SELECT * FROM MistingLogs WHERE id = ?", (log_id,)).fetchone()
        return row_to_dict(row) if row else None

    @db_operation("fetch open misting log")
    def get_open_misting_log(self) -> dict[str, Any] | None:
        db = self.get_db()
        row = db.execute(
            "SELECT * FROM MistingLogs WHERE ended_at IS NULL ORDER BY id DESC LIMIT 1"
        ).fetchone()
        return row_to_dict(row) if row else None

    @db_operation("list misting logs")
    def list_misting_logs(self, limit: int) -> list[dict[str, Any]]:
        db = self.get_db()
        rows = db.execute(
            "SELECT * FROM MistingLogs ORDER BY started_at DESC, id DESC LIMIT ?", (limit,)
        ).fetchall()
        return rows_to_dicts(rows)

    @db_operation("list misting logs in range")
    def list_misting_logs_between(self, start: str, end: str | None = None) -> list[dict[str, Any]]:
        """Sessions with ``start <= started_at < end``, newest first."""
        db = self.get_db()
        if end is None:
            rows = db.execute(
                "SELECT * FROM MistingLogs WHERE started_at >= ? ORDER BY started_at DESC, id DESC",
                (start,),
            ).fetchall()
        else:
            rows = db.execute(
                "SELECT * FROM MistingLogs WHERE started_at >= ? AND started_at < ? "
                "ORDER BY started_at DESC, id DESC",
                (start, end),
            ).fetchall()
        return rows_to_dicts(rows)
