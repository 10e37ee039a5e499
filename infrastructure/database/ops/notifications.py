"""Database operations for pump notifications."""

from __future__ import annotations

from typing import Any

from app.utils.time import iso_now
from infrastructure.database.utils import db_operation, row_to_dict, rows_to_dicts


class NotificationOperations:
    """Database operations for notification rows."""

    @db_operation("create notification")
    def insert_notification(
        self,
        *,
        kind: str,
        message: str,
        temperature: float | None,
        humidity: float | None,
        water_level: float | None,
        pump_status: bool | None,
        mode: str,
    ) -> dict[str, Any]:
        with self.connection() as db:
            cur = db.execute(
                """
                INSERT INTO Notifications (
                    kind, message, temperature, humidity, water_level,
                    pump_status, mode, is_read, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, 0, ?)
                """,
                (
                    kind,
                    message,
                    temperature,
                    humidity,
                    water_level,
                    None if pump_status is None else int(pump_status),
                    mode,
                    iso_now(),
                ),
            )
            row = db.execute("SELECT * FROM Notifications WHERE id = ?", (cur.lastrowid,)).fetchone()
        return row_to_dict(row)

    @db_operation("list notifications")
    def list_notifications(self, limit: int) -> list[dict[str, Any]]:
        db = self.get_db()
        rows = db.execute(
            "SELECT * FROM Notifications ORDER BY created_at DESC, id DESC LIMIT ?", (limit,)
        ).fetchall()
        return rows_to_dicts(rows)

    @db_operation("count unread notifications")
    def count_unread_notifications(self) -> int:
        db = self.get_db()
        return int(db.execute("SELECT COUNT(*) FROM Notifications WHERE is_read = 0").fetchone()[0])

    @db_operation("mark notification as read")
    def mark_notification_read(self, notification_id: int) -> bool:
        with self.connection() as db:
            cur = db.execute("UPDATE Notifications SET is_read = 1 WHERE id = ?", (notification_id,))
        return cur.rowcount > 0

    @db_operation("mark all notifications as read")
    def mark_all_notifications_read(self) -> int:
        with self.connection() as db:
            cur = db.execute("UPDATE Notifications SET is_read = 1 WHERE is_read = 0")
        return cur.rowcount

    @db_operation("delete old notifications")
    def delete_notifications_before(self, cutoff: str) -> int:
        with self.connection() as db:
            cur = db.execute("DELETE FROM Notifications WHERE created_at < ?", (cutoff,))
        return cur.rowcount
