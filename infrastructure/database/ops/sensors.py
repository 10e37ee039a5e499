"""Database operations for shed sensor readings."""

from __future__ import annotations

from typing import Any

from infrastructure.database.utils import db_operation, row_to_dict, rows_to_dicts


class SensorReadingOperations:
    """Insert and query rows of the SensorReadings table."""

    @db_operation("insert sensor reading")
    def insert_sensor_reading(
        self,
        *,
        temperature: float | None,
        humidity: float | None,
        water_level: int | None,
        pump_on: bool | None,
        heat_index: float | None,
        captured_at: str,
    ) -> dict[str, Any]:
        with self.connection() as db:
            cur = db.execute(
                """
                INSERT INTO SensorReadings (
                    temperature, humidity, water_level, pump_on, heat_index, captured_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    temperature,
                    humidity,
                    water_level,
                    None if pump_on is None else int(pump_on),
                    heat_index,
                    captured_at,
                ),
            )
            row = db.execute("SELECT * FROM SensorReadings WHERE id = ?", (cur.lastrowid,)).fetchone()
        return row_to_dict(row)

    @db_operation("list sensor readings")
    def list_sensor_readings(self, limit: int, offset: int = 0) -> list[dict[str, Any]]:
        db = self.get_db()
        rows = db.execute(
            "SELECT * FROM SensorReadings ORDER BY captured_at DESC, id DESC LIMIT ? OFFSET ?",
            (limit, offset),
        ).fetchall()
        return rows_to_dicts(rows)

    @db_operation("fetch latest sensor reading")
    def get_latest_sensor_reading(self) -> dict[str, Any] | None:
        db = self.get_db()
        row = db.execute("SELECT * FROM SensorReadings ORDER BY captured_at DESC, id DESC LIMIT 1").fetchone()
        return row_to_dict(row) if row else None

    @db_operation("fetch latest pump flag")
    def get_latest_pump_flag(self) -> bool | None:
        """Pump flag of the newest reading that reported one."""
        db = self.get_db()
        row = db.execute(
            "SELECT pump_on FROM SensorReadings WHERE pump_on IS NOT NULL "
            "ORDER BY captured_at DESC, id DESC LIMIT 1"
        ).fetchone()
        return None if row is None else bool(row["pump_on"])
