"""Repository for shed sensor readings."""

from __future__ import annotations

from typing import Any

from app.domain.readings import SensorReading
from app.utils.time import to_utc_iso
from infrastructure.database.ops.sensors import SensorReadingOperations


class SensorReadingRepository:
    """Typed access to the SensorReadings table."""

    def __init__(self, backend: SensorReadingOperations) -> None:
        self._backend = backend

    def save(self, reading: SensorReading) -> dict[str, Any]:
        """Persist *reading* and return the stored row."""
        return self._backend.insert_sensor_reading(
            temperature=reading.temperature,
            humidity=reading.humidity,
            water_level=reading.water_level,
            pump_on=reading.pump_on,
            heat_index=reading.heat_index,
            captured_at=to_utc_iso(reading.captured_at),
        )

    def history(self, limit: int, offset: int = 0) -> list[dict[str, Any]]:
        return self._backend.list_sensor_readings(limit, offset)

    def latest(self) -> dict[str, Any] | None:
        return self._backend.get_latest_sensor_reading()

    def latest_pump_flag(self) -> bool | None:
        return self._backend.get_latest_pump_flag()
