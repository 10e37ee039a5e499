"""
Thermal Record Service
======================

Livestock body-temperature scans: manual entries, simulated scans for demos
and automatic frames from the MLX90640 camera.
"""
from __future__ import annotations

import json
import logging
import random
from typing import Any, Optional, TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from app.domain.exceptions import AgriCoolError, ValidationError
from app.domain.thermal import AUTO_RECORD_NAME, AUTO_RECORD_NOTES, ThermalScan, present_record, simulate_scan
from app.schemas.thermal import ThermalAutoReading, ThermalRecordRequest

if TYPE_CHECKING:
    from infrastructure.database.repositories.sensors import SensorReadingRepository
    from infrastructure.database.repositories.thermal_records import ThermalRecordRepository

logger = logging.getLogger(__name__)


def _parse_period(value: Any, name: str, low: int, high: int) -> int | None:
    """Month/year filters accept a number or ``all``."""
    if value is None or value == "" or str(value).lower() == "all":
        return None
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{name} must be a number or 'all'", detail={name: value}) from exc
    if not low <= number <= high:
        raise ValidationError(f"{name} must be between {low} and {high}", detail={name: value})
    return number


class ThermalRecordService:
    def __init__(
        self,
        record_repo: "ThermalRecordRepository",
        sensor_repo: Optional["SensorReadingRepository"] = None,
        *,
        rng: random.Random | None = None,
    ):
        self._repo = record_repo
        self._sensor_repo = sensor_repo
        self._rng = rng or random.Random()

    def list_records(self, search: str | None = None, month: Any = None, year: Any = None) -> dict[str, Any]:
        rows = self._repo.search(
            search=(search or "").strip() or None,
            month=_parse_period(month, "month", 1, 12),
            year=_parse_period(year, "year", 1970, 9999),
        )
        records = [present_record(row) for row in rows]
        return {"count": len(records), "records": records}

    def create_record(self, request: ThermalRecordRequest) -> dict[str, Any]:
        scan = ThermalScan(**request.model_dump())
        return self._save(scan)

    def simulate(self) -> dict[str, Any]:
        return self._save(simulate_scan(self._rng))

    def record_auto(self, reading: ThermalAutoReading) -> dict[str, Any]:
        """Store a camera frame summary; ambient conditions come from the latest shed reading."""
        ambient = self._sensor_repo.latest() if self._sensor_repo is not None else None
        scan = ThermalScan(
            name=AUTO_RECORD_NAME,
            body_temp=reading.max_temp if reading.max_temp is not None else reading.avg_temp,
            avg_temp=reading.avg_temp,
            min_temp=reading.min_temp if reading.min_temp is not None else reading.avg_temp,
            ambient_temp=ambient.get("temperature") if ambient else None,
            humidity=ambient.get("humidity") if ambient else None,
            notes=AUTO_RECORD_NOTES,
        )
        return self._save(scan)

    def handle_mqtt_message(self, client, userdata, msg) -> None:
        """MQTT callback for the thermal camera topic."""
        try:
            reading = ThermalAutoReading.model_validate(json.loads(msg.payload.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError, PydanticValidationError) as e:
            logger.warning("Discarding malformed thermal payload on %s: %s", msg.topic, e)
            return
        try:
            self.record_auto(reading)
        except AgriCoolError as e:
            logger.error("Failed to store thermal reading from %s: %s", msg.topic, e)

    def _save(self, scan: ThermalScan) -> dict[str, Any]:
        row = self._repo.create(scan.to_row())
        logger.info("Thermal record %s saved for %s (%s)", row.get("id"), scan.name, scan.health_status.value)
        return present_record(row)
