"""
Sensor Ingestion Service
========================

Stores shed readings, runs pump transition detection and broadcasts the
reading. Readings arrive over HTTP or on the MQTT sensor topic; both go
through :meth:`SensorService.ingest`.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, TYPE_CHECKING

from app.domain.exceptions import AgriCoolError, NotFoundError, ValidationError
from app.domain.readings import SensorReading
from app.utils.psychrometrics import heat_stress_zone

if TYPE_CHECKING:
    from app.services.application.pump_transition_service import PumpTransitionService
    from app.utils.emitters import EmitterService
    from infrastructure.database.repositories.sensors import SensorReadingRepository

logger = logging.getLogger(__name__)


def present_reading(row: Mapping[str, Any]) -> dict[str, Any]:
    pump_on = row.get("pump_on")
    return {
        "id": row.get("id"),
        "temperature": row.get("temperature"),
        "humidity": row.get("humidity"),
        "water_level": row.get("water_level"),
        "pump_on": None if pump_on is None else bool(pump_on),
        "heat_index": row.get("heat_index"),
        "zone": heat_stress_zone(row.get("temperature")),
        "captured_at": row.get("captured_at"),
    }


class SensorService:
    def __init__(
        self,
        sensor_repo: "SensorReadingRepository",
        transitions: "PumpTransitionService",
        emitter_service: Optional["EmitterService"] = None,
    ):
        self._repo = sensor_repo
        self._transitions = transitions
        self._emitter = emitter_service

    def ingest(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """
        Persist one reading, detect a pump transition and broadcast it.

        Returns:
            ``{"reading": ..., "transition": ...}`` where transition is None
            when the pump state did not change.
        """
        if not isinstance(payload, Mapping):
            raise ValidationError("Reading must be a JSON object")

        reading = SensorReading.from_payload(payload)
        stored = present_reading(self._repo.save(reading))
        outcome = self._transitions.observe(reading)

        if self._emitter is not None:
            self._emitter.emit_sensor_update(stored)
        return {"reading": stored, "transition": outcome.to_dict() if outcome else None}

    def history(self, limit: int, offset: int = 0) -> list[dict[str, Any]]:
        return [present_reading(row) for row in self._repo.history(limit, offset)]

    def latest(self) -> dict[str, Any]:
        row = self._repo.latest()
        if row is None:
            raise NotFoundError("No sensor readings recorded yet")
        return present_reading(row)

    def handle_mqtt_message(self, client, userdata, msg) -> None:
        """MQTT callback for the sensor topic."""
        try:
            payload = json.loads(msg.payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Discarding malformed sensor payload on %s: %s", msg.topic, e)
            return
        try:
            self.ingest(payload)
        except AgriCoolError as e:
            logger.error("Failed to ingest MQTT reading from %s: %s", msg.topic, e)
