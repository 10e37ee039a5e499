"""
Pump Control Service
====================

Operator commands for the misting pump. Commands are published to the
controller over MQTT and recorded through :class:`PumpTransitionService`.
A failed publish does not roll back the recorded state; it is reported as
``published: false``.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, TYPE_CHECKING

from app.domain.misting import EnvironmentSnapshot
from app.domain.readings import SensorReading

if TYPE_CHECKING:
    from app.hardware.mqtt.mqtt_broker_wrapper import MQTTClientWrapper
    from app.services.application.misting_service import MistingService
    from app.services.application.pump_transition_service import PumpTransitionService, TransitionOutcome
    from app.utils.emitters import EmitterService
    from infrastructure.database.repositories.sensors import SensorReadingRepository

logger = logging.getLogger(__name__)

COMMAND_ON = "ON"
COMMAND_OFF = "OFF"
COMMAND_AUTO = "AUTO"


class PumpControlService:
    def __init__(
        self,
        transitions: "PumpTransitionService",
        misting: "MistingService",
        sensor_repo: "SensorReadingRepository",
        *,
        mqtt_client: Optional["MQTTClientWrapper"] = None,
        emitter_service: Optional["EmitterService"] = None,
        command_topic: str = "agricool/pump/control",
    ):
        self._transitions = transitions
        self._misting = misting
        self._sensor_repo = sensor_repo
        self._mqtt = mqtt_client
        self._emitter = emitter_service
        self.command_topic = command_topic

    def set_manual(self, pump_on: bool) -> dict[str, Any]:
        """Switch to MANUAL mode and drive the pump ON or OFF."""
        outcome = self._transitions.apply_manual(pump_on, self._latest_snapshot())
        published = self._publish(COMMAND_ON if pump_on else COMMAND_OFF)
        return self._respond(outcome, published)

    def set_auto(self, pump_on: bool | None = None) -> dict[str, Any]:
        """Return control to the controller's automatic thresholds."""
        outcome = self._transitions.switch_to_auto(pump_on, self._latest_snapshot())
        published = self._publish(COMMAND_AUTO)
        return self._respond(outcome, published)

    def status(self) -> dict[str, Any]:
        open_session = self._misting.open_session()
        return {
            **self._transitions.state(),
            "open_session": open_session.to_dict() if open_session else None,
            "mqtt": self._mqtt.health() if self._mqtt is not None else {"enabled": False},
        }

    def _respond(self, outcome: "TransitionOutcome", published: bool) -> dict[str, Any]:
        result = {**outcome.to_dict(), "published": published}
        if self._emitter is not None:
            self._emitter.emit_pump_mode(
                {"pump_on": outcome.pump_on, "mode": outcome.mode.value, "published": published}
            )
        return result

    def _publish(self, command: str) -> bool:
        if self._mqtt is None:
            logger.warning("MQTT disabled; pump command %s not published", command)
            return False
        published = self._mqtt.publish(self.command_topic, command)
        if published:
            logger.info("Pump command %s published to %s", command, self.command_topic)
        return published

    def _latest_snapshot(self) -> EnvironmentSnapshot | None:
        row = self._sensor_repo.latest()
        if row is None:
            return None
        return EnvironmentSnapshot.from_reading(SensorReading.from_payload(row))
