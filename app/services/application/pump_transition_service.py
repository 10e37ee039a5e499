"""
Pump Transition Service
=======================

Single owner of the last known pump state and mode. Every source of pump
state (sensor ingest, manual commands, AUTO mode switches) goes through
this service, under one lock, so each real-world transition produces
exactly one notification.

Detection on ingest:
    reading.pump_on != previous state  →  one notification
    (PUMP_* in AUTO mode, MANUAL_* in MANUAL mode), state updated, and with
    automatic sessions enabled OFF→ON opens a session, ON→OFF closes it.

Commands pre-set the state before the controller reports it, so the next
reading that reflects the commanded state is not a second transition.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional, TYPE_CHECKING

from app.domain.misting import EnvironmentSnapshot, MistingSession
from app.domain.readings import SensorReading
from app.enums import NotificationKind, PumpMode

if TYPE_CHECKING:
    from app.services.application.misting_service import MistingService
    from app.services.application.notifications_service import NotificationsService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionOutcome:
    """What a reading or command did to the pump state."""

    pump_on: bool
    mode: PumpMode
    changed: bool
    kind: NotificationKind | None = None
    notification: dict[str, Any] | None = None
    session: MistingSession | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "pump_on": self.pump_on,
            "mode": self.mode.value,
            "changed": self.changed,
            "kind": self.kind.value if self.kind else None,
            "notification": self.notification,
            "session": self.session.to_dict() if self.session else None,
        }


class PumpTransitionService:
    def __init__(
        self,
        notifications: "NotificationsService",
        misting: "MistingService",
        *,
        auto_sessions: bool = True,
        initial_pump_on: bool = False,
        initial_mode: PumpMode = PumpMode.AUTO,
    ):
        self._notifications = notifications
        self._misting = misting
        self.auto_sessions = auto_sessions
        self._previous_pump_status = initial_pump_on
        self._mode = initial_mode
        self._lock = threading.Lock()

    @property
    def previous_pump_status(self) -> bool:
        with self._lock:
            return self._previous_pump_status

    @property
    def mode(self) -> PumpMode:
        with self._lock:
            return self._mode

    def state(self) -> dict[str, Any]:
        with self._lock:
            return {"pump_on": self._previous_pump_status, "mode": self._mode.value}

    # --- Sensor ingest --------------------------------------------------------
    def observe(self, reading: SensorReading) -> TransitionOutcome | None:
        """
        Compare *reading* with the known pump state.

        Returns:
            The outcome when the reading reports a transition, otherwise None
            (including readings without a pump flag).
        """
        if reading.pump_on is None:
            return None

        snapshot = EnvironmentSnapshot.from_reading(reading)
        with self._lock:
            if reading.pump_on == self._previous_pump_status:
                return None
            return self._transition(reading.pump_on, snapshot, sessions=self.auto_sessions)

    # --- Commands -------------------------------------------------------------
    def apply_manual(self, pump_on: bool, snapshot: EnvironmentSnapshot | None = None) -> TransitionOutcome:
        """
        Record an operator command: mode becomes MANUAL and, when the command
        changes the known state, one MANUAL_* notification is created and the
        session is opened or closed.
        """
        with self._lock:
            self._mode = PumpMode.MANUAL
            if pump_on == self._previous_pump_status:
                logger.info("Manual pump command %s matches known state; no transition", "ON" if pump_on else "OFF")
                return TransitionOutcome(pump_on=pump_on, mode=self._mode, changed=False)
            return self._transition(pump_on, snapshot, sessions=True)

    def switch_to_auto(
        self,
        pump_on: bool | None = None,
        snapshot: EnvironmentSnapshot | None = None,
    ) -> TransitionOutcome:
        """
        Hand control back to the controller's thresholds. Always creates one
        AUTO_MODE notification. When *pump_on* is given and differs from the
        known state, the state is pre-set and the session opened or closed
        without a second notification.
        """
        with self._lock:
            self._mode = PumpMode.AUTO
            changed = pump_on is not None and pump_on != self._previous_pump_status
            session: MistingSession | None = None
            if changed:
                self._previous_pump_status = pump_on
                session = self._sync_session(pump_on, snapshot or EnvironmentSnapshot())

            notification = self._notifications.notify(
                NotificationKind.AUTO_MODE,
                mode=self._mode,
                pump_status=self._previous_pump_status,
                snapshot=snapshot,
            )
            return TransitionOutcome(
                pump_on=self._previous_pump_status,
                mode=self._mode,
                changed=changed,
                kind=NotificationKind.AUTO_MODE,
                notification=notification,
                session=session,
            )

    # --- Internals (lock held) ------------------------------------------------
    def _transition(
        self,
        pump_on: bool,
        snapshot: Optional[EnvironmentSnapshot],
        *,
        sessions: bool,
    ) -> TransitionOutcome:
        kind = NotificationKind.for_transition(pump_on, self._mode)
        notification = self._notifications.notify(
            kind, mode=self._mode, pump_status=pump_on, snapshot=snapshot
        )
        self._previous_pump_status = pump_on
        logger.info("Pump transition %s (%s)", "OFF→ON" if pump_on else "ON→OFF", kind.value)

        session = self._sync_session(pump_on, snapshot or EnvironmentSnapshot()) if sessions else None
        return TransitionOutcome(
            pump_on=pump_on,
            mode=self._mode,
            changed=True,
            kind=kind,
            notification=notification,
            session=session,
        )

    def _sync_session(self, pump_on: bool, snapshot: EnvironmentSnapshot) -> MistingSession | None:
        if pump_on:
            return self._misting.start_if_idle(snapshot, self._mode)
        return self._misting.end_open_session(snapshot)
