"""
Misting Session Service
=======================

Opens and closes misting sessions (one ON→OFF pump cycle each) and lists
them for the daily log. At most one session is open at any time.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from app.domain.exceptions import ConflictError, NotFoundError
from app.domain.misting import EnvironmentSnapshot, MistingSession, clamp_end_time
from app.enums import PumpMode
from app.utils.time import local_midnight_utc, utc_now

if TYPE_CHECKING:
    from infrastructure.database.repositories.misting import MistingLogRepository
    from app.utils.emitters import EmitterService

logger = logging.getLogger(__name__)


class MistingService:
    def __init__(
        self,
        misting_repo: "MistingLogRepository",
        emitter_service: Optional["EmitterService"] = None,
        *,
        log_limit: int = 100,
    ):
        self._repo = misting_repo
        self._emitter = emitter_service
        self.log_limit = log_limit
        self._lock = threading.RLock()

    def start_session(
        self,
        metrics: EnvironmentSnapshot,
        mode: PumpMode = PumpMode.AUTO,
        *,
        started_at: datetime | None = None,
    ) -> MistingSession:
        """
        Open a new session.

        Raises:
            ConflictError: If a session is already open.
        """
        with self._lock:
            current = self._repo.get_open()
            if current is not None:
                raise ConflictError(
                    f"Misting session {current.id} is already in progress",
                    detail={"open_session_id": current.id},
                )
            session = self._repo.open(started_at or utc_now(), mode, metrics)

        logger.info("Misting session %s started (%s)", session.id, session.mode.value)
        if self._emitter is not None:
            self._emitter.emit_misting_started(session.to_dict())
        return session

    def end_session(
        self,
        session_id: int,
        metrics: EnvironmentSnapshot,
        *,
        ended_at: datetime | None = None,
    ) -> MistingSession:
        """
        Finalize the open session *session_id*.

        Raises:
            NotFoundError: If the id is unknown or the session is already closed.
        """
        with self._lock:
            session = self._repo.get(session_id)
            if session is None or not session.is_open:
                raise NotFoundError(
                    f"No open misting session with id {session_id}",
                    detail={"session_id": session_id},
                )
            end_time = clamp_end_time(session.started_at, ended_at or utc_now())
            if not self._repo.close(session_id, end_time, metrics):
                raise NotFoundError(
                    f"No open misting session with id {session_id}",
                    detail={"session_id": session_id},
                )
            closed = self._repo.get(session_id)

        logger.info("Misting session %s ended after %.0fs", closed.id, closed.duration_seconds or 0)
        if self._emitter is not None:
            self._emitter.emit_misting_ended(closed.to_dict())
        return closed

    def start_if_idle(self, metrics: EnvironmentSnapshot, mode: PumpMode) -> MistingSession | None:
        """Open a session unless one is already open (automatic OFF→ON path)."""
        with self._lock:
            if self._repo.get_open() is not None:
                return None
            return self.start_session(metrics, mode)

    def end_open_session(self, metrics: EnvironmentSnapshot) -> MistingSession | None:
        """Close whichever session is open (automatic ON→OFF path)."""
        with self._lock:
            current = self._repo.get_open()
            if current is None:
                return None
            return self.end_session(current.id, metrics)

    def open_session(self) -> MistingSession | None:
        return self._repo.get_open()

    def sessions_today(self) -> list[MistingSession]:
        return self._repo.started_between(local_midnight_utc())

    def recent_sessions(self, limit: int | None = None) -> list[MistingSession]:
        return self._repo.recent(limit or self.log_limit)
