"""Repository for misting sessions."""

from __future__ import annotations

from datetime import datetime

from app.domain.misting import EnvironmentSnapshot, MistingSession
from app.enums import PumpMode
from app.utils.time import to_utc_iso
from infrastructure.database.ops.misting import MistingOperations


class MistingLogRepository:
    """Maps MistingLogs rows to :class:`MistingSession` objects."""

    def __init__(self, backend: MistingOperations) -> None:
        self._backend = backend

    def open(self, started_at: datetime, mode: PumpMode, metrics: EnvironmentSnapshot) -> MistingSession:
        row = self._backend.insert_misting_log(
            started_at=to_utc_iso(started_at),
            misting_type=mode.value,
            temperature=metrics.temperature,
            humidity=metrics.humidity,
            heat_index=metrics.heat_index,
            water_level=metrics.water_level,
        )
        return MistingSession.from_row(row)

    def close(self, session_id: int, ended_at: datetime, metrics: EnvironmentSnapshot) -> bool:
        return self._backend.close_misting_log(
            session_id,
            ended_at=to_utc_iso(ended_at),
            temperature=metrics.temperature,
            humidity=metrics.humidity,
            heat_index=metrics.heat_index,
            water_level=metrics.water_level,
        )

    def get(self, session_id: int) -> MistingSession | None:
        row = self._backend.get_misting_log(session_id)
        return MistingSession.from_row(row) if row else None

    def get_open(self) -> MistingSession | None:
        row = self._backend.get_open_misting_log()
        return MistingSession.from_row(row) if row else None

    def recent(self, limit: int) -> list[MistingSession]:
        return [MistingSession.from_row(row) for row in self._backend.list_misting_logs(limit)]

    def started_between(self, start: datetime, end: datetime | None = None) -> list[MistingSession]:
        rows = self._backend.list_misting_logs_between(
            to_utc_iso(start), to_utc_iso(end) if end is not None else None
        )
        return [MistingSession.from_row(row) for row in rows]
