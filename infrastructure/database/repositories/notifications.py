"""Repository for pump notifications."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from app.enums import NotificationKind, PumpMode
from app.utils.time import to_utc_iso
from infrastructure.database.ops.notifications import NotificationOperations


class NotificationRepository:
    """Repository providing typed access to notification rows."""

    def __init__(self, backend: NotificationOperations) -> None:
        self._backend = backend

    def create(
        self,
        kind: NotificationKind,
        message: str,
        *,
        mode: PumpMode,
        pump_status: bool | None,
        temperature: float | None = None,
        humidity: float | None = None,
        water_level: float | None = None,
    ) -> dict[str, Any]:
        return self._backend.insert_notification(
            kind=kind.value,
            message=message,
            temperature=temperature,
            humidity=humidity,
            water_level=water_level,
            pump_status=pump_status,
            mode=mode.value,
        )

    def list_recent(self, limit: int) -> list[dict[str, Any]]:
        return self._backend.list_notifications(limit)

    def unread_count(self) -> int:
        return self._backend.count_unread_notifications()

    def mark_read(self, notification_id: int) -> bool:
        return self._backend.mark_notification_read(notification_id)

    def mark_all_read(self) -> int:
        return self._backend.mark_all_notifications_read()

    def delete_before(self, cutoff: datetime) -> int:
        return self._backend.delete_notifications_before(to_utc_iso(cutoff))
