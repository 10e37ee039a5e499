"""
Notification Service
====================

Pump notifications for the shed dashboard: one row per observed pump
transition or mode switch, broadcast in real time and purged after the
retention window.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Optional, TYPE_CHECKING

from app.domain.exceptions import NotFoundError, ValidationError
from app.domain.misting import EnvironmentSnapshot
from app.enums import NotificationKind, PumpMode
from app.utils.time import utc_now

if TYPE_CHECKING:
    from infrastructure.database.repositories.notifications import NotificationRepository
    from app.utils.emitters import EmitterService

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 500

_HEADLINES = {
    NotificationKind.PUMP_ON: "Misting pump turned ON automatically",
    NotificationKind.PUMP_OFF: "Misting pump turned OFF automatically",
    NotificationKind.MANUAL_ON: "Misting pump turned ON manually",
    NotificationKind.MANUAL_OFF: "Misting pump turned OFF manually",
    NotificationKind.AUTO_MODE: "Misting pump switched to AUTO mode",
}


def _fmt(value: Optional[float], unit: str) -> str:
    return "N/A" if value is None else f"{value:.1f}{unit}"


def build_message(kind: NotificationKind, snapshot: EnvironmentSnapshot | None) -> str:
    """Headline for *kind* followed by the shed conditions at that moment."""
    headline = _HEADLINES[kind]
    if snapshot is None:
        return headline
    return (
        f"{headline} (Temp: {_fmt(snapshot.temperature, '°C')}, "
        f"Humidity: {_fmt(snapshot.humidity, '%')}, "
        f"Water: {_fmt(snapshot.water_level, '%')})"
    )


def present_notification(row: dict[str, Any]) -> dict[str, Any]:
    pump_status = row.get("pump_status")
    return {
        "id": row.get("id"),
        "kind": row.get("kind"),
        "message": row.get("message"),
        "temperature": row.get("temperature"),
        "humidity": row.get("humidity"),
        "water_level": row.get("water_level"),
        "pump_status": None if pump_status is None else bool(pump_status),
        "mode": row.get("mode"),
        "is_read": bool(row.get("is_read")),
        "created_at": row.get("created_at"),
    }


class NotificationsService:
    """Creates, lists and maintains pump notifications."""

    def __init__(
        self,
        notification_repo: "NotificationRepository",
        emitter_service: Optional["EmitterService"] = None,
    ):
        self._repo = notification_repo
        self._emitter = emitter_service

    def notify(
        self,
        kind: NotificationKind,
        *,
        mode: PumpMode,
        pump_status: bool | None,
        snapshot: EnvironmentSnapshot | None = None,
    ) -> dict[str, Any]:
        """Persist one notification and broadcast it."""
        row = self._repo.create(
            kind,
            build_message(kind, snapshot),
            mode=mode,
            pump_status=pump_status,
            temperature=snapshot.temperature if snapshot else None,
            humidity=snapshot.humidity if snapshot else None,
            water_level=snapshot.water_level if snapshot else None,
        )
        notification = present_notification(row)
        logger.info("Notification %s created: %s", kind.value, notification["message"])
        if self._emitter is not None:
            self._emitter.emit_notification(notification)
        return notification

    def list_notifications(self, limit: int = DEFAULT_LIST_LIMIT) -> list[dict[str, Any]]:
        if limit < 1 or limit > MAX_LIST_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_LIST_LIMIT}")
        return [present_notification(row) for row in self._repo.list_recent(limit)]

    def unread_count(self) -> int:
        return self._repo.unread_count()

    def mark_as_read(self, notification_id: int) -> None:
        if not self._repo.mark_read(notification_id):
            raise NotFoundError(f"Notification {notification_id} not found", detail={"id": notification_id})

    def mark_all_as_read(self) -> int:
        return self._repo.mark_all_read()

    def delete_old(self, days: int = 30) -> int:
        """Delete notifications created more than *days* days ago."""
        if days < 0:
            raise ValidationError("days must not be negative")
        deleted = self._repo.delete_before(utc_now() - timedelta(days=days))
        if deleted:
            logger.info("Purged %d notifications older than %d days", deleted, days)
        return deleted
