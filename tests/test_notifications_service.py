from datetime import timedelta

import pytest

from app.domain.exceptions import NotFoundError, ValidationError
from app.domain.misting import EnvironmentSnapshot
from app.enums import NotificationKind, PumpMode
from app.services.application.notifications_service import build_message


def test_build_message_embeds_snapshot():
    message = build_message(
        NotificationKind.PUMP_ON,
        EnvironmentSnapshot(temperature=32.14, humidity=70, water_level=80),
    )
    assert message == "Misting pump turned ON automatically (Temp: 32.1°C, Humidity: 70.0%, Water: 80.0%)"


def test_build_message_handles_missing_metrics():
    message = build_message(NotificationKind.MANUAL_OFF, EnvironmentSnapshot(temperature=None, humidity=55))
    assert "Temp: N/A" in message
    assert message.startswith("Misting pump turned OFF manually")


class TestNotificationsService:
    def _notify(self, service, kind=NotificationKind.PUMP_ON, snapshot=None):
        return service.notify(kind, mode=PumpMode.AUTO, pump_status=True, snapshot=snapshot)

    def test_notify_persists_and_broadcasts(self, notifications_service, fake_socketio, snapshot):
        notification = self._notify(notifications_service, snapshot=snapshot)

        assert notification["kind"] == "PUMP_ON"
        assert notification["pump_status"] is True
        assert notification["is_read"] is False
        assert notification["temperature"] == 32.0
        assert fake_socketio.emitted[-1][0] == "notification"

    def test_list_is_newest_first(self, notifications_service):
        first = self._notify(notifications_service, NotificationKind.PUMP_ON)
        second = self._notify(notifications_service, NotificationKind.PUMP_OFF)

        ids = [n["id"] for n in notifications_service.list_notifications()]
        assert ids == [second["id"], first["id"]]

    def test_list_limit_is_bounded(self, notifications_service):
        with pytest.raises(ValidationError):
            notifications_service.list_notifications(0)

    def test_mark_read_and_unread_count(self, notifications_service):
        first = self._notify(notifications_service)
        self._notify(notifications_service)
        assert notifications_service.unread_count() == 2

        notifications_service.mark_as_read(first["id"])
        assert notifications_service.unread_count() == 1

        assert notifications_service.mark_all_as_read() == 1
        assert notifications_service.unread_count() == 0

    def test_mark_unknown_notification_is_not_found(self, notifications_service):
        with pytest.raises(NotFoundError):
            notifications_service.mark_as_read(999)

    def test_delete_old_only_removes_expired_rows(self, notifications_service, db_handler):
        old = self._notify(notifications_service)
        fresh = self._notify(notifications_service)
        with db_handler.connection() as conn:
            conn.execute(
                "UPDATE Notifications SET created_at = ? WHERE id = ?",
                ("2000-01-01T00:00:00.000000+00:00", old["id"]),
            )

        assert notifications_service.delete_old(30) == 1
        assert [n["id"] for n in notifications_service.list_notifications()] == [fresh["id"]]
