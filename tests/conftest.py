"""
Shared test fixtures for the AgriCool backend test suite.

Provides:
- In-memory SQLite database with all tables created
- Repository instances wired to the test database
- A recording Socket.IO stand-in and an SSE broker
- Service factories for the misting / notification / pump services
- A Flask app and test client (MQTT disabled, temp database)

Usage:
    def test_example(misting_service, snapshot):
        session = misting_service.start_session(snapshot)
        assert session.is_open
"""

from __future__ import annotations

import logging
from typing import Any
from unittest.mock import MagicMock

import pytest

from app.domain.misting import EnvironmentSnapshot
from app.utils.emitters import EmitterService
from app.utils.sse import SSEBroker
from infrastructure.database.repositories import (
    MistingLogRepository,
    NotificationRepository,
    SensorReadingRepository,
    ThermalRecordRepository,
    UserRepository,
)
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler

# ---------------------------------------------------------------------------
# Logging: keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("infrastructure").setLevel(logging.WARNING)
logging.getLogger("app").setLevel(logging.WARNING)


# ========================== Database Fixtures ==============================


@pytest.fixture()
def db_handler():
    """In-memory SQLite database with all tables created.

    Each test gets a fresh database.
    """
    handler = SQLiteDatabaseHandler(":memory:")
    handler.create_tables()
    yield handler
    handler.close_all()


# ========================== Repository Fixtures ============================


@pytest.fixture()
def sensor_repo(db_handler):
    return SensorReadingRepository(db_handler)


@pytest.fixture()
def misting_repo(db_handler):
    return MistingLogRepository(db_handler)


@pytest.fixture()
def notification_repo(db_handler):
    return NotificationRepository(db_handler)


@pytest.fixture()
def user_repo(db_handler):
    return UserRepository(db_handler)


@pytest.fixture()
def thermal_repo(db_handler):
    return ThermalRecordRepository(db_handler)


# ========================== Real-time Fixtures =============================


class FakeSocketIO:
    """Records every emit instead of talking to clients."""

    def __init__(self):
        self.emitted: list[tuple[str, Any, str]] = []

    def emit(self, event, data, namespace="/"):
        self.emitted.append((event, data, namespace))

    def events(self) -> list[str]:
        return [event for event, _data, _ns in self.emitted]


@pytest.fixture()
def fake_socketio():
    return FakeSocketIO()


@pytest.fixture()
def sse_broker():
    broker = SSEBroker(queue_size=10, keepalive_seconds=0.01)
    yield broker
    broker.close()


@pytest.fixture()
def emitter(fake_socketio, sse_broker):
    return EmitterService(fake_socketio, sse_broker)


@pytest.fixture()
def mock_audit_logger():
    """Mock AuditLogger."""
    logger = MagicMock()
    logger.log_event = MagicMock()
    return logger


# ========================== Service Factory Fixtures =======================


@pytest.fixture()
def notifications_service(notification_repo, emitter):
    from app.services.application.notifications_service import NotificationsService

    return NotificationsService(notification_repo, emitter)


@pytest.fixture()
def misting_service(misting_repo, emitter):
    from app.services.application.misting_service import MistingService

    return MistingService(misting_repo, emitter)


@pytest.fixture()
def transitions(notifications_service, misting_service):
    """PumpTransitionService starting OFF in AUTO mode with automatic sessions."""
    from app.services.application.pump_transition_service import PumpTransitionService

    return PumpTransitionService(notifications_service, misting_service)


@pytest.fixture()
def sensor_service(sensor_repo, transitions, emitter):
    from app.services.application.sensor_service import SensorService

    return SensorService(sensor_repo, transitions, emitter)


@pytest.fixture()
def snapshot():
    return EnvironmentSnapshot(temperature=32.0, humidity=70.0, heat_index=39.6, water_level=80)


# ========================== Flask App Fixtures =============================


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("AGRICOOL_SECRET_KEY", "test-secret")
    monkeypatch.setenv("AGRICOOL_ENABLE_MQTT", "False")
    from app import create_app

    flask_app = create_app(
        {
            "database_path": str(tmp_path / "agricool.db"),
            "enable_mqtt": False,
            "audit_log_path": str(tmp_path / "audit.log"),
            "log_dir": str(tmp_path / "logs"),
        }
    )
    flask_app.config["TESTING"] = True
    try:
        yield flask_app
    finally:
        container = flask_app.config.get("CONTAINER")
        if container is not None:
            container.shutdown()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def container(app):
    return app.config["CONTAINER"]
