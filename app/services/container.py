from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from app.config import AppConfig
from app.enums import PumpMode
from app.hardware.mqtt.mqtt_broker_wrapper import BrokerEndpoint, MQTTClientWrapper
from app.services.application.auth_service import UserAuthManager
from app.services.application.misting_service import MistingService
from app.services.application.notifications_service import NotificationsService
from app.services.application.pump_control_service import PumpControlService
from app.services.application.pump_transition_service import PumpTransitionService
from app.services.application.report_service import ReportService
from app.services.application.sensor_service import SensorService
from app.services.application.thermal_record_service import ThermalRecordService
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
from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Aggregate and manage core backend services."""

    config: AppConfig
    database: SQLiteDatabaseHandler
    user_repo: UserRepository
    sensor_repo: SensorReadingRepository
    misting_repo: MistingLogRepository
    notification_repo: NotificationRepository
    thermal_repo: ThermalRecordRepository
    audit_logger: AuditLogger
    sse_broker: SSEBroker
    emitter_service: EmitterService
    notifications_service: NotificationsService
    misting_service: MistingService
    pump_transitions: PumpTransitionService
    sensor_service: SensorService
    pump_control_service: PumpControlService
    auth_manager: UserAuthManager
    thermal_record_service: ThermalRecordService
    report_service: ReportService
    mqtt_client: Optional[MQTTClientWrapper]
    _shutdown_complete: bool = field(default=False, init=False, repr=False)

    @classmethod
    def build(
        cls,
        config: AppConfig,
        *,
        socketio: Any = None,
        mqtt_client: Optional[MQTTClientWrapper] = None,
    ) -> "ServiceContainer":
        """Construct the service container with all dependencies.

        Args:
            config: Application configuration
            socketio: Flask-SocketIO instance used for broadcasts
            mqtt_client: Pre-built MQTT client (tests); otherwise one is
                created when MQTT is enabled
        """
        logger.info("Building ServiceContainer...")
        database = SQLiteDatabaseHandler(config.database_path)
        database.init_app()

        user_repo = UserRepository(database)
        sensor_repo = SensorReadingRepository(database)
        misting_repo = MistingLogRepository(database)
        notification_repo = NotificationRepository(database)
        thermal_repo = ThermalRecordRepository(database)

        audit_logger = AuditLogger(config.audit_log_path, config.log_level)
        sse_broker = SSEBroker(config.sse_queue_size, config.sse_keepalive_seconds)
        emitter = EmitterService(socketio, sse_broker)

        notifications_service = NotificationsService(notification_repo, emitter)
        misting_service = MistingService(misting_repo, emitter, log_limit=config.misting_log_limit)

        seeded = sensor_repo.latest_pump_flag()
        pump_transitions = PumpTransitionService(
            notifications_service,
            misting_service,
            auto_sessions=config.auto_sessions_enabled,
            initial_pump_on=bool(seeded),
            initial_mode=PumpMode.AUTO,
        )
        logger.info("Pump state seeded as %s (mode AUTO)", "ON" if seeded else "OFF")

        if mqtt_client is None and config.enable_mqtt:
            mqtt_client = MQTTClientWrapper(
                BrokerEndpoint(config.mqtt_broker_host, config.mqtt_broker_port),
                BrokerEndpoint(config.mqtt_fallback_host, config.mqtt_fallback_port)
                if config.mqtt_fallback_host
                else None,
                client_id=config.mqtt_client_id,
                keepalive=config.mqtt_keepalive,
                connect_timeout=config.mqtt_connect_timeout,
                reconnect_min_delay=config.mqtt_reconnect_min_delay,
                reconnect_max_delay=config.mqtt_reconnect_max_delay,
                qos=config.mqtt_qos,
            )
        elif not config.enable_mqtt:
            logger.info("MQTT disabled by configuration; pump commands will not be published")

        sensor_service = SensorService(sensor_repo, pump_transitions, emitter)
        pump_control_service = PumpControlService(
            pump_transitions,
            misting_service,
            sensor_repo,
            mqtt_client=mqtt_client,
            emitter_service=emitter,
            command_topic=config.pump_command_topic,
        )
        thermal_record_service = ThermalRecordService(thermal_repo, sensor_repo)

        if mqtt_client is not None:
            mqtt_client.subscribe(config.sensor_topic, sensor_service.handle_mqtt_message)
            mqtt_client.subscribe(config.thermal_topic, thermal_record_service.handle_mqtt_message)

        container = cls(
            config=config,
            database=database,
            user_repo=user_repo,
            sensor_repo=sensor_repo,
            misting_repo=misting_repo,
            notification_repo=notification_repo,
            thermal_repo=thermal_repo,
            audit_logger=audit_logger,
            sse_broker=sse_broker,
            emitter_service=emitter,
            notifications_service=notifications_service,
            misting_service=misting_service,
            pump_transitions=pump_transitions,
            sensor_service=sensor_service,
            pump_control_service=pump_control_service,
            auth_manager=UserAuthManager(user_repo, audit_logger),
            thermal_record_service=thermal_record_service,
            report_service=ReportService(misting_repo),
            mqtt_client=mqtt_client,
        )

        container.notifications_service.delete_old(config.notification_retention_days)
        logger.info("ServiceContainer built successfully.")
        return container

    def shutdown(self) -> None:
        """Release external resources before process exit."""
        if self._shutdown_complete:
            return
        self._shutdown_complete = True

        self.sse_broker.close()
        if self.mqtt_client is not None:
            try:
                self.mqtt_client.disconnect()
            except Exception as e:
                logger.warning("Failed to stop MQTT client: %s", e)

        self.database.close_all()
        self.audit_logger.close()
        logger.info("ServiceContainer shutdown complete.")
