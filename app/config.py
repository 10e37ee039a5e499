"""
Configuration for AgriCool
==========================
Runtime settings for the shed misting backend, read from ``AGRICOOL_*``
environment variables. Also sets up the logging configuration.
"""

import logging
import os
import sys
from contextlib import suppress
from dataclasses import dataclass, field
from logging.handlers import RotatingFileHandler
from typing import Any

DEFAULT_SECRET_KEY = "AgriCoolDevSecretKey"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number.") from None


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("AGRICOOL_ENV", "development"))
    secret_key: str = field(default_factory=lambda: os.getenv("AGRICOOL_SECRET_KEY", DEFAULT_SECRET_KEY))
    database_path: str = field(default_factory=lambda: os.getenv("AGRICOOL_DATABASE_PATH", "database/agricool.db"))

    DEBUG: bool = field(default_factory=lambda: _env_bool("AGRICOOL_DEBUG", False))
    log_level: str = field(default_factory=lambda: os.getenv("AGRICOOL_LOG_LEVEL", "INFO"))
    log_dir: str = field(default_factory=lambda: os.getenv("AGRICOOL_LOG_DIR", "logs"))
    audit_log_path: str = field(default_factory=lambda: os.getenv("AGRICOOL_AUDIT_LOG_PATH", "logs/audit.log"))
    socketio_cors_origins: str = field(default_factory=lambda: os.getenv("AGRICOOL_SOCKETIO_CORS", "*"))
    max_upload_mb: int = field(default_factory=lambda: _env_int("AGRICOOL_MAX_UPLOAD_MB", 4))

    # MQTT: primary broker first, one-time switch to the fallback broker.
    enable_mqtt: bool = field(default_factory=lambda: _env_bool("AGRICOOL_ENABLE_MQTT", True))
    mqtt_broker_host: str = field(default_factory=lambda: os.getenv("AGRICOOL_MQTT_HOST", "agricool-mqtt"))
    mqtt_broker_port: int = field(default_factory=lambda: _env_int("AGRICOOL_MQTT_PORT", 1883))
    mqtt_fallback_host: str = field(default_factory=lambda: os.getenv("AGRICOOL_MQTT_FALLBACK_HOST", "192.168.1.3"))
    mqtt_fallback_port: int = field(default_factory=lambda: _env_int("AGRICOOL_MQTT_FALLBACK_PORT", 1883))
    mqtt_client_id: str = field(default_factory=lambda: os.getenv("AGRICOOL_MQTT_CLIENT_ID", "agricool-backend"))
    mqtt_connect_timeout: float = field(default_factory=lambda: _env_float("AGRICOOL_MQTT_CONNECT_TIMEOUT", 10.0))
    mqtt_reconnect_min_delay: int = field(default_factory=lambda: _env_int("AGRICOOL_MQTT_RECONNECT_MIN_DELAY", 5))
    mqtt_reconnect_max_delay: int = field(default_factory=lambda: _env_int("AGRICOOL_MQTT_RECONNECT_MAX_DELAY", 60))
    mqtt_keepalive: int = field(default_factory=lambda: _env_int("AGRICOOL_MQTT_KEEPALIVE", 60))
    mqtt_qos: int = field(default_factory=lambda: _env_int("AGRICOOL_MQTT_QOS", 1))

    pump_command_topic: str = field(default_factory=lambda: os.getenv("AGRICOOL_PUMP_TOPIC", "agricool/pump/control"))
    sensor_topic: str = field(default_factory=lambda: os.getenv("AGRICOOL_SENSOR_TOPIC", "agricool/sensors"))
    thermal_topic: str = field(default_factory=lambda: os.getenv("AGRICOOL_THERMAL_TOPIC", "agricool/thermal"))

    # Misting / notifications
    auto_sessions_enabled: bool = field(default_factory=lambda: _env_bool("AGRICOOL_AUTO_SESSIONS", True))
    notification_retention_days: int = field(
        default_factory=lambda: _env_int("AGRICOOL_NOTIFICATION_RETENTION_DAYS", 30)
    )
    misting_log_limit: int = field(default_factory=lambda: _env_int("AGRICOOL_MISTING_LOG_LIMIT", 100))

    # Server-sent events
    sse_queue_size: int = field(default_factory=lambda: _env_int("AGRICOOL_SSE_QUEUE_SIZE", 10))
    sse_keepalive_seconds: float = field(default_factory=lambda: _env_float("AGRICOOL_SSE_KEEPALIVE", 15.0))

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.environment == "production" and self.secret_key == DEFAULT_SECRET_KEY:
            raise RuntimeError(
                "SECURITY ERROR: Cannot use default secret key in production!\n"
                "Set AGRICOOL_SECRET_KEY environment variable to a secure random value.\n"
                'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
            )
        if self.mqtt_qos not in (0, 1, 2):
            raise ValueError("AGRICOOL_MQTT_QOS must be 0, 1 or 2.")

    def as_flask_config(self) -> dict[str, Any]:
        """Render configuration values for Flask application."""
        if not self.secret_key:
            raise RuntimeError("Missing AGRICOOL_SECRET_KEY environment variable.")

        return {
            "ENV": self.environment,
            "SECRET_KEY": self.secret_key,
            "DATABASE_PATH": self.database_path,
            "MQTT_BROKER_HOST": self.mqtt_broker_host,
            "MQTT_BROKER_PORT": self.mqtt_broker_port,
            "SOCKETIO_CORS_ALLOWED_ORIGINS": self.socketio_cors_origins,
            "AUDIT_LOG_PATH": self.audit_log_path,
            "DEBUG": self.DEBUG,
            "MAX_CONTENT_LENGTH": self.max_upload_mb * 1024 * 1024,
            "JSON_SORT_KEYS": False,
        }


def setup_logging(debug: bool = False, log_level: str = "INFO", log_dir: str = "logs") -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if debug else getattr(logging, str(log_level).upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # Avoid adding duplicates when create_app is called multiple times
    has_console = any(getattr(h, "name", "") == "agricool_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "agricool_file" for h in root.handlers)
    added_handler = False

    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "agricool_console"
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    if not has_file:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "agricool.log"),
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.name = "agricool_file"
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    for handler in root.handlers:
        if getattr(handler, "name", "") in {"agricool_console", "agricool_file"}:
            handler.setLevel(level)

    if added_handler:
        root.info("Logging initialized at level: %s", logging.getLevelName(level))

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    # Socket.IO polling is chatty; keep it out of the shed gateway's logs.
    logging.getLogger("socketio").setLevel(logging.WARNING)
    logging.getLogger("engineio").setLevel(logging.WARNING)


def load_config() -> AppConfig:
    """Helper for callers to load and validate configuration."""
    return AppConfig()
