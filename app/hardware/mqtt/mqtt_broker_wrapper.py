"""
MQTT client wrapper with a primary broker and a one-time fallback.

The wrapper connects to the primary broker first. If the connect call raises
or no CONNACK arrives within the connect timeout it switches, once, to the
fallback broker using a ``-fallback`` client id. Later drops are handled by
paho's own reconnect loop. Subscriptions are recorded and replayed on every
(re)connect, and incoming messages fan out to every matching callback.
"""

import logging
import os
import threading
from dataclasses import dataclass, field
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Any, Callable

import paho.mqtt.client as mqtt

from app.enums.events import ConnectivityStatus
from app.hardware.mqtt.client_factory import create_mqtt_client
from app.utils.time import utc_now

# MQTT traffic gets its own rotating file so it cannot flood the main log.
_mqtt_logger = logging.getLogger("agricool.mqtt")
if not _mqtt_logger.handlers:
    _log_dir = os.getenv("AGRICOOL_LOG_DIR", "logs")
    os.makedirs(_log_dir, exist_ok=True)
    _mqtt_handler = RotatingFileHandler(
        os.path.join(_log_dir, "mqtt.log"),
        maxBytes=10 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
        delay=True,
    )
    _mqtt_handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
    _mqtt_logger.addHandler(_mqtt_handler)
    _mqtt_logger.setLevel(logging.INFO)
    _mqtt_logger.propagate = False

MessageCallback = Callable[[Any, Any, Any], None]
FALLBACK_SUFFIX = "-fallback"


@dataclass(frozen=True)
class BrokerEndpoint:
    host: str
    port: int = 1883

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass
class HealthStatus:
    """
    Tracks the health status of the MQTT client connection.
    """

    is_connected: bool = False
    status: ConnectivityStatus = ConnectivityStatus.DISCONNECTED
    active_broker: str | None = None
    failed_over: bool = False
    last_error: str | None = None
    last_error_time: datetime | None = None
    connection_attempts: int = 0
    successful_publishes: int = 0
    failed_publishes: int = 0
    active_subscriptions: int = 0
    last_connected_at: datetime | None = field(default=None)

    @property
    def success_rate(self) -> float:
        """Calculate publish success rate percentage"""
        total_publishes = self.successful_publishes + self.failed_publishes
        if total_publishes == 0:
            return 0.0
        return (self.successful_publishes / total_publishes) * 100

    def mark_connected(self, broker: str):
        self.is_connected = True
        self.active_broker = broker
        self.status = ConnectivityStatus.FAILED_OVER if self.failed_over else ConnectivityStatus.CONNECTED
        self.last_connected_at = utc_now()
        self.last_error = None
        self.last_error_time = None

    def mark_disconnected(self):
        self.is_connected = False
        self.status = ConnectivityStatus.DISCONNECTED

    def record_error(self, error: Exception | str):
        self.last_error = str(error)
        self.last_error_time = utc_now()

    def to_dict(self):
        return {
            "is_connected": self.is_connected,
            "status": self.status.value,
            "active_broker": self.active_broker,
            "failed_over": self.failed_over,
            "last_error": self.last_error,
            "last_error_time": self.last_error_time.isoformat() if self.last_error_time else None,
            "last_connected_at": self.last_connected_at.isoformat() if self.last_connected_at else None,
            "connection_attempts": self.connection_attempts,
            "successful_publishes": self.successful_publishes,
            "failed_publishes": self.failed_publishes,
            "active_subscriptions": self.active_subscriptions,
            "publish_success_rate": round(self.success_rate, 2),
        }


class MQTTClientWrapper:
    """
    Wrapper class for handling MQTT client functionality.
    """

    def __init__(
        self,
        primary: BrokerEndpoint,
        fallback: BrokerEndpoint | None = None,
        *,
        client_id: str = "agricool-backend",
        keepalive: int = 60,
        connect_timeout: float = 10.0,
        reconnect_min_delay: int = 5,
        reconnect_max_delay: int = 60,
        qos: int = 1,
        client_factory: Callable[..., Any] = create_mqtt_client,
        auto_connect: bool = True,
    ):
        self.primary = primary
        self.fallback = fallback
        self.client_id = client_id
        self.keepalive = keepalive
        self.connect_timeout = connect_timeout
        self.reconnect_min_delay = reconnect_min_delay
        self.reconnect_max_delay = reconnect_max_delay
        self.qos = qos
        self._client_factory = client_factory

        self.client = None
        self.broker: BrokerEndpoint | None = None
        self.health_status = HealthStatus()
        self._lock = threading.RLock()
        self._connack = threading.Event()
        self._subscriptions: list[tuple[str, MessageCallback]] = []
        self._closed = False

        if auto_connect:
            self.connect()

    @property
    def connected(self) -> bool:
        return self.health_status.is_connected

    # --- Connection -----------------------------------------------------------
    def connect(self) -> bool:
        """Connect to the primary broker, falling back once if it is unreachable."""
        if self._attempt(self.primary, self.client_id):
            return True

        if self.fallback is None:
            _mqtt_logger.error("Primary MQTT broker %s unreachable and no fallback configured", self.primary)
            return False

        _mqtt_logger.warning("Primary MQTT broker %s unreachable, switching to fallback %s", self.primary, self.fallback)
        self._teardown_client()
        with self._lock:
            self.health_status.failed_over = True
        if self._attempt(self.fallback, f"{self.client_id}{FALLBACK_SUFFIX}"):
            return True

        # The fallback client keeps retrying in paho's loop thread.
        _mqtt_logger.error("Fallback MQTT broker %s did not acknowledge within %ss", self.fallback, self.connect_timeout)
        return False

    def _attempt(self, endpoint: BrokerEndpoint, client_id: str) -> bool:
        self._connack.clear()
        with self._lock:
            self.health_status.connection_attempts += 1
            self.broker = endpoint
            self.client = self._client_factory(
                client_id=client_id,
                reconnect_min_delay=self.reconnect_min_delay,
                reconnect_max_delay=self.reconnect_max_delay,
            )
            self.client.on_connect = self._on_connect
            self.client.on_disconnect = self._on_disconnect
            self.client.on_message = self._dispatch_message
            client = self.client

        try:
            client.connect_async(endpoint.host, endpoint.port, self.keepalive)
            client.loop_start()
        except Exception as e:
            _mqtt_logger.error("Error connecting to MQTT broker %s: %s", endpoint, e)
            with self._lock:
                self.health_status.record_error(e)
            return False

        if self._connack.wait(self.connect_timeout):
            return True

        with self._lock:
            self.health_status.record_error(f"No CONNACK from {endpoint} within {self.connect_timeout}s")
        return False

    def _teardown_client(self) -> None:
        with self._lock:
            client = self.client
            self.client = None
        if client is None:
            return
        try:
            client.loop_stop()
            client.disconnect()
        except Exception as e:
            _mqtt_logger.debug("Ignoring error while discarding MQTT client: %s", e)

    def _on_connect(self, client, userdata, flags, rc) -> None:
        if rc != 0:
            _mqtt_logger.error("MQTT broker %s refused connection: rc=%s", self.broker, rc)
            with self._lock:
                self.health_status.record_error(f"Connection refused (rc={rc})")
            return

        with self._lock:
            self.health_status.mark_connected(str(self.broker))
            subscriptions = list(self._subscriptions)
        _mqtt_logger.info("Connected to MQTT broker %s", self.broker)

        for topic in dict.fromkeys(sub for sub, _ in subscriptions):
            result, _mid = client.subscribe(topic, qos=self.qos)
            if result != mqtt.MQTT_ERR_SUCCESS:
                _mqtt_logger.error("Failed to re-subscribe to %s: result code %s", topic, result)
        self._connack.set()

    def _on_disconnect(self, client, userdata, rc) -> None:
        with self._lock:
            self.health_status.mark_disconnected()
            if rc != 0:
                self.health_status.record_error(f"Unexpected disconnect (rc={rc})")
        if rc != 0:
            _mqtt_logger.warning("Lost connection to MQTT broker %s (rc=%s); paho will reconnect", self.broker, rc)
        else:
            _mqtt_logger.info("Disconnected from MQTT broker %s", self.broker)

    def disconnect(self):
        """Stop the network loop and disconnect. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._teardown_client()
        with self._lock:
            self.health_status.mark_disconnected()
            self._subscriptions.clear()
            self.health_status.active_subscriptions = 0
        _mqtt_logger.info("MQTT client shut down.")

    # --- Messaging ------------------------------------------------------------
    def publish(self, topic: str, payload: str, *, retain: bool = False) -> bool:
        """
        Publish *payload* with the configured QoS.

        Returns:
            True when the message was handed to the client, False when the
            client is not connected or the publish failed.
        """
        with self._lock:
            client = self.client
            connected = self.health_status.is_connected
        if client is None or not connected:
            with self._lock:
                self.health_status.failed_publishes += 1
            _mqtt_logger.warning("MQTT client not connected. Cannot publish to %s.", topic)
            return False

        try:
            msg_info = client.publish(topic, payload, qos=self.qos, retain=retain)
        except Exception as e:
            with self._lock:
                self.health_status.failed_publishes += 1
                self.health_status.record_error(e)
            _mqtt_logger.error("Error publishing to MQTT: %s", e)
            return False

        if msg_info.rc == mqtt.MQTT_ERR_SUCCESS:
            with self._lock:
                self.health_status.successful_publishes += 1
            _mqtt_logger.debug("Published to %s: %s", topic, payload)
            return True

        with self._lock:
            self.health_status.failed_publishes += 1
        _mqtt_logger.error("Failed to publish to %s: %s. MQTT result code: %s", topic, payload, msg_info.rc)
        return False

    def subscribe(self, topic: str, callback: MessageCallback) -> None:
        """
        Record *callback* for *topic*. The broker subscription is made now if
        connected and replayed on every reconnect.
        """
        with self._lock:
            self._subscriptions.append((topic, callback))
            self.health_status.active_subscriptions = len(self._subscriptions)
            client = self.client
            connected = self.health_status.is_connected

        if client is not None and connected:
            result, _mid = client.subscribe(topic, qos=self.qos)
            if result != mqtt.MQTT_ERR_SUCCESS:
                _mqtt_logger.error("Failed to subscribe to topic %s: result code %s", topic, result)
                return
        _mqtt_logger.info("Subscribed to topic %s with callback %s", topic, getattr(callback, "__name__", callback))

    def _dispatch_message(self, client, userdata, msg) -> None:
        """
        Fan out MQTT messages to all registered callbacks that match the topic
        using MQTT wildcard semantics.
        """
        with self._lock:
            callbacks = list(self._subscriptions)

        handled = False
        for sub, callback in callbacks:
            if not mqtt.topic_matches_sub(sub, msg.topic):
                continue
            handled = True
            try:
                callback(client, userdata, msg)
            except Exception as e:
                _mqtt_logger.error("Error in MQTT callback for topic %s: %s", sub, e, exc_info=True)

        if not handled:
            _mqtt_logger.warning(
                "MQTT message on %s had no registered handlers (subscriptions: %s)",
                msg.topic,
                [s[0] for s in callbacks],
            )

    def health(self) -> dict[str, Any]:
        with self._lock:
            return self.health_status.to_dict()
