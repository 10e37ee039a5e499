from enum import Enum


class RealtimeEvent(str, Enum):
    """Event names pushed to Socket.IO and SSE subscribers."""

    SENSOR_UPDATE = "sensor-update"
    MISTING_STARTED = "misting-started"
    MISTING_ENDED = "misting-ended"
    NOTIFICATION = "notification"
    PUMP_MODE = "pump-mode"


class ConnectivityStatus(str, Enum):
    """MQTT connectivity transitions reported by the broker wrapper."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    FAILED_OVER = "failed_over"
