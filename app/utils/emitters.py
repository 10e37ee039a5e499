"""
Real-time Emitters
==================

Centralized fan-out of shed events to Socket.IO clients (default namespace,
broadcast) and to the SSE broker. Every transport failure is logged and
swallowed: a broadcast never fails the write that produced it.
"""

import logging
from typing import Any

from flask_socketio import SocketIO

from app.enums.events import RealtimeEvent
from app.utils.sse import SSEBroker

logger = logging.getLogger("emitters")

SOCKETIO_DEFAULT_NAMESPACE = "/"


class EmitterService:
    """
    Attributes:
        sio: The Flask-SocketIO instance used for broadcasts.
        sse: Optional SSE broker mirrored with every event.
    """

    def __init__(self, sio: SocketIO | None, sse: SSEBroker | None = None):
        self.sio = sio
        self.sse = sse

    def emit(self, event: str, payload: dict, namespace: str = SOCKETIO_DEFAULT_NAMESPACE) -> None:
        """
        Broadcast *payload* under *event* to every transport.

        Args:
            event (str): Event name (e.g., "misting-started").
            payload (dict): JSON serializable data to send.
            namespace (str): Socket.IO namespace to emit under (default "/").
        """
        if self.sio is not None:
            try:
                self.sio.emit(event, payload, namespace=namespace)
                logger.debug("Emitted '%s' to namespace '%s'", event, namespace)
            except Exception as e:
                logger.exception("[Emitter] Failed to emit event '%s' over Socket.IO: %s", event, e)

        if self.sse is not None:
            try:
                self.sse.publish(event, payload)
            except Exception as e:
                logger.exception("[Emitter] Failed to publish event '%s' to SSE clients: %s", event, e)

    def emit_sensor_update(self, reading: dict[str, Any]) -> None:
        self.emit(RealtimeEvent.SENSOR_UPDATE.value, reading)

    def emit_misting_started(self, session: dict[str, Any]) -> None:
        self.emit(RealtimeEvent.MISTING_STARTED.value, session)

    def emit_misting_ended(self, session: dict[str, Any]) -> None:
        self.emit(RealtimeEvent.MISTING_ENDED.value, session)

    def emit_notification(self, notification: dict[str, Any]) -> None:
        self.emit(RealtimeEvent.NOTIFICATION.value, notification)

    def emit_pump_mode(self, state: dict[str, Any]) -> None:
        self.emit(RealtimeEvent.PUMP_MODE.value, state)
