"""EmitterService fan-out and the SSE broker."""

import json
from unittest.mock import MagicMock

from app.utils.emitters import EmitterService
from app.utils.sse import SSEBroker, format_sse


class TestEmitterService:
    def test_emit_reaches_socketio_and_sse(self, emitter, fake_socketio, sse_broker):
        subscriber = sse_broker.subscribe()

        emitter.emit_sensor_update({"temperature": 31.0})

        assert fake_socketio.emitted == [("sensor-update", {"temperature": 31.0}, "/")]
        assert subscriber.queue.get_nowait() == ("sensor-update", {"temperature": 31.0})

    def test_socketio_failure_does_not_block_sse(self, sse_broker):
        sio = MagicMock()
        sio.emit.side_effect = RuntimeError("socket down")
        subscriber = sse_broker.subscribe()

        EmitterService(sio, sse_broker).emit_pump_mode({"mode": "AUTO"})

        assert subscriber.queue.get_nowait() == ("pump-mode", {"mode": "AUTO"})

    def test_sse_failure_is_swallowed(self, fake_socketio):
        sse = MagicMock()
        sse.publish.side_effect = RuntimeError("broker closed")

        EmitterService(fake_socketio, sse).emit_notification({"id": 1})

        assert fake_socketio.events() == ["notification"]


class TestSSEBroker:
    def test_full_queue_drops_only_that_subscriber(self):
        broker = SSEBroker(queue_size=1)
        slow = broker.subscribe()
        fast = broker.subscribe()

        assert broker.publish("sensor-update", {"n": 1}) == 2
        fast.queue.get_nowait()

        assert broker.publish("sensor-update", {"n": 2}) == 1
        assert slow.dropped is True
        assert fast.dropped is False
        assert broker.subscriber_count == 1

    def test_stream_sends_connected_event_then_messages(self, sse_broker):
        subscriber = sse_broker.subscribe()
        frames = sse_broker.stream(subscriber)

        assert next(frames).startswith("event: connected\n")
        sse_broker.publish("misting-started", {"id": 7})
        assert next(frames) == format_sse("misting-started", {"id": 7})

        frames.close()
        assert sse_broker.subscriber_count == 0

    def test_stream_emits_keepalive_when_idle(self, sse_broker):
        frames = sse_broker.stream(sse_broker.subscribe())
        next(frames)
        assert next(frames) == ": keepalive\n\n"
        frames.close()

    def test_format_sse_serializes_json(self):
        frame = format_sse("notification", {"message": "hi"})
        event_line, data_line, _, _ = frame.split("\n")
        assert event_line == "event: notification"
        assert json.loads(data_line[len("data: "):]) == {"message": "hi"}
