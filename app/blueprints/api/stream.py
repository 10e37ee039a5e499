"""Server-Sent Events API
=========================

Routes:
    GET /api/stream   - Live sensor, misting, notification and pump-mode events
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, stream_with_context

from app.blueprints.api._common import get_sse_broker as _sse_broker

logger = logging.getLogger(__name__)

stream_api = Blueprint("stream_api", __name__)


@stream_api.get("")
def stream() -> Response:
    broker = _sse_broker()
    subscriber = broker.subscribe()
    logger.info("SSE client subscribed (%d active)", broker.subscriber_count)
    return Response(
        stream_with_context(broker.stream(subscriber)),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )
