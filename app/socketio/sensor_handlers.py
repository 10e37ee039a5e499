"""app.socketio.sensor_handlers

Socket.IO lifecycle handlers for the default namespace.

Note: Broadcasting is handled by EmitterService; these handlers only track
client lifecycle.
"""

import logging

from flask import request

from app.extensions import socketio

logger = logging.getLogger(__name__)


@socketio.on("connect")
def handle_connect(auth=None):
    logger.info("Client %s connected", request.sid)


@socketio.on("disconnect")
def handle_disconnect(*_args):
    logger.info("Client %s disconnected", request.sid)


@socketio.on_error_default
def handle_error(e):
    logger.error("Socket.IO handler error for client %s: %s", getattr(request, "sid", "?"), e)
