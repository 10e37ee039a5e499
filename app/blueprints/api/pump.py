"""Pump Control API
===================

Routes:
    POST /api/pump/manual   - {"state": "on"|"off"}; switches to MANUAL mode
    POST /api/pump/auto     - Back to AUTO mode (optional {"pumpOn": bool})
    GET  /api/pump/status   - Known pump state, mode, open session, broker health
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, request

from app.blueprints.api._common import (
    get_pump_control_service as _pump_service,
    require_json_object,
    success as _success,
)
from app.schemas import PumpAutoRequest, PumpManualRequest
from app.utils.http import safe_route

logger = logging.getLogger(__name__)

pump_api = Blueprint("pump_api", __name__)


@pump_api.post("/manual")
@safe_route("Failed to send manual pump command")
def manual_control() -> Response:
    body = PumpManualRequest.model_validate(require_json_object())
    result = _pump_service().set_manual(body.state)
    if not result["published"]:
        logger.warning("Manual pump command %s was not delivered to the broker", "ON" if body.state else "OFF")
    return _success(result)


@pump_api.post("/auto")
@safe_route("Failed to switch pump to automatic mode")
def auto_mode() -> Response:
    body = PumpAutoRequest.model_validate(request.get_json(silent=True) or {})
    return _success(_pump_service().set_auto(body.pump_on))


@pump_api.get("/status")
@safe_route("Failed to load pump status")
def pump_status() -> Response:
    return _success(_pump_service().status())
