"""Sensor Readings API
======================

Routes:
    POST /api/sensors          - Ingest one reading from the shed controller
    GET  /api/sensors          - Newest-first history (?limit=&offset=)
    GET  /api/sensors/latest   - Most recent reading
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, request

from app.blueprints.api._common import (
    get_sensor_service as _sensor_service,
    require_json_object,
    success as _success,
)
from app.utils.http import safe_route
from infrastructure.database.pagination import PaginationParams

logger = logging.getLogger(__name__)

sensors_api = Blueprint("sensors_api", __name__)


@sensors_api.post("")
@safe_route("Failed to store sensor reading")
def ingest_reading() -> Response:
    """Persist a reading; a pump flag change is correlated into a misting event."""
    result = _sensor_service().ingest(require_json_object())
    return _success(result, 201)


@sensors_api.get("")
@safe_route("Failed to load sensor history")
def list_readings() -> Response:
    page = PaginationParams.from_request(request.args.get("limit"), request.args.get("offset"))
    readings = _sensor_service().history(page.limit, page.offset)
    return _success({"readings": readings, "count": len(readings), "limit": page.limit, "offset": page.offset})


@sensors_api.get("/latest")
@safe_route("Failed to load latest sensor reading")
def latest_reading() -> Response:
    return _success(_sensor_service().latest())
