"""Thermal Records API
======================

Routes:
    GET  /api/records          - Search scans (?search=&month=&year=)
    POST /api/records          - Manual scan entry
    POST /api/records/auto     - Frame summary from the thermal camera
    POST /api/simulate-scan    - Randomized demo scan
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, request

from app.blueprints.api._common import (
    get_thermal_record_service as _thermal_service,
    require_json_object,
    success as _success,
)
from app.schemas import ThermalAutoReading, ThermalRecordRequest
from app.utils.http import safe_route

logger = logging.getLogger(__name__)

records_api = Blueprint("records_api", __name__)


@records_api.get("/records")
@safe_route("Failed to load thermal records")
def list_records() -> Response:
    return _success(
        _thermal_service().list_records(
            search=request.args.get("search"),
            month=request.args.get("month"),
            year=request.args.get("year"),
        )
    )


@records_api.post("/records")
@safe_route("Failed to save thermal record")
def create_record() -> Response:
    body = ThermalRecordRequest.model_validate(require_json_object())
    return _success(_thermal_service().create_record(body), 201)


@records_api.post("/records/auto")
@safe_route("Failed to save automatic thermal reading")
def auto_record() -> Response:
    body = ThermalAutoReading.model_validate(require_json_object())
    return _success(_thermal_service().record_auto(body), 201)


@records_api.post("/simulate-scan")
@safe_route("Failed to simulate thermal scan")
def simulate_scan() -> Response:
    return _success(_thermal_service().simulate(), 201)
