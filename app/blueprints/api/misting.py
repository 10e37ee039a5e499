"""Misting Sessions API
=======================

Routes:
    POST /api/misting/start       - Open a session with the starting metrics
    PUT  /api/misting/end/<id>    - Finalize open session <id>
    GET  /api/misting/today       - Sessions started since local midnight
    GET  /api/misting/all         - Newest sessions (alias: /logs)
    GET  /api/misting/open        - Currently open session or null
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, request

from app.blueprints.api._common import (
    get_misting_service as _misting_service,
    require_json_object,
    success as _success,
)
from app.domain.misting import EnvironmentSnapshot
from app.schemas import MistingEndRequest, MistingStartRequest
from app.utils.http import safe_route
from infrastructure.database.pagination import PaginationParams

logger = logging.getLogger(__name__)

misting_api = Blueprint("misting_api", __name__)


@misting_api.post("/start")
@safe_route("Failed to start misting session")
def start_session() -> Response:
    body = MistingStartRequest.model_validate(require_json_object())
    session = _misting_service().start_session(EnvironmentSnapshot.from_payload(body.metrics()), body.mode)
    return _success(session.to_dict(), 201, message="Misting session started")


@misting_api.put("/end/<int:session_id>")
@safe_route("Failed to end misting session")
def end_session(session_id: int) -> Response:
    body = MistingEndRequest.model_validate(request.get_json(silent=True) or {})
    session = _misting_service().end_session(session_id, EnvironmentSnapshot.from_payload(body.metrics()))
    return _success(session.to_dict(), message="Misting session ended")


@misting_api.get("/today")
@safe_route("Failed to load today's misting sessions")
def sessions_today() -> Response:
    sessions = [s.to_dict() for s in _misting_service().sessions_today()]
    return _success({"sessions": sessions, "count": len(sessions)})


@misting_api.get("/all")
@misting_api.get("/logs")
@safe_route("Failed to load misting logs")
def all_sessions() -> Response:
    service = _misting_service()
    page = PaginationParams.from_request(request.args.get("limit"), None, default_limit=service.log_limit)
    sessions = [s.to_dict() for s in service.recent_sessions(page.limit)]
    return _success({"sessions": sessions, "count": len(sessions)})


@misting_api.get("/open")
@safe_route("Failed to load open misting session")
def open_session() -> Response:
    session = _misting_service().open_session()
    return _success(session.to_dict() if session else None)
