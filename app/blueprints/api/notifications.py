"""Notifications API
====================

Routes:
    GET    /api/notifications                    - Newest first (?limit=50)
    GET    /api/notifications/unread-count       - {"count": n}
    POST   /api/notifications/mark-read/<id>     - Flip one notification to read
    POST   /api/notifications/mark-all-read      - {"updated": n}
    DELETE /api/notifications/old?days=30        - Purge older notifications
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, request

from app.blueprints.api._common import (
    get_notifications_service as _notifications,
    success as _success,
)
from app.domain.exceptions import ValidationError
from app.services.application.notifications_service import DEFAULT_LIST_LIMIT
from app.utils.http import safe_route
from infrastructure.database.pagination import PaginationParams

logger = logging.getLogger(__name__)

notifications_api = Blueprint("notifications_api", __name__)


@notifications_api.get("")
@safe_route("Failed to load notifications")
def list_notifications() -> Response:
    page = PaginationParams.from_request(request.args.get("limit"), None, default_limit=DEFAULT_LIST_LIMIT)
    items = _notifications().list_notifications(page.limit)
    return _success({"notifications": items, "count": len(items)})


@notifications_api.get("/unread-count")
@safe_route("Failed to count unread notifications")
def unread_count() -> Response:
    return _success({"count": _notifications().unread_count()})


@notifications_api.post("/mark-read/<int:notification_id>")
@safe_route("Failed to mark notification as read")
def mark_read(notification_id: int) -> Response:
    _notifications().mark_as_read(notification_id)
    return _success({"id": notification_id, "is_read": True})


@notifications_api.post("/mark-all-read")
@safe_route("Failed to mark notifications as read")
def mark_all_read() -> Response:
    return _success({"updated": _notifications().mark_all_as_read()})


@notifications_api.delete("/old")
@safe_route("Failed to delete old notifications")
def delete_old() -> Response:
    raw = request.args.get("days", "30")
    try:
        days = int(raw)
    except ValueError:
        raise ValidationError("days must be an integer", detail={"days": raw}) from None
    return _success({"deleted": _notifications().delete_old(days), "days": days})
