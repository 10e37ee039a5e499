"""
Blueprint Common Utilities
==========================

Shared helper functions for all API blueprints.
Import these instead of duplicating helper code in each blueprint.

Usage:
    from app.blueprints.api._common import (
        get_container, get_json, success, fail,
        get_misting_service, get_pump_control_service, ...
    )

This module centralizes:
- Service container access
- Request JSON parsing
- Standardized response helpers
- Common service accessors
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from flask import current_app, request, session

from app.domain.exceptions import ValidationError
from app.utils.http import error_response, success_response

logger = logging.getLogger("api._common")

# ============================================================================
# User Session Utilities
# ============================================================================


def get_user_id() -> Optional[int]:
    """Get current user ID from session, if logged in."""
    return session.get("user_id")

# ============================================================================
# CONTAINER ACCESS
# ============================================================================

def get_container():
    """
    Get the service container from Flask app config.

    Returns:
        ServiceContainer: The application service container

    Raises:
        RuntimeError: If container is not configured
    """
    container = current_app.config.get("CONTAINER")
    if not container:
        raise RuntimeError("ServiceContainer not found in app config")
    return container


# ============================================================================
# REQUEST HELPERS
# ============================================================================

def get_json() -> dict:
    """
    Get JSON request body with silent failure.

    Returns:
        dict: Parsed JSON body or empty dict if not available
    """
    return request.get_json(silent=True) or {}


def require_json_object() -> dict[str, Any]:
    """
    Get the JSON request body, rejecting anything that is not an object.

    Raises:
        ValidationError: If the body is missing, malformed or not a JSON object
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def query_args() -> dict[str, str]:
    """Flat dict of query-string values with empty values dropped."""
    return {key: value for key, value in request.args.items() if value != ""}


# ============================================================================
# RESPONSE HELPERS
# ============================================================================

def success(data: dict | list | None = None, status: int = 200, *, message: str | None = None):
    """
    Standard success response wrapper.

    Returns:
        Flask Response with format: {"ok": true, "data": ..., "error": null}
    """
    return success_response(data, status, message=message)


def fail(message: str, status: int = 400, *, details: dict | None = None):
    """
    Standard error response wrapper.

    Returns:
        Flask Response with format: {"ok": false, "data": null, "error": {...}}
    """
    return error_response(message, status, details=details)


# ============================================================================
# SERVICE ACCESSORS
# ============================================================================

def get_sensor_service():
    return get_container().sensor_service


def get_misting_service():
    return get_container().misting_service


def get_notifications_service():
    return get_container().notifications_service


def get_pump_control_service():
    return get_container().pump_control_service


def get_auth_manager():
    return get_container().auth_manager


def get_thermal_record_service():
    return get_container().thermal_record_service


def get_report_service():
    return get_container().report_service


def get_sse_broker():
    return get_container().sse_broker
