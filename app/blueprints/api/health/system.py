"""
System Health Endpoints
=======================

Core system health monitoring endpoints.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response

from app.blueprints.api._common import (
    fail as _fail,
    get_container as _container,
    success as _success,
)
from app.utils.http import safe_route
from app.utils.time import iso_now

logger = logging.getLogger("health_api")


def register_system_routes(health_api: Blueprint):
    """Register system health routes on the blueprint."""

    @health_api.get("")
    @safe_route("Failed to get system health")
    def get_health() -> Response:
        """
        Database round trip plus MQTT broker status.

        Returns:
            {"status": "ok", "db": "connected", "mqtt": {...}}, or 503 with the
            same body under error.details and db set to "not connected"
        """
        container = _container()
        db_ok = container.database.ping()
        mqtt = container.mqtt_client.health() if container.mqtt_client is not None else {"enabled": False}

        body = {
            "status": "ok" if db_ok else "error",
            "db": "connected" if db_ok else "not connected",
            "mqtt": mqtt,
            "sse_subscribers": container.sse_broker.subscriber_count,
            "timestamp": iso_now(),
        }
        if not db_ok:
            logger.error("Health check failed: database not reachable")
            return _fail("Database not connected", 503, details=body)
        return _success(body)

    @health_api.get("/ping")
    @safe_route("Failed to handle ping request")
    def ping() -> Response:
        """Basic liveness check for monitoring tools."""
        return _success({"status": "ok", "timestamp": iso_now()})
