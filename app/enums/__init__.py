"""
Enums Module
============

This module provides enumeration types for the AgriCool application.
Enums ensure type safety and consistency across the codebase.
"""

from app.enums.common import NotificationKind, PumpMode, ReportType, ThermalHealthStatus
from app.enums.events import ConnectivityStatus, RealtimeEvent

__all__ = [
    "ConnectivityStatus",
    "NotificationKind",
    "PumpMode",
    "RealtimeEvent",
    "ReportType",
    "ThermalHealthStatus",
]
