"""
Schemas Module
==============

Pydantic models for request validation.
"""

from app.schemas.auth import LoginRequest, SecurityUpdateRequest, SignupRequest
from app.schemas.misting import MistingEndRequest, MistingStartRequest
from app.schemas.pump import PumpAutoRequest, PumpManualRequest
from app.schemas.reports import ComfortQuery, ReportQuery
from app.schemas.thermal import ThermalAutoReading, ThermalRecordRequest

__all__ = [
    "ComfortQuery",
    "LoginRequest",
    "MistingEndRequest",
    "MistingStartRequest",
    "PumpAutoRequest",
    "PumpManualRequest",
    "ReportQuery",
    "SecurityUpdateRequest",
    "SignupRequest",
    "ThermalAutoReading",
    "ThermalRecordRequest",
]
