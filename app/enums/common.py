"""
Common Enumerations
====================

Enums shared by the misting correlator, notifications, thermal records and reports.
"""

from enum import Enum


class PumpMode(str, Enum):
    """
    Who drives pump transitions.
    Used by: pump transition service, misting sessions, notifications
    """
    AUTO = "AUTO"
    MANUAL = "MANUAL"

    def __str__(self) -> str:
        return self.value


class NotificationKind(str, Enum):
    """
    One notification kind per observed pump transition or mode switch.
    Used by: pump transition service, notifications API
    """
    PUMP_ON = "PUMP_ON"
    PUMP_OFF = "PUMP_OFF"
    MANUAL_ON = "MANUAL_ON"
    MANUAL_OFF = "MANUAL_OFF"
    AUTO_MODE = "AUTO_MODE"

    @classmethod
    def for_transition(cls, pump_on: bool, mode: "PumpMode") -> "NotificationKind":
        """Resolve the kind from the transition direction and the current mode."""
        if mode == PumpMode.MANUAL:
            return cls.MANUAL_ON if pump_on else cls.MANUAL_OFF
        return cls.PUMP_ON if pump_on else cls.PUMP_OFF

    def __str__(self) -> str:
        return self.value


class ThermalHealthStatus(str, Enum):
    """
    Health classification of a thermal scan, derived from body temperature.
    Used by: thermal record service
    """
    LOW_TEMP = "Low Temp"
    HEALTHY = "Healthy"
    ELEVATED = "Elevated"
    FEVER_ALERT = "Fever Alert"

    def __str__(self) -> str:
        return self.value


class ReportType(str, Enum):
    """
    Reporting period for misting reports.
    Used by: report service, reports API
    """
    DAILY = "daily"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    def __str__(self) -> str:
        return self.value
