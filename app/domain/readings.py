"""
Shed Sensor Reading Value Object
================================
Immutable value object for one periodic report from the shed controller
(temperature, humidity, water level and pump flag).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from app.utils.psychrometrics import calculate_heat_index_c
from app.utils.time import coerce_datetime, utc_now

_TRUE_STRINGS = {"1", "true", "t", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "f", "no", "off"}


def clean_metric(value: Any) -> float | None:
    """Return *value* as a float, or None when it is missing, NaN or unparseable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def clean_water_level(value: Any) -> int | None:
    """Water level is a 0-100 percentage; out-of-range values are clamped."""
    number = clean_metric(value)
    if number is None:
        return None
    return int(min(max(round(number), 0), 100))


def clean_pump_flag(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return None


@dataclass(frozen=True)
class SensorReading:
    """
    Immutable shed reading.

    Metrics that arrive missing or NaN are kept as ``None`` so a single bad
    probe never discards the rest of the reading.
    """

    temperature: float | None
    humidity: float | None
    water_level: int | None
    pump_on: bool | None
    captured_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SensorReading":
        """Build a reading from a device payload (camelCase or snake_case keys)."""

        def pick(*keys: str) -> Any:
            for key in keys:
                if key in payload:
                    return payload[key]
            return None

        captured_at = coerce_datetime(pick("capturedAt", "captured_at", "createdAt")) or utc_now()
        return cls(
            temperature=clean_metric(pick("temperature")),
            humidity=clean_metric(pick("humidity")),
            water_level=clean_water_level(pick("waterLevel", "water_level")),
            pump_on=clean_pump_flag(pick("pumpStatus", "pumpOn", "pump_on", "pump_status")),
            captured_at=captured_at,
        )

    @property
    def heat_index(self) -> float | None:
        return calculate_heat_index_c(self.temperature, self.humidity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "temperature": self.temperature,
            "humidity": self.humidity,
            "water_level": self.water_level,
            "pump_on": self.pump_on,
            "heat_index": self.heat_index,
            "captured_at": self.captured_at.isoformat(),
        }
