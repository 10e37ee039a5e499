"""
Psychrometric Calculations
==========================

Pure utility functions for the air-science metrics shown on the shed dashboard.

Functions:
- calculate_heat_index_c: Heat index (apparent temperature), NOAA algorithm
- heat_stress_zone: Livestock comfort band for a temperature

These are stateless calculations used by ingestion (derived heat index on
every reading), the misting session snapshots and the reports.
"""
from __future__ import annotations

import math
from typing import Optional, overload

# Livestock comfort bands (°C), shared by reports and the comfort index.
SAFE_MAX_C = 30.0
DANGER_MIN_C = 35.0


def _c_to_f(value: float) -> float:
    return value * 9 / 5 + 32


def _f_to_c(value: float) -> float:
    return (value - 32) * 5 / 9


@overload
def calculate_heat_index_c(temperature_c: None, relative_humidity: object) -> None: ...
@overload
def calculate_heat_index_c(temperature_c: object, relative_humidity: None) -> None: ...
@overload
def calculate_heat_index_c(temperature_c: float, relative_humidity: float) -> float: ...

def calculate_heat_index_c(temperature_c, relative_humidity):
    """
    Calculate heat index (apparent temperature) in Celsius.

    Follows the NOAA/NWS procedure: the simple Steadman formula is evaluated
    first and, when its average with the air temperature reaches 80°F, the
    Rothfusz regression replaces it together with the low/high humidity
    adjustments.

    Args:
        temperature_c: Temperature in Celsius
        relative_humidity: Relative humidity percentage (0-100)

    Returns:
        Heat index in Celsius rounded to 2 decimals, or None if either input
        is missing or NaN
    """
    if temperature_c is None or relative_humidity is None:
        return None

    temp_c = float(temperature_c)
    humidity = float(relative_humidity)
    if math.isnan(temp_c) or math.isnan(humidity):
        return None
    humidity = min(max(humidity, 0.0), 100.0)

    temp_f = _c_to_f(temp_c)

    simple_f = 0.5 * (temp_f + 61.0 + ((temp_f - 68.0) * 1.2) + (humidity * 0.094))
    if (simple_f + temp_f) / 2 < 80.0:
        return round(_f_to_c(simple_f), 2)

    hi_f = (
        -42.379
        + 2.04901523 * temp_f
        + 10.14333127 * humidity
        - 0.22475541 * temp_f * humidity
        - 0.00683783 * temp_f ** 2
        - 0.05481717 * humidity ** 2
        + 0.00122874 * temp_f ** 2 * humidity
        + 0.00085282 * temp_f * humidity ** 2
        - 0.00000199 * temp_f ** 2 * humidity ** 2
    )

    if humidity < 13 and 80 <= temp_f <= 112:
        hi_f -= ((13 - humidity) / 4) * math.sqrt((17 - abs(temp_f - 95)) / 17)
    elif humidity > 85 and 80 <= temp_f <= 87:
        hi_f += ((humidity - 85) / 10) * ((87 - temp_f) / 5)

    return round(_f_to_c(hi_f), 2)


def heat_stress_zone(temperature_c: Optional[float]) -> Optional[str]:
    """Classify a shed temperature as ``safe`` (<30), ``warning`` (30-35) or ``danger`` (>=35)."""
    if temperature_c is None:
        return None
    if temperature_c < SAFE_MAX_C:
        return "safe"
    if temperature_c < DANGER_MIN_C:
        return "warning"
    return "danger"
