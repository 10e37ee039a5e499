"""
Thermal Scan Domain
===================
Body-temperature classification and record formatting for livestock scans
taken with the MLX90640 thermal camera (or entered by hand).
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Mapping

from app.enums import ThermalHealthStatus

LOW_TEMP_MAX_C = 38.0
HEALTHY_MAX_C = 39.5
FEVER_MIN_C = 40.0

AUTO_RECORD_NAME = "Auto-detected"
AUTO_RECORD_NOTES = "Automatic thermal reading from MLX90640 sensor"

SIMULATED_NAMES = (
    "Pig Alpha", "Pig Bravo", "Pig Charlie", "Pig Delta",
    "Pig Echo", "Pig Foxtrot", "Pig Golf", "Pig Hotel",
)
SIMULATED_BREEDS = ("Yorkshire", "Duroc", "Hampshire", "Berkshire", "Landrace")


def classify_body_temperature(body_temp: float) -> ThermalHealthStatus:
    if body_temp < LOW_TEMP_MAX_C:
        return ThermalHealthStatus.LOW_TEMP
    if body_temp <= HEALTHY_MAX_C:
        return ThermalHealthStatus.HEALTHY
    if body_temp < FEVER_MIN_C:
        return ThermalHealthStatus.ELEVATED
    return ThermalHealthStatus.FEVER_ALERT


def format_temperature(value: Any) -> str:
    """One decimal place, or ``N/A`` when the reading is missing."""
    if value is None:
        return "N/A"
    try:
        return f"{float(value):.1f}"
    except (TypeError, ValueError):
        return "N/A"


@dataclass(frozen=True)
class ThermalScan:
    """A single animal scan before it is persisted."""

    name: str
    body_temp: float
    avg_temp: float | None = None
    min_temp: float | None = None
    weight: float | None = None
    age: int | None = None
    breed: str | None = None
    last_fed: str | None = None
    ambient_temp: float | None = None
    humidity: float | None = None
    notes: str | None = None

    @property
    def health_status(self) -> ThermalHealthStatus:
        return classify_body_temperature(self.body_temp)

    def to_row(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "body_temp": self.body_temp,
            "avg_temp": self.avg_temp,
            "min_temp": self.min_temp,
            "weight": self.weight,
            "age": self.age,
            "breed": self.breed,
            "last_fed": self.last_fed,
            "ambient_temp": self.ambient_temp,
            "humidity": self.humidity,
            "health_status": self.health_status.value,
            "notes": self.notes,
        }


def simulate_scan(rng: random.Random | None = None) -> ThermalScan:
    """Produce a plausible randomized scan for demos and dashboard testing."""
    rng = rng or random.Random()
    body_temp = round(rng.uniform(37.5, 40.5), 1)
    return ThermalScan(
        name=rng.choice(SIMULATED_NAMES),
        body_temp=body_temp,
        avg_temp=round(body_temp - rng.uniform(0.5, 1.5), 1),
        min_temp=round(body_temp - rng.uniform(2.0, 4.0), 1),
        weight=round(rng.uniform(40.0, 120.0), 1),
        age=rng.randint(2, 24),
        breed=rng.choice(SIMULATED_BREEDS),
        last_fed=f"{rng.randint(1, 8)} hours ago",
        ambient_temp=round(rng.uniform(26.0, 36.0), 1),
        humidity=round(rng.uniform(50.0, 90.0), 1),
        notes="Simulated scan",
    )


def present_record(row: Mapping[str, Any]) -> dict[str, Any]:
    """Shape a ThermalRecords row for the dashboard table."""
    return {
        "id": row.get("id"),
        "name": row.get("name"),
        "body_temp": format_temperature(row.get("body_temp")),
        "avg_temp": format_temperature(row.get("avg_temp")),
        "min_temp": format_temperature(row.get("min_temp")),
        "weight": row.get("weight"),
        "age": row.get("age"),
        "breed": row.get("breed"),
        "last_fed": row.get("last_fed"),
        "ambient_temp": format_temperature(row.get("ambient_temp")),
        "humidity": format_temperature(row.get("humidity")),
        "health_status": row.get("health_status"),
        "notes": row.get("notes"),
        "scanned_at": row.get("scanned_at"),
    }
