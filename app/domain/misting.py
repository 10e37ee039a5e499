"""
Misting Session Domain
======================
A misting session is one ON→OFF cycle of the cooling pump with an
environmental snapshot at each end.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from app.domain.readings import SensorReading, clean_metric, clean_water_level
from app.enums import PumpMode
from app.utils.psychrometrics import calculate_heat_index_c
from app.utils.time import coerce_datetime


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """Shed conditions captured when a session opens or closes."""

    temperature: float | None = None
    humidity: float | None = None
    heat_index: float | None = None
    water_level: float | None = None

    @classmethod
    def from_reading(cls, reading: SensorReading) -> "EnvironmentSnapshot":
        return cls(
            temperature=reading.temperature,
            humidity=reading.humidity,
            heat_index=reading.heat_index,
            water_level=reading.water_level,
        )

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "EnvironmentSnapshot":
        """Build a snapshot from an API body; a missing heat index is derived."""
        temperature = clean_metric(payload.get("temperature"))
        humidity = clean_metric(payload.get("humidity"))
        heat_index = clean_metric(payload.get("heat_index", payload.get("heatIndex")))
        if heat_index is None:
            heat_index = calculate_heat_index_c(temperature, humidity)
        water_level = clean_water_level(payload.get("water_level", payload.get("waterLevel")))
        return cls(temperature=temperature, humidity=humidity, heat_index=heat_index, water_level=water_level)

    def to_dict(self) -> dict[str, Any]:
        return {
            "temperature": self.temperature,
            "humidity": self.humidity,
            "heat_index": self.heat_index,
            "water_level": self.water_level,
        }


@dataclass(frozen=True)
class MistingSession:
    """Read model for a row of the MistingLogs table."""

    id: int
    started_at: datetime
    mode: PumpMode
    start_metrics: EnvironmentSnapshot
    ended_at: datetime | None = None
    end_metrics: EnvironmentSnapshot | None = None

    @property
    def is_open(self) -> bool:
        return self.ended_at is None

    @property
    def duration_seconds(self) -> float | None:
        if self.ended_at is None:
            return None
        return max((self.ended_at - self.started_at).total_seconds(), 0.0)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "MistingSession":
        ended_at = coerce_datetime(row.get("ended_at"))
        end_metrics = None
        if ended_at is not None:
            end_metrics = EnvironmentSnapshot(
                temperature=row.get("end_temperature"),
                humidity=row.get("end_humidity"),
                heat_index=row.get("end_heat_index"),
                water_level=row.get("end_water_level"),
            )
        try:
            mode = PumpMode(str(row.get("misting_type") or "AUTO").upper())
        except ValueError:
            mode = PumpMode.AUTO
        return cls(
            id=int(row["id"]),
            started_at=coerce_datetime(row["started_at"]),
            mode=mode,
            start_metrics=EnvironmentSnapshot(
                temperature=row.get("start_temperature"),
                humidity=row.get("start_humidity"),
                heat_index=row.get("start_heat_index"),
                water_level=row.get("start_water_level"),
            ),
            ended_at=ended_at,
            end_metrics=end_metrics,
        )

    def to_dict(self) -> dict[str, Any]:
        duration = self.duration_seconds
        return {
            "id": self.id,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "mode": self.mode.value,
            "start_metrics": self.start_metrics.to_dict(),
            "end_metrics": self.end_metrics.to_dict() if self.end_metrics else None,
            "duration_seconds": duration,
            "duration_minutes": round(duration / 60, 2) if duration is not None else None,
            "status": "In Progress" if self.is_open else "Completed",
        }


def clamp_end_time(started_at: datetime, ended_at: datetime) -> datetime:
    """Never let a session end before it started (clock skew between device and server)."""
    return ended_at if ended_at >= started_at else started_at
