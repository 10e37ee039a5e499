"""
Misting Schemas
===============

Request schemas for the misting session endpoints. Both camelCase (as sent
by the dashboard) and snake_case keys are accepted.
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app.enums import PumpMode


class _MetricsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    temperature: Optional[float] = Field(default=None, description="Shed temperature (°C)")
    humidity: Optional[float] = Field(default=None, ge=0, le=100, description="Relative humidity (%)")
    heat_index: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("heat_index", "heatIndex"),
        description="Heat index (°C); derived from temperature and humidity when omitted",
    )
    water_level: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("water_level", "waterLevel"),
        description="Tank level (%)",
    )

    def metrics(self) -> dict:
        return {
            "temperature": self.temperature,
            "humidity": self.humidity,
            "heat_index": self.heat_index,
            "water_level": self.water_level,
        }


class MistingStartRequest(_MetricsRequest):
    """Request schema for opening a misting session."""

    mode: PumpMode = Field(
        default=PumpMode.AUTO,
        validation_alias=AliasChoices("mode", "mistingType", "misting_type"),
    )

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


class MistingEndRequest(_MetricsRequest):
    """Request schema for finalizing a misting session."""
