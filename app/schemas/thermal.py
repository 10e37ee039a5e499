"""
Thermal Record Schemas
======================
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ThermalRecordRequest(BaseModel):
    """Manual thermal scan entry."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(..., min_length=1, max_length=120)
    body_temp: float = Field(..., ge=20, le=50, validation_alias=AliasChoices("bodyTemp", "body_temp"))
    avg_temp: Optional[float] = Field(default=None, validation_alias=AliasChoices("avgTemp", "avg_temp"))
    min_temp: Optional[float] = Field(default=None, validation_alias=AliasChoices("minTemp", "min_temp"))
    weight: Optional[float] = Field(default=None, ge=0)
    age: Optional[int] = Field(default=None, ge=0)
    breed: Optional[str] = None
    last_fed: Optional[str] = Field(default=None, validation_alias=AliasChoices("lastFed", "last_fed"))
    ambient_temp: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("ambientTemp", "ambient_temp")
    )
    humidity: Optional[float] = Field(default=None, ge=0, le=100)
    notes: Optional[str] = None


class ThermalAutoReading(BaseModel):
    """Frame summary published by the MLX90640 thermal camera."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    avg_temp: float = Field(..., validation_alias=AliasChoices("avgTemp", "avg_temp"))
    max_temp: Optional[float] = Field(default=None, validation_alias=AliasChoices("maxTemp", "max_temp"))
    min_temp: Optional[float] = Field(default=None, validation_alias=AliasChoices("minTemp", "min_temp"))
