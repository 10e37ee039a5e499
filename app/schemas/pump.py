"""
Pump Control Schemas
====================
"""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class PumpManualRequest(BaseModel):
    """Request schema for a manual pump command."""

    state: bool = Field(..., description="'on' or 'off' (booleans are accepted too)")

    @field_validator("state", mode="before")
    @classmethod
    def parse_state(cls, v):
        if isinstance(v, str):
            lowered = v.strip().lower()
            if lowered in {"on", "true", "1"}:
                return True
            if lowered in {"off", "false", "0"}:
                return False
            raise ValueError("state must be 'on' or 'off'")
        return v


class PumpAutoRequest(BaseModel):
    """Request schema for switching the pump back to automatic mode."""

    model_config = ConfigDict(populate_by_name=True)

    pump_on: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("pumpOn", "pump_on"),
        description="Pump state the controller holds after the switch, if known",
    )
