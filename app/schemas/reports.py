"""
Report Schemas
==============

Query-string schemas for the misting report endpoints.
"""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from app.enums import ReportType


class ReportQuery(BaseModel):
    type: ReportType = ReportType.DAILY
    date: Optional[dt.date] = None
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = Field(default=None, ge=2000, le=2100)

    @model_validator(mode="after")
    def check_period(self):
        if self.type == ReportType.MONTHLY and (self.month is None or self.year is None):
            raise ValueError("monthly reports need month and year")
        if self.type == ReportType.YEARLY and self.year is None:
            raise ValueError("yearly reports need year")
        return self


class ComfortQuery(BaseModel):
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = Field(default=None, ge=2000, le=2100)
