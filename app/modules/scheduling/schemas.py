"""Scheduling schemas."""

from __future__ import annotations

from datetime import date, datetime, time
from datetime import time as time_of_day
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class AvailabilityWindowCreate(BaseModel):
    """Create weekly availability window request."""

    day_of_week: int = Field(ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    start_time: time
    end_time: time

    @field_validator("start_time", "end_time")
    @classmethod
    def strip_seconds(cls, value: time) -> time:
        """Windows are declared at minute precision."""
        if value.tzinfo is not None:
            raise ValueError("Window times are local wall-clock and must not carry a timezone")
        return value.replace(second=0, microsecond=0)

    @model_validator(mode="after")
    def validate_order(self) -> "AvailabilityWindowCreate":
        """Start must precede end."""
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class AvailabilityWindowRead(BaseModel):
    """Availability window response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tutor_id: UUID
    day_of_week: int
    start_time: time
    end_time: time
    created_at: datetime


class TimeSlotRead(BaseModel):
    """Computed slot response schema."""

    model_config = ConfigDict(from_attributes=True)

    time: time_of_day
    available: bool


class DaySlotsRead(BaseModel):
    """Slots of one tutor on one date."""

    tutor_id: UUID
    lesson_date: date
    duration_minutes: int
    slots: list[TimeSlotRead]
