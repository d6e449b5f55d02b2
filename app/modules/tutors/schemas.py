"""Tutors schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import LessonTypeEnum


class TutorProfileCreate(BaseModel):
    """Create tutor profile request; the profile belongs to the acting tutor."""

    display_name: str = Field(min_length=2, max_length=128)
    bio: str = Field(default="", max_length=1000)
    hourly_rate: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    trial_rate: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    languages: list[str] = Field(default_factory=list)


class TutorProfileUpdate(BaseModel):
    """Update tutor profile request."""

    display_name: str | None = Field(default=None, min_length=2, max_length=128)
    bio: str | None = Field(default=None, max_length=1000)
    hourly_rate: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    trial_rate: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    languages: list[str] | None = None


class TutorProfileRead(BaseModel):
    """Tutor profile response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    display_name: str
    bio: str
    hourly_rate: Decimal
    trial_rate: Decimal | None
    languages: list[str]
    created_at: datetime
    updated_at: datetime


class PriceQuoteRead(BaseModel):
    tutor_id: UUID
    lesson_type: LessonTypeEnum
    duration_minutes: int
    price: Decimal
    currency: str
