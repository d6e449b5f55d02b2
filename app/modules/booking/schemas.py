"""Booking schemas."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.enums import BookingStatusEnum, LessonTypeEnum, PaymentStatusEnum


def _minute_precision(value: time) -> time:
    if value.tzinfo is not None:
        raise ValueError("Lesson times are local wall-clock and must not carry a timezone")
    if value.second or value.microsecond:
        raise ValueError("Lesson times must be whole minutes")
    return value


class BookingRequest(BaseModel):
    """Book a lesson request sent by a student."""

    tutor_id: UUID
    lesson_date: date
    start_time: time
    duration_minutes: int = Field(default=60, gt=0)
    lesson_type: LessonTypeEnum = LessonTypeEnum.REGULAR

    _check_start = field_validator("start_time")(_minute_precision)


class BookingCreate(BaseModel):
    """Fully resolved booking to be validated and persisted."""

    tutor_id: UUID
    student_id: UUID
    lesson_date: date
    start_time: time
    duration_minutes: int = Field(gt=0)
    lesson_type: LessonTypeEnum
    price: Decimal = Field(ge=0)

    _check_start = field_validator("start_time")(_minute_precision)


class BookingCancelRequest(BaseModel):
    """Cancel booking request."""

    reason: str | None = Field(default=None, max_length=512)


class BookingRescheduleRequest(BaseModel):
    """Move booking to another date and start time, keeping its duration."""

    new_date: date
    new_start_time: time

    _check_start = field_validator("new_start_time")(_minute_precision)


class BookingRead(BaseModel):
    """Booking response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tutor_id: UUID
    student_id: UUID
    lesson_date: date
    start_time: time
    end_time: time
    duration_minutes: int
    lesson_type: LessonTypeEnum
    price: Decimal
    status: BookingStatusEnum
    payment_status: PaymentStatusEnum
    payment_order_id: str | None
    video_room_url: str | None
    video_host_url: str | None
    confirmed_at: datetime | None
    cancelled_at: datetime | None
    cancellation_reason: str | None
    rescheduled_at: datetime | None
    created_at: datetime
    updated_at: datetime


class BookingView(BookingRead):
    """Booking annotated with state derived at read time."""

    effective_status: BookingStatusEnum
    can_modify: bool
    hours_until_start: float
