"""Core enums used across modules."""

from enum import StrEnum


class RoleEnum(StrEnum):
    """Roles carried in the auth provider's access token."""

    STUDENT = "student"
    TUTOR = "tutor"
    ADMIN = "admin"


class BookingStatusEnum(StrEnum):
    """Booking lifecycle status."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatusEnum(StrEnum):
    """Payment capture status of a booking."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class LessonTypeEnum(StrEnum):
    """Kind of lesson being booked."""

    TRIAL = "trial"
    REGULAR = "regular"


class OutboxStatusEnum(StrEnum):
    """Outbox event status for integration publishing."""

    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"
