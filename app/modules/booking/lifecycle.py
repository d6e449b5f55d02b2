"""Pure booking lifecycle rules: derived status and the modification cutoff."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from app.core.enums import BookingStatusEnum
from app.shared.exceptions import CutoffExceededException
from app.shared.utils import lesson_end_at, lesson_start_at

if TYPE_CHECKING:
    from app.modules.booking.models import Booking

TERMINAL_STATUSES = frozenset({BookingStatusEnum.CANCELLED, BookingStatusEnum.COMPLETED})


def booking_start(booking: Booking) -> datetime:
    return lesson_start_at(booking.lesson_date, booking.start_time)


def booking_end(booking: Booking) -> datetime:
    return lesson_end_at(booking.lesson_date, booking.start_time, booking.duration_minutes)


def effective_status(booking: Booking, now: datetime) -> BookingStatusEnum:
    """Return status as seen at ``now``; confirmed lessons that ended read as completed."""
    if booking.status == BookingStatusEnum.CONFIRMED and booking_end(booking) <= now:
        return BookingStatusEnum.COMPLETED
    return booking.status


def hours_until_start(booking: Booking, now: datetime) -> float:
    return (booking_start(booking) - now).total_seconds() / 3600


def is_within_cutoff(booking: Booking, now: datetime, cutoff_hours: int) -> bool:
    """Return True when ``now`` is later than ``cutoff_hours`` before the lesson start."""
    return now > booking_start(booking) - timedelta(hours=cutoff_hours)


def ensure_modifiable(booking: Booking, now: datetime, cutoff_hours: int) -> None:
    """Raise when a confirmed booking is inside its protection window.

    Pending bookings are not committed yet and carry no cutoff.
    """
    if booking.status == BookingStatusEnum.CONFIRMED and is_within_cutoff(booking, now, cutoff_hours):
        raise CutoffExceededException(cutoff_hours)


def can_modify(booking: Booking, now: datetime, cutoff_hours: int) -> bool:
    """Return True when a confirmed booking can still be cancelled or rescheduled."""
    return effective_status(booking, now) == BookingStatusEnum.CONFIRMED and not is_within_cutoff(
        booking,
        now,
        cutoff_hours,
    )
