"""Booking interval overlap detection."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import time
from typing import TYPE_CHECKING
from uuid import UUID

from app.core.enums import BookingStatusEnum

if TYPE_CHECKING:
    from app.modules.booking.models import Booking

ACTIVE_BOOKING_STATUSES = frozenset({BookingStatusEnum.PENDING, BookingStatusEnum.CONFIRMED})


def overlaps(
    candidate_start: time,
    candidate_end: time,
    existing_start: time,
    existing_end: time,
) -> bool:
    """Return True when half-open intervals [a, b) and [c, d) share any instant."""
    return candidate_start < existing_end and existing_start < candidate_end


def is_active(booking: Booking) -> bool:
    """Return True when booking still occupies its interval."""
    return booking.status in ACTIVE_BOOKING_STATUSES


def find_conflicts(
    start_time: time,
    end_time: time,
    bookings: Iterable[Booking],
    exclude_booking_id: UUID | None = None,
) -> list[Booking]:
    """Return active bookings overlapping [start_time, end_time).

    Callers pass bookings of one tutor on one date.
    """
    return [
        booking
        for booking in bookings
        if booking.id != exclude_booking_id
        and is_active(booking)
        and overlaps(start_time, end_time, booking.start_time, booking.end_time)
    ]
