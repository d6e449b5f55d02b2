"""Bookable slot computation from weekly availability windows.

Everything here is pure: inputs are the tutor's windows and bookings as
loaded from the store, plus an explicit ``now``. Results are advisory; the
booking service re-validates on every write.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import TYPE_CHECKING

from app.modules.scheduling.conflicts import find_conflicts
from app.shared.utils import day_of_week, lesson_start_at, minutes_of_day, time_from_minutes

if TYPE_CHECKING:
    from app.modules.booking.models import Booking
    from app.modules.scheduling.models import AvailabilityWindow

DEFAULT_SLOT_GRANULARITY_MINUTES = 30


@dataclass(frozen=True, slots=True)
class TimeSlot:
    """Candidate lesson start annotated with availability."""

    time: time
    available: bool


def windows_for_date(
    windows: Iterable[AvailabilityWindow],
    lesson_date: date,
) -> list[AvailabilityWindow]:
    """Return windows recurring on the weekday of ``lesson_date``."""
    weekday = day_of_week(lesson_date)
    return [window for window in windows if window.day_of_week == weekday]


def candidate_starts(
    window: AvailabilityWindow,
    duration_minutes: int,
    granularity_minutes: int = DEFAULT_SLOT_GRANULARITY_MINUTES,
) -> list[int]:
    """Return start minutes inside ``window`` that fit a whole lesson."""
    window_start = minutes_of_day(window.start_time)
    window_end = minutes_of_day(window.end_time)
    starts: list[int] = []
    current = window_start
    while current + duration_minutes <= window_end:
        starts.append(current)
        current += granularity_minutes
    return starts


def compute_slots(
    lesson_date: date,
    windows: Sequence[AvailabilityWindow],
    bookings: Sequence[Booking],
    duration_minutes: int,
    now: datetime,
    granularity_minutes: int = DEFAULT_SLOT_GRANULARITY_MINUTES,
) -> list[TimeSlot]:
    """Compute ordered slots for one tutor on one date.

    A slot is unavailable when its interval overlaps an active booking on
    that date or when it starts at or before ``now``. Starts produced by
    several windows are merged and any unavailable occurrence wins.
    """
    day_windows = windows_for_date(windows, lesson_date)
    if not day_windows:
        return []

    day_bookings = [booking for booking in bookings if booking.lesson_date == lesson_date]
    merged: dict[int, bool] = {}

    for window in day_windows:
        for start in candidate_starts(window, duration_minutes, granularity_minutes):
            slot_start = time_from_minutes(start)
            slot_end = time_from_minutes(start + duration_minutes)
            conflicts = find_conflicts(slot_start, slot_end, day_bookings)
            is_past = lesson_start_at(lesson_date, slot_start) <= now
            available = not conflicts and not is_past
            merged[start] = merged.get(start, True) and available

    return [
        TimeSlot(time=time_from_minutes(start), available=available)
        for start, available in sorted(merged.items())
    ]


def fits_recurring_window(
    lesson_date: date,
    start_time: time,
    duration_minutes: int,
    windows: Iterable[AvailabilityWindow],
    granularity_minutes: int = DEFAULT_SLOT_GRANULARITY_MINUTES,
) -> bool:
    """Return True when ``start_time`` is a slot start the calculator would offer.

    The lesson must fit inside one window recurring on that weekday and start
    on that window's slot grid.
    """
    start = minutes_of_day(start_time)
    return any(
        start in candidate_starts(window, duration_minutes, granularity_minutes)
        for window in windows_for_date(windows, lesson_date)
    )
