"""Shared utility functions."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

MINUTES_PER_DAY = 24 * 60


def utc_now() -> datetime:
    """Return aware UTC datetime."""
    return datetime.now(timezone.utc)


def local_now() -> datetime:
    """Return naive local wall-clock datetime.

    Lesson dates and times are stored as naive local values, so "now" is
    compared in the same frame.
    """
    return datetime.now()


def day_of_week(value: date) -> int:
    """Return day index with 0 = Sunday ... 6 = Saturday."""
    return (value.weekday() + 1) % 7


def minutes_of_day(value: time) -> int:
    """Return minutes elapsed since midnight, ignoring seconds."""
    return value.hour * 60 + value.minute


def time_from_minutes(minutes: int) -> time:
    """Build time-of-day from minutes since midnight."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"Minutes out of day range: {minutes}")
    return time(hour=minutes // 60, minute=minutes % 60)


def lesson_start_at(lesson_date: date, start_time: time) -> datetime:
    """Combine lesson date and start time into naive local datetime."""
    return datetime.combine(lesson_date, start_time)


def lesson_end_at(lesson_date: date, start_time: time, duration_minutes: int) -> datetime:
    """Return naive local datetime when a lesson finishes."""
    return lesson_start_at(lesson_date, start_time) + timedelta(minutes=duration_minutes)
