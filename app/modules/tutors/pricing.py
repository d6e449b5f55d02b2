"""Lesson price quotes derived from tutor rates."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from app.core.enums import LessonTypeEnum

_WHOLE_UNITS = Decimal("1")


def _round_whole(value: Decimal) -> Decimal:
    return value.quantize(_WHOLE_UNITS, rounding=ROUND_HALF_UP)


def quote_price(
    hourly_rate: Decimal,
    trial_rate: Decimal | None,
    lesson_type: LessonTypeEnum,
    duration_minutes: int,
) -> Decimal:
    """Price a lesson in whole currency units.

    Trial lessons use the trial rate, or half the hourly rate when the tutor set none.
    """
    if lesson_type == LessonTypeEnum.TRIAL:
        if trial_rate is not None:
            return Decimal(trial_rate)
        return _round_whole(Decimal(hourly_rate) / 2)
    return _round_whole(Decimal(hourly_rate) * duration_minutes / 60)
