from __future__ import annotations

from datetime import datetime, time, timedelta
from uuid import uuid4

import pytest

from app.core.enums import BookingStatusEnum, PaymentStatusEnum
from app.modules.booking.lifecycle import (
    can_modify,
    effective_status,
    ensure_modifiable,
    hours_until_start,
)
from app.modules.booking.router import to_view
from app.shared.exceptions import CutoffExceededException
from tests.fakes import MONDAY, FakeBooking


def monday_booking(status: BookingStatusEnum = BookingStatusEnum.CONFIRMED) -> FakeBooking:
    return FakeBooking(
        tutor_id=uuid4(),
        student_id=uuid4(),
        lesson_date=MONDAY,
        start_time=time(9, 0),
        end_time=time(10, 0),
        duration_minutes=60,
        status=status,
    )


def test_confirmed_booking_reads_completed_once_it_ends() -> None:
    booking = monday_booking()

    assert effective_status(booking, datetime(2026, 2, 23, 9, 59)) == BookingStatusEnum.CONFIRMED
    assert effective_status(booking, datetime(2026, 2, 23, 10, 0)) == BookingStatusEnum.COMPLETED
    assert booking.status == BookingStatusEnum.CONFIRMED


def test_pending_and_cancelled_keep_their_status() -> None:
    later = datetime(2026, 3, 1, 12, 0)

    assert effective_status(monday_booking(BookingStatusEnum.PENDING), later) == BookingStatusEnum.PENDING
    assert effective_status(monday_booking(BookingStatusEnum.CANCELLED), later) == BookingStatusEnum.CANCELLED


def test_cutoff_boundary() -> None:
    booking = monday_booking()
    start = datetime(2026, 2, 23, 9, 0)

    ensure_modifiable(booking, start - timedelta(hours=12), 12)
    with pytest.raises(CutoffExceededException):
        ensure_modifiable(booking, start - timedelta(hours=12) + timedelta(minutes=1), 12)

    assert can_modify(booking, start - timedelta(hours=13), 12) is True
    assert can_modify(booking, start - timedelta(hours=10), 12) is False
    assert can_modify(monday_booking(BookingStatusEnum.PENDING), start - timedelta(hours=13), 12) is False


def test_view_annotates_derived_state() -> None:
    booking = monday_booking()
    booking.payment_status = PaymentStatusEnum.COMPLETED
    now = datetime(2026, 2, 22, 9, 0)

    view = to_view(booking, now)

    assert hours_until_start(booking, now) == 24
    assert view.hours_until_start == 24
    assert view.can_modify is True
    assert view.effective_status == BookingStatusEnum.CONFIRMED
    assert view.status == BookingStatusEnum.CONFIRMED
