from __future__ import annotations

import random
from datetime import datetime, time, timedelta
from uuid import uuid4

from app.core.enums import BookingStatusEnum
from app.modules.scheduling.conflicts import is_active, overlaps
from app.modules.scheduling.slots import compute_slots, fits_recurring_window
from tests.fakes import FIXED_NOW, MONDAY, TUESDAY, FakeBooking, FakeWindow

TUTOR_ID = uuid4()


def window(start: time, end: time, day_of_week: int = 1) -> FakeWindow:
    return FakeWindow(tutor_id=TUTOR_ID, day_of_week=day_of_week, start_time=start, end_time=end)


def booking(start: time, end: time, status: BookingStatusEnum = BookingStatusEnum.CONFIRMED) -> FakeBooking:
    return FakeBooking(
        tutor_id=TUTOR_ID,
        student_id=uuid4(),
        lesson_date=MONDAY,
        start_time=start,
        end_time=end,
        duration_minutes=60,
        status=status,
    )


def as_pairs(slots) -> list[tuple[time, bool]]:
    return [(slot.time, slot.available) for slot in slots]


def test_basic_generation_steps_every_thirty_minutes() -> None:
    slots = compute_slots(MONDAY, [window(time(9, 0), time(11, 0))], [], 60, FIXED_NOW)

    assert as_pairs(slots) == [
        (time(9, 0), True),
        (time(9, 30), True),
        (time(10, 0), True),
    ]


def test_overlapping_booking_blocks_every_touching_candidate() -> None:
    slots = compute_slots(
        MONDAY,
        [window(time(9, 0), time(11, 0))],
        [booking(time(10, 0), time(11, 0))],
        60,
        FIXED_NOW,
    )

    assert as_pairs(slots) == [
        (time(9, 0), True),
        (time(9, 30), False),
        (time(10, 0), False),
    ]


def test_cancelled_and_completed_bookings_do_not_block() -> None:
    slots = compute_slots(
        MONDAY,
        [window(time(9, 0), time(10, 0))],
        [
            booking(time(9, 0), time(10, 0), BookingStatusEnum.CANCELLED),
            booking(time(9, 0), time(10, 0), BookingStatusEnum.COMPLETED),
        ],
        60,
        FIXED_NOW,
    )

    assert as_pairs(slots) == [(time(9, 0), True)]


def test_no_window_for_weekday_returns_empty_list() -> None:
    assert compute_slots(TUESDAY, [window(time(9, 0), time(11, 0))], [], 60, FIXED_NOW) == []


def test_window_shorter_than_duration_yields_nothing() -> None:
    assert compute_slots(MONDAY, [window(time(9, 0), time(10, 0))], [], 90, FIXED_NOW) == []


def test_ninety_minute_lessons_start_on_half_hours() -> None:
    slots = compute_slots(MONDAY, [window(time(9, 0), time(11, 0))], [], 90, FIXED_NOW)

    assert [slot.time for slot in slots] == [time(9, 0), time(9, 30)]


def test_started_and_past_slots_are_unavailable_today() -> None:
    now = datetime(2026, 2, 23, 9, 30)

    slots = compute_slots(MONDAY, [window(time(9, 0), time(11, 0))], [], 60, now)

    assert as_pairs(slots) == [
        (time(9, 0), False),
        (time(9, 30), False),
        (time(10, 0), True),
    ]


def test_past_dates_have_no_available_slots() -> None:
    now = datetime(2026, 2, 24, 8, 0)

    slots = compute_slots(MONDAY, [window(time(9, 0), time(11, 0))], [], 60, now)

    assert slots
    assert not any(slot.available for slot in slots)


def test_duplicate_starts_merge_and_unavailability_wins() -> None:
    windows = [window(time(9, 0), time(11, 0)), window(time(10, 0), time(12, 0))]
    bookings = [booking(time(11, 0), time(12, 0))]

    slots = compute_slots(MONDAY, windows, bookings, 60, FIXED_NOW)

    assert as_pairs(slots) == [
        (time(9, 0), True),
        (time(9, 30), True),
        (time(10, 0), True),
        (time(10, 30), False),
        (time(11, 0), False),
    ]


def test_bookings_on_other_dates_are_ignored() -> None:
    other_day = booking(time(9, 0), time(10, 0))
    other_day.lesson_date = TUESDAY

    slots = compute_slots(MONDAY, [window(time(9, 0), time(10, 0))], [other_day], 60, FIXED_NOW)

    assert as_pairs(slots) == [(time(9, 0), True)]


def test_fits_recurring_window_requires_grid_start_inside_one_window() -> None:
    windows = [window(time(9, 0), time(11, 0))]

    assert fits_recurring_window(MONDAY, time(10, 0), 60, windows) is True
    assert fits_recurring_window(MONDAY, time(10, 30), 60, windows) is False
    assert fits_recurring_window(MONDAY, time(9, 15), 30, windows) is False
    assert fits_recurring_window(TUESDAY, time(9, 0), 60, windows) is False


def test_same_inputs_give_identical_slots() -> None:
    windows = [window(time(9, 0), time(12, 0)), window(time(10, 0), time(14, 0))]
    bookings = [booking(time(10, 30), time(11, 30)), booking(time(13, 0), time(14, 0))]
    now = datetime(2026, 2, 23, 10, 0)

    first = compute_slots(MONDAY, windows, bookings, 60, now)
    second = compute_slots(MONDAY, windows, bookings, 60, now)

    assert first == second
    assert as_pairs(first) == as_pairs(second)


def test_random_booking_sets_mark_slots_by_overlap_and_clock() -> None:
    rng = random.Random(20260223)
    statuses = list(BookingStatusEnum)
    day_window = window(time(8, 0), time(20, 0))

    for _ in range(200):
        duration = rng.choice((30, 60, 90))
        bookings = []
        for _ in range(rng.randint(0, 6)):
            start_minutes = rng.randrange(8 * 60, 19 * 60, 15)
            length = rng.choice((30, 45, 60, 90))
            start = time(start_minutes // 60, start_minutes % 60)
            end_minutes = min(start_minutes + length, 20 * 60)
            end = time(end_minutes // 60, end_minutes % 60)
            bookings.append(booking(start, end, rng.choice(statuses)))
        now = rng.choice(
            (
                FIXED_NOW,
                datetime.combine(MONDAY, time(8, 0)) + timedelta(minutes=rng.randrange(0, 12 * 60)),
            ),
        )

        slots = compute_slots(MONDAY, [day_window], bookings, duration, now)

        expected_starts = list(range(8 * 60, 20 * 60 - duration + 1, 30))
        assert [slot.time.hour * 60 + slot.time.minute for slot in slots] == expected_starts
        for slot in slots:
            slot_end_minutes = slot.time.hour * 60 + slot.time.minute + duration
            slot_end = time(slot_end_minutes // 60, slot_end_minutes % 60)
            blocked = any(
                is_active(item) and overlaps(slot.time, slot_end, item.start_time, item.end_time)
                for item in bookings
            )
            is_past = datetime.combine(MONDAY, slot.time) <= now
            assert slot.available == (not blocked and not is_past)
