"""In-memory stand-ins for repositories and collaborators used across tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from uuid import UUID, uuid4

from app.core.enums import BookingStatusEnum, LessonTypeEnum, PaymentStatusEnum, RoleEnum
from app.modules.identity.schemas import Actor
from app.modules.scheduling.conflicts import ACTIVE_BOOKING_STATUSES

# Thursday; 2026-02-23 is the following Monday.
FIXED_NOW = datetime(2026, 2, 19, 12, 0)
MONDAY = date(2026, 2, 23)
TUESDAY = date(2026, 2, 24)


@dataclass
class FakeWindow:
    tutor_id: UUID
    day_of_week: int
    start_time: time
    end_time: time
    id: UUID = field(default_factory=uuid4)


@dataclass
class FakeBooking:
    tutor_id: UUID
    student_id: UUID
    lesson_date: date
    start_time: time
    end_time: time
    duration_minutes: int
    lesson_type: LessonTypeEnum = LessonTypeEnum.REGULAR
    price: Decimal = Decimal("25.00")
    status: BookingStatusEnum = BookingStatusEnum.CONFIRMED
    payment_status: PaymentStatusEnum = PaymentStatusEnum.COMPLETED
    payment_order_id: str | None = None
    video_room_url: str | None = None
    video_host_url: str | None = None
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    rescheduled_at: datetime | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = FIXED_NOW
    updated_at: datetime = FIXED_NOW


class FakeBookingRepository:
    def __init__(self, bookings: list[FakeBooking] | None = None) -> None:
        self._bookings: dict[UUID, FakeBooking] = {booking.id: booking for booking in bookings or []}
        self.locks: list[tuple[UUID, date]] = []
        self.row_locks: list[UUID] = []
        self.commits = 0

    async def lock_tutor_day(self, tutor_id: UUID, lesson_date: date) -> None:
        self.locks.append((tutor_id, lesson_date))

    async def create_booking(self, **fields) -> FakeBooking:
        booking = FakeBooking(**fields)
        self._bookings[booking.id] = booking
        return booking

    async def get_booking_by_id(self, booking_id: UUID, *, for_update: bool = False) -> FakeBooking | None:
        if for_update:
            self.row_locks.append(booking_id)
        return self._bookings.get(booking_id)

    async def list_active_bookings(
        self,
        tutor_id: UUID,
        lesson_date: date,
        exclude_booking_id: UUID | None = None,
    ) -> list[FakeBooking]:
        return sorted(
            (
                booking
                for booking in self._bookings.values()
                if booking.tutor_id == tutor_id
                and booking.lesson_date == lesson_date
                and booking.status in ACTIVE_BOOKING_STATUSES
                and booking.id != exclude_booking_id
            ),
            key=lambda booking: booking.start_time,
        )

    async def list_bookings(
        self,
        user_id: UUID,
        role_name: RoleEnum,
        limit: int,
        offset: int,
    ) -> tuple[list[FakeBooking], int]:
        key = "student_id" if role_name == RoleEnum.STUDENT else "tutor_id"
        items = [booking for booking in self._bookings.values() if getattr(booking, key) == user_id]
        return items[offset : offset + limit], len(items)

    async def set_status(self, booking: FakeBooking, status: BookingStatusEnum, **changes) -> FakeBooking:
        booking.status = status
        for key, value in changes.items():
            setattr(booking, key, value)
        return booking

    async def update_schedule(
        self,
        booking: FakeBooking,
        lesson_date: date,
        start_time: time,
        end_time: time,
        **changes,
    ) -> FakeBooking:
        booking.lesson_date = lesson_date
        booking.start_time = start_time
        booking.end_time = end_time
        for key, value in changes.items():
            setattr(booking, key, value)
        return booking

    async def save(self, booking: FakeBooking) -> FakeBooking:
        self._bookings[booking.id] = booking
        return booking

    async def commit(self) -> None:
        self.commits += 1


class FakeSchedulingRepository:
    def __init__(self, windows: list[FakeWindow] | None = None) -> None:
        self.windows: list[FakeWindow] = list(windows or [])

    async def create_window(
        self,
        tutor_id: UUID,
        day_of_week: int,
        start_time: time,
        end_time: time,
    ) -> FakeWindow:
        window = FakeWindow(
            tutor_id=tutor_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
        )
        self.windows.append(window)
        return window

    async def get_window_by_id(self, window_id: UUID) -> FakeWindow | None:
        return next((window for window in self.windows if window.id == window_id), None)

    async def list_windows(self, tutor_id: UUID, day_of_week: int | None = None) -> list[FakeWindow]:
        return sorted(
            (
                window
                for window in self.windows
                if window.tutor_id == tutor_id
                and (day_of_week is None or window.day_of_week == day_of_week)
            ),
            key=lambda window: (window.day_of_week, window.start_time),
        )

    async def delete_window(self, window: FakeWindow) -> None:
        self.windows.remove(window)


class FakeAuditRepository:
    def __init__(self) -> None:
        self.events: list[dict] = []
        self.logs: list[dict] = []

    async def record_booking_event(self, booking_id: UUID, event_type: str, payload: dict) -> None:
        self.events.append({"booking_id": booking_id, "event_type": event_type, "payload": payload})

    async def create_audit_log(
        self,
        actor_id: UUID | None,
        action: str,
        entity_type: str,
        entity_id: str | None,
        payload: dict,
    ) -> None:
        self.logs.append({"actor_id": actor_id, "action": action, "entity_id": entity_id})

    def event_types(self) -> list[str]:
        return [event["event_type"] for event in self.events]


class FakeVideoRooms:
    def __init__(self, booking_repository: FakeBookingRepository | None = None) -> None:
        self.booking_repository = booking_repository
        self.provisioned: list[UUID] = []
        self.commits_before: list[int] = []

    async def provision_for_booking(self, booking: FakeBooking) -> FakeBooking:
        self.provisioned.append(booking.id)
        if self.booking_repository is not None:
            self.commits_before.append(self.booking_repository.commits)
        booking.video_room_url = f"https://rooms.test/{booking.id}"
        return booking


def make_actor(party_id: UUID, role: RoleEnum = RoleEnum.STUDENT) -> Actor:
    return Actor(id=party_id, role=role)
