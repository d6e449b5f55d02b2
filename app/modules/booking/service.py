"""Booking business logic layer."""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from decimal import Decimal
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_db_session
from app.core.enums import BookingStatusEnum, LessonTypeEnum, PaymentStatusEnum, RoleEnum
from app.core.metrics import track_booking_operation
from app.modules.audit.repository import AuditRepository
from app.modules.booking.lifecycle import TERMINAL_STATUSES, effective_status, ensure_modifiable
from app.modules.booking.models import Booking
from app.modules.booking.repository import BookingRepository
from app.modules.booking.schemas import BookingCreate
from app.modules.identity.schemas import Actor
from app.modules.scheduling.conflicts import find_conflicts
from app.modules.scheduling.repository import SchedulingRepository
from app.modules.scheduling.slots import fits_recurring_window
from app.modules.video.service import VideoRoomService, build_video_room_service
from app.shared.exceptions import (
    BusinessRuleException,
    InvalidTransitionException,
    InvalidWindowException,
    NotFoundException,
    SlotConflictException,
    UnauthorizedException,
)
from app.shared.utils import day_of_week, lesson_start_at, minutes_of_day, time_from_minutes

settings = get_settings()
logger = logging.getLogger(__name__)


def _booking_event_payload(booking: Booking, **extra) -> dict:
    payload = {
        "booking_id": str(booking.id),
        "tutor_id": str(booking.tutor_id),
        "student_id": str(booking.student_id),
        "lesson_date": booking.lesson_date.isoformat(),
        "start_time": booking.start_time.isoformat(timespec="minutes"),
        "end_time": booking.end_time.isoformat(timespec="minutes"),
        "status": booking.status.value,
    }
    payload.update(extra)
    return payload


class BookingService:
    """Booking domain service with create/confirm/cancel/reschedule rules."""

    def __init__(
        self,
        booking_repository: BookingRepository,
        scheduling_repository: SchedulingRepository,
        audit_repository: AuditRepository,
        video_rooms: VideoRoomService,
    ) -> None:
        self.booking_repository = booking_repository
        self.scheduling_repository = scheduling_repository
        self.audit_repository = audit_repository
        self.video_rooms = video_rooms

    def _validate_party_access(self, booking: Booking, actor: Actor) -> None:
        if actor.role == RoleEnum.STUDENT and booking.student_id == actor.id:
            return
        if actor.role == RoleEnum.TUTOR and booking.tutor_id == actor.id:
            return
        raise UnauthorizedException("You cannot manage this booking")

    async def _get_booking(self, booking_id: UUID) -> Booking:
        booking = await self.booking_repository.get_booking_by_id(booking_id, for_update=True)
        if booking is None:
            raise NotFoundException("Booking not found")
        return booking

    def _validate_duration(self, lesson_type: LessonTypeEnum, duration_minutes: int) -> None:
        if lesson_type == LessonTypeEnum.TRIAL:
            if duration_minutes != settings.trial_lesson_duration_minutes:
                raise BusinessRuleException(
                    f"Trial lessons last {settings.trial_lesson_duration_minutes} minutes",
                )
            return
        if duration_minutes not in settings.lesson_durations_minutes:
            raise BusinessRuleException(f"Unsupported lesson duration: {duration_minutes} minutes")

    async def _attach_video_room(self, booking: Booking) -> None:
        """Commit the booking first so the provider call runs outside the write transaction."""
        await self.booking_repository.commit()
        await self.video_rooms.provision_for_booking(booking)

    async def _ensure_interval_free(
        self,
        tutor_id: UUID,
        lesson_date: date,
        start_time: time,
        duration_minutes: int,
        exclude_booking_id: UUID | None = None,
    ) -> time:
        """Re-derive availability from the store and return the lesson end time.

        Callers must hold the tutor/date lock.
        """
        windows = await self.scheduling_repository.list_windows(tutor_id, day_of_week(lesson_date))
        if not fits_recurring_window(
            lesson_date,
            start_time,
            duration_minutes,
            windows,
            settings.slot_granularity_minutes,
        ):
            raise InvalidWindowException()

        end_time = time_from_minutes(minutes_of_day(start_time) + duration_minutes)
        bookings = await self.booking_repository.list_active_bookings(
            tutor_id,
            lesson_date,
            exclude_booking_id=exclude_booking_id,
        )
        if find_conflicts(start_time, end_time, bookings, exclude_booking_id=exclude_booking_id):
            raise SlotConflictException()
        return end_time

    @track_booking_operation("create")
    async def create_booking(
        self,
        payload: BookingCreate,
        actor: Actor,
        now: datetime,
        *,
        payment_required: bool,
    ) -> Booking:
        """Create booking after re-checking window and conflicts under the tutor/date lock.

        Free lessons are confirmed at once; paid ones wait as pending until
        the payment is captured.
        """
        if actor.role != RoleEnum.STUDENT or actor.id != payload.student_id:
            raise UnauthorizedException("Only the booking student can create a booking")
        if payload.tutor_id == payload.student_id:
            raise BusinessRuleException("Tutors cannot book their own lessons")

        self._validate_duration(payload.lesson_type, payload.duration_minutes)
        if lesson_start_at(payload.lesson_date, payload.start_time) <= now:
            raise BusinessRuleException("Cannot book a lesson in the past")

        await self.booking_repository.lock_tutor_day(payload.tutor_id, payload.lesson_date)
        end_time = await self._ensure_interval_free(
            payload.tutor_id,
            payload.lesson_date,
            payload.start_time,
            payload.duration_minutes,
        )

        is_free = not payment_required or payload.price == Decimal("0")
        if is_free:
            status = BookingStatusEnum.CONFIRMED
            payment_status = PaymentStatusEnum.COMPLETED
            extra = {"confirmed_at": now}
        else:
            status = BookingStatusEnum.PENDING
            payment_status = PaymentStatusEnum.PENDING
            extra = {}

        booking = await self.booking_repository.create_booking(
            tutor_id=payload.tutor_id,
            student_id=payload.student_id,
            lesson_date=payload.lesson_date,
            start_time=payload.start_time,
            end_time=end_time,
            duration_minutes=payload.duration_minutes,
            lesson_type=payload.lesson_type,
            price=payload.price,
            status=status,
            payment_status=payment_status,
            **extra,
        )
        logger.info(
            "Booking %s created for tutor %s on %s %s (%s)",
            booking.id,
            booking.tutor_id,
            booking.lesson_date,
            booking.start_time,
            booking.status.value,
        )

        await self.audit_repository.record_booking_event(
            booking.id,
            "booking.created",
            _booking_event_payload(
                booking,
                lesson_type=booking.lesson_type.value,
                price=str(booking.price),
            ),
        )
        if is_free:
            await self._attach_video_room(booking)

        return booking

    @track_booking_operation("confirm")
    async def confirm_booking(self, booking_id: UUID, actor: Actor, now: datetime) -> Booking:
        """Confirm a paid pending booking; only its tutor may do so."""
        booking = await self._get_booking(booking_id)
        if actor.role != RoleEnum.TUTOR or booking.tutor_id != actor.id:
            raise UnauthorizedException("Only the booking tutor can confirm it")

        if booking.status != BookingStatusEnum.PENDING:
            raise InvalidTransitionException("Only pending bookings can be confirmed")
        if booking.payment_status != PaymentStatusEnum.COMPLETED:
            raise InvalidTransitionException("Booking payment has not been completed")

        await self.booking_repository.set_status(
            booking,
            BookingStatusEnum.CONFIRMED,
            confirmed_at=now,
        )
        logger.info("Booking %s confirmed by tutor %s", booking.id, actor.id)

        await self.audit_repository.record_booking_event(
            booking.id,
            "booking.confirmed",
            _booking_event_payload(booking),
        )
        await self._attach_video_room(booking)
        return booking

    @track_booking_operation("cancel")
    async def cancel_booking(
        self,
        booking_id: UUID,
        actor: Actor,
        now: datetime,
        reason: str | None = None,
    ) -> Booking:
        """Cancel booking and release its interval at once."""
        booking = await self._get_booking(booking_id)
        self._validate_party_access(booking, actor)

        current = effective_status(booking, now)
        if current in TERMINAL_STATUSES:
            raise InvalidTransitionException(f"Booking is already {current.value}")

        ensure_modifiable(booking, now, settings.booking_modification_cutoff_hours)

        await self.booking_repository.set_status(
            booking,
            BookingStatusEnum.CANCELLED,
            cancelled_at=now,
            cancellation_reason=reason,
        )
        logger.info("Booking %s cancelled by %s %s", booking.id, actor.role.value, actor.id)

        await self.audit_repository.record_booking_event(
            booking.id,
            "booking.cancelled",
            _booking_event_payload(
                booking,
                cancelled_by=str(actor.id),
                reason=reason,
            ),
        )
        return booking

    @track_booking_operation("reschedule")
    async def reschedule_booking(
        self,
        booking_id: UUID,
        actor: Actor,
        new_date: date,
        new_start_time: time,
        now: datetime,
    ) -> Booking:
        """Move a confirmed booking in place, keeping its duration and status."""
        booking = await self._get_booking(booking_id)
        self._validate_party_access(booking, actor)

        if effective_status(booking, now) != BookingStatusEnum.CONFIRMED:
            raise InvalidTransitionException("Only confirmed upcoming bookings can be rescheduled")

        ensure_modifiable(booking, now, settings.booking_modification_cutoff_hours)

        if lesson_start_at(new_date, new_start_time) <= now:
            raise BusinessRuleException("Cannot move a lesson into the past")

        await self.booking_repository.lock_tutor_day(booking.tutor_id, new_date)
        new_end_time = await self._ensure_interval_free(
            booking.tutor_id,
            new_date,
            new_start_time,
            booking.duration_minutes,
            exclude_booking_id=booking.id,
        )

        previous = {
            "previous_date": booking.lesson_date.isoformat(),
            "previous_start_time": booking.start_time.isoformat(timespec="minutes"),
        }
        await self.booking_repository.update_schedule(
            booking,
            lesson_date=new_date,
            start_time=new_start_time,
            end_time=new_end_time,
            rescheduled_at=now,
            video_room_url=None,
            video_host_url=None,
        )
        logger.info("Booking %s rescheduled to %s %s", booking.id, new_date, new_start_time)

        await self.audit_repository.record_booking_event(
            booking.id,
            "booking.rescheduled",
            _booking_event_payload(booking, rescheduled_by=str(actor.id), **previous),
        )
        await self._attach_video_room(booking)
        return booking

    async def list_bookings(
        self,
        actor: Actor,
        limit: int,
        offset: int,
    ) -> tuple[list[Booking], int]:
        """List bookings for actor according to role."""
        if actor.role not in (RoleEnum.STUDENT, RoleEnum.TUTOR):
            raise UnauthorizedException("Only students and tutors have bookings")
        return await self.booking_repository.list_bookings(actor.id, actor.role, limit, offset)


async def get_booking_service(session: AsyncSession = Depends(get_db_session)) -> BookingService:
    """Dependency provider for booking service."""
    booking_repository = BookingRepository(session)
    return BookingService(
        booking_repository=booking_repository,
        scheduling_repository=SchedulingRepository(session),
        audit_repository=AuditRepository(session),
        video_rooms=build_video_room_service(booking_repository),
    )
