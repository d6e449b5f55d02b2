"""Booking repository layer."""

from __future__ import annotations

import logging
from datetime import date, time
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import acquire_transaction_lock
from app.core.enums import BookingStatusEnum, LessonTypeEnum, PaymentStatusEnum, RoleEnum
from app.modules.booking.models import NO_OVERLAP_CONSTRAINT, Booking
from app.modules.scheduling.conflicts import ACTIVE_BOOKING_STATUSES
from app.shared.exceptions import SlotConflictException

logger = logging.getLogger(__name__)


class BookingRepository:
    """DB operations for booking domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def lock_tutor_day(self, tutor_id: UUID, lesson_date: date) -> None:
        """Serialize writers touching one tutor's bookings on one date."""
        await acquire_transaction_lock(self.session, "bookings", tutor_id, lesson_date.isoformat())

    async def create_booking(
        self,
        tutor_id: UUID,
        student_id: UUID,
        lesson_date: date,
        start_time: time,
        end_time: time,
        duration_minutes: int,
        lesson_type: LessonTypeEnum,
        price: Decimal,
        status: BookingStatusEnum,
        payment_status: PaymentStatusEnum,
        **changes,
    ) -> Booking:
        booking = Booking(
            tutor_id=tutor_id,
            student_id=student_id,
            lesson_date=lesson_date,
            start_time=start_time,
            end_time=end_time,
            duration_minutes=duration_minutes,
            lesson_type=lesson_type,
            price=price,
            status=status,
            payment_status=payment_status,
            **changes,
        )
        self.session.add(booking)
        await self._flush_guarding_overlap()
        return booking

    async def get_booking_by_id(self, booking_id: UUID, *, for_update: bool = False) -> Booking | None:
        """Load one booking; ``for_update`` holds its row until the transaction ends."""
        stmt = select(Booking).where(Booking.id == booking_id)
        if for_update:
            stmt = stmt.with_for_update()
        return await self.session.scalar(stmt)

    async def list_active_bookings(
        self,
        tutor_id: UUID,
        lesson_date: date,
        exclude_booking_id: UUID | None = None,
    ) -> list[Booking]:
        stmt = select(Booking).where(
            Booking.tutor_id == tutor_id,
            Booking.lesson_date == lesson_date,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        )
        if exclude_booking_id is not None:
            stmt = stmt.where(Booking.id != exclude_booking_id)
        stmt = stmt.order_by(Booking.start_time.asc())
        return list((await self.session.scalars(stmt)).all())

    async def list_bookings(
        self,
        user_id: UUID,
        role_name: RoleEnum,
        limit: int,
        offset: int,
    ) -> tuple[list[Booking], int]:
        base_stmt: Select[tuple[Booking]] = select(Booking)

        if role_name == RoleEnum.STUDENT:
            base_stmt = base_stmt.where(Booking.student_id == user_id)
        elif role_name == RoleEnum.TUTOR:
            base_stmt = base_stmt.where(Booking.tutor_id == user_id)

        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = (
            base_stmt.order_by(Booking.lesson_date.desc(), Booking.start_time.desc())
            .limit(limit)
            .offset(offset)
        )
        items = list((await self.session.scalars(stmt)).all())
        return items, total

    async def set_status(
        self,
        booking: Booking,
        status: BookingStatusEnum,
        **changes,
    ) -> Booking:
        booking.status = status
        for key, value in changes.items():
            setattr(booking, key, value)
        await self._flush_guarding_overlap()
        return booking

    async def update_schedule(
        self,
        booking: Booking,
        lesson_date: date,
        start_time: time,
        end_time: time,
        **changes,
    ) -> Booking:
        booking.lesson_date = lesson_date
        booking.start_time = start_time
        booking.end_time = end_time
        for key, value in changes.items():
            setattr(booking, key, value)
        await self._flush_guarding_overlap()
        return booking

    async def save(self, booking: Booking) -> Booking:
        await self.session.flush()
        return booking

    async def _flush_guarding_overlap(self) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            if NO_OVERLAP_CONSTRAINT in str(exc.orig):
                logger.info("Booking write rejected by overlap constraint")
                raise SlotConflictException() from exc
            raise

    async def commit(self) -> None:
        """Persist the current transaction before an error response rolls the request back."""
        await self.session.commit()
