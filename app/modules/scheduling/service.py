"""Scheduling business logic layer."""

from __future__ import annotations

import logging
from datetime import date, datetime
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_db_session
from app.core.enums import RoleEnum
from app.modules.audit.repository import AuditRepository
from app.modules.booking.repository import BookingRepository
from app.modules.identity.schemas import Actor
from app.modules.scheduling.models import AvailabilityWindow
from app.modules.scheduling.repository import SchedulingRepository
from app.modules.scheduling.schemas import AvailabilityWindowCreate
from app.modules.scheduling.slots import TimeSlot, compute_slots
from app.shared.exceptions import BusinessRuleException, NotFoundException, UnauthorizedException
from app.shared.utils import day_of_week

settings = get_settings()
logger = logging.getLogger(__name__)


class SchedulingService:
    """Weekly availability and slot listing."""

    def __init__(
        self,
        repository: SchedulingRepository,
        booking_repository: BookingRepository,
        audit_repository: AuditRepository,
    ) -> None:
        self.repository = repository
        self.booking_repository = booking_repository
        self.audit_repository = audit_repository

    async def create_window(self, payload: AvailabilityWindowCreate, actor: Actor) -> AvailabilityWindow:
        """Declare a weekly window for the acting tutor."""
        if actor.role != RoleEnum.TUTOR:
            raise UnauthorizedException("Only tutors can declare availability")

        window = await self.repository.create_window(
            tutor_id=actor.id,
            day_of_week=payload.day_of_week,
            start_time=payload.start_time,
            end_time=payload.end_time,
        )
        await self.audit_repository.create_audit_log(
            actor_id=actor.id,
            action="scheduling.window.create",
            entity_type="availability_window",
            entity_id=str(window.id),
            payload={
                "day_of_week": window.day_of_week,
                "start_time": window.start_time.isoformat(),
                "end_time": window.end_time.isoformat(),
            },
        )
        return window

    async def delete_window(self, window_id: UUID, actor: Actor) -> None:
        """Remove a window; bookings already made inside it are kept."""
        window = await self.repository.get_window_by_id(window_id)
        if window is None:
            raise NotFoundException("Availability window not found")
        if window.tutor_id != actor.id:
            raise UnauthorizedException("Only the owning tutor can remove this window")

        await self.repository.delete_window(window)
        await self.audit_repository.create_audit_log(
            actor_id=actor.id,
            action="scheduling.window.delete",
            entity_type="availability_window",
            entity_id=str(window_id),
            payload={"day_of_week": window.day_of_week},
        )

    async def list_windows(self, tutor_id: UUID) -> list[AvailabilityWindow]:
        """List tutor windows by day and start time."""
        return await self.repository.list_windows(tutor_id)

    async def get_day_slots(
        self,
        tutor_id: UUID,
        lesson_date: date,
        duration_minutes: int,
        now: datetime,
    ) -> list[TimeSlot]:
        """Compute slots for a tutor on a date from current store state."""
        if duration_minutes not in settings.lesson_durations_minutes:
            raise BusinessRuleException(
                f"Unsupported lesson duration: {duration_minutes} minutes",
            )

        windows = await self.repository.list_windows(tutor_id, day_of_week(lesson_date))
        if not windows:
            return []

        bookings = await self.booking_repository.list_active_bookings(tutor_id, lesson_date)
        return compute_slots(
            lesson_date,
            windows,
            bookings,
            duration_minutes,
            now,
            settings.slot_granularity_minutes,
        )


async def get_scheduling_service(session: AsyncSession = Depends(get_db_session)) -> SchedulingService:
    """Dependency provider for scheduling service."""
    return SchedulingService(
        repository=SchedulingRepository(session),
        booking_repository=BookingRepository(session),
        audit_repository=AuditRepository(session),
    )
