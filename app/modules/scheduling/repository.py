"""Scheduling repository layer."""

from __future__ import annotations

from datetime import time
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.scheduling.models import AvailabilityWindow


class SchedulingRepository:
    """DB access for availability windows."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_window(
        self,
        tutor_id: UUID,
        day_of_week: int,
        start_time: time,
        end_time: time,
    ) -> AvailabilityWindow:
        window = AvailabilityWindow(
            tutor_id=tutor_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
        )
        self.session.add(window)
        await self.session.flush()
        return window

    async def get_window_by_id(self, window_id: UUID) -> AvailabilityWindow | None:
        stmt = select(AvailabilityWindow).where(AvailabilityWindow.id == window_id)
        return await self.session.scalar(stmt)

    async def list_windows(
        self,
        tutor_id: UUID,
        day_of_week: int | None = None,
    ) -> list[AvailabilityWindow]:
        stmt = select(AvailabilityWindow).where(AvailabilityWindow.tutor_id == tutor_id)
        if day_of_week is not None:
            stmt = stmt.where(AvailabilityWindow.day_of_week == day_of_week)
        stmt = stmt.order_by(AvailabilityWindow.day_of_week.asc(), AvailabilityWindow.start_time.asc())
        return list((await self.session.scalars(stmt)).all())

    async def delete_window(self, window: AvailabilityWindow) -> None:
        await self.session.execute(delete(AvailabilityWindow).where(AvailabilityWindow.id == window.id))
        await self.session.flush()
