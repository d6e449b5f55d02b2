"""Scheduling API router."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from app.modules.identity.schemas import Actor
from app.modules.identity.service import get_current_actor
from app.modules.scheduling.schemas import (
    AvailabilityWindowCreate,
    AvailabilityWindowRead,
    DaySlotsRead,
    TimeSlotRead,
)
from app.modules.scheduling.service import SchedulingService, get_scheduling_service
from app.shared.utils import local_now

router = APIRouter(prefix="/scheduling", tags=["scheduling"])


@router.post("/windows", response_model=AvailabilityWindowRead, status_code=status.HTTP_201_CREATED)
async def create_window(
    payload: AvailabilityWindowCreate,
    service: SchedulingService = Depends(get_scheduling_service),
    current_actor: Actor = Depends(get_current_actor),
) -> AvailabilityWindowRead:
    """Declare weekly availability window."""
    window = await service.create_window(payload, current_actor)
    return AvailabilityWindowRead.model_validate(window)


@router.delete("/windows/{window_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_window(
    window_id: UUID,
    service: SchedulingService = Depends(get_scheduling_service),
    current_actor: Actor = Depends(get_current_actor),
) -> Response:
    """Delete weekly availability window."""
    await service.delete_window(window_id, current_actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/tutors/{tutor_id}/windows", response_model=list[AvailabilityWindowRead])
async def list_windows(
    tutor_id: UUID,
    service: SchedulingService = Depends(get_scheduling_service),
) -> list[AvailabilityWindowRead]:
    """List tutor's weekly availability."""
    windows = await service.list_windows(tutor_id)
    return [AvailabilityWindowRead.model_validate(window) for window in windows]


@router.get("/tutors/{tutor_id}/slots", response_model=DaySlotsRead)
async def list_day_slots(
    tutor_id: UUID,
    lesson_date: date = Query(),
    duration_minutes: int = Query(default=60, gt=0),
    service: SchedulingService = Depends(get_scheduling_service),
) -> DaySlotsRead:
    """List bookable and blocked slots for a date."""
    slots = await service.get_day_slots(tutor_id, lesson_date, duration_minutes, local_now())
    return DaySlotsRead(
        tutor_id=tutor_id,
        lesson_date=lesson_date,
        duration_minutes=duration_minutes,
        slots=[TimeSlotRead.model_validate(slot) for slot in slots],
    )
