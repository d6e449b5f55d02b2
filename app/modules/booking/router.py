"""Booking API router."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.core.config import get_settings
from app.core.enums import LessonTypeEnum, RoleEnum
from app.modules.booking.lifecycle import can_modify, effective_status, hours_until_start
from app.modules.booking.models import Booking
from app.modules.booking.schemas import (
    BookingCancelRequest,
    BookingCreate,
    BookingRead,
    BookingRequest,
    BookingRescheduleRequest,
    BookingView,
)
from app.modules.booking.service import BookingService, get_booking_service
from app.modules.identity.schemas import Actor
from app.modules.identity.service import get_current_actor, require_roles
from app.modules.tutors.service import TutorsService, get_tutors_service
from app.shared.pagination import Page, build_page, get_pagination_params
from app.shared.utils import local_now

settings = get_settings()

router = APIRouter(prefix="/booking", tags=["booking"])


def to_view(booking: Booking, now: datetime) -> BookingView:
    """Serialize booking with state derived at ``now``."""
    fields = BookingRead.model_validate(booking).model_dump()
    return BookingView(
        **fields,
        effective_status=effective_status(booking, now),
        can_modify=can_modify(booking, now, settings.booking_modification_cutoff_hours),
        hours_until_start=round(hours_until_start(booking, now), 2),
    )


@router.post("", response_model=BookingView, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingRequest,
    service: BookingService = Depends(get_booking_service),
    tutors_service: TutorsService = Depends(get_tutors_service),
    current_actor: Actor = Depends(require_roles(RoleEnum.STUDENT)),
) -> BookingView:
    """Book a lesson priced from the tutor's rates."""
    duration_minutes = payload.duration_minutes
    if payload.lesson_type == LessonTypeEnum.TRIAL:
        duration_minutes = settings.trial_lesson_duration_minutes

    price = await tutors_service.quote(payload.tutor_id, payload.lesson_type, duration_minutes)
    now = local_now()
    booking = await service.create_booking(
        BookingCreate(
            tutor_id=payload.tutor_id,
            student_id=current_actor.id,
            lesson_date=payload.lesson_date,
            start_time=payload.start_time,
            duration_minutes=duration_minutes,
            lesson_type=payload.lesson_type,
            price=price,
        ),
        current_actor,
        now,
        payment_required=settings.payments_enabled,
    )
    return to_view(booking, now)


@router.post("/{booking_id}/confirm", response_model=BookingView)
async def confirm_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_actor: Actor = Depends(get_current_actor),
) -> BookingView:
    """Confirm paid booking from PENDING to CONFIRMED."""
    now = local_now()
    booking = await service.confirm_booking(booking_id, current_actor, now)
    return to_view(booking, now)


@router.post("/{booking_id}/cancel", response_model=BookingView)
async def cancel_booking(
    booking_id: UUID,
    payload: BookingCancelRequest,
    service: BookingService = Depends(get_booking_service),
    current_actor: Actor = Depends(get_current_actor),
) -> BookingView:
    """Cancel booking when outside the modification cutoff."""
    now = local_now()
    booking = await service.cancel_booking(booking_id, current_actor, now, payload.reason)
    return to_view(booking, now)


@router.post("/{booking_id}/reschedule", response_model=BookingView)
async def reschedule_booking(
    booking_id: UUID,
    payload: BookingRescheduleRequest,
    service: BookingService = Depends(get_booking_service),
    current_actor: Actor = Depends(get_current_actor),
) -> BookingView:
    """Move confirmed booking to another free slot."""
    now = local_now()
    booking = await service.reschedule_booking(
        booking_id,
        current_actor,
        payload.new_date,
        payload.new_start_time,
        now,
    )
    return to_view(booking, now)


@router.get("/my", response_model=Page[BookingView])
async def list_my_bookings(
    pagination=Depends(get_pagination_params),
    service: BookingService = Depends(get_booking_service),
    current_actor: Actor = Depends(get_current_actor),
) -> Page[BookingView]:
    """List bookings for current party."""
    items, total = await service.list_bookings(current_actor, pagination.limit, pagination.offset)
    now = local_now()
    serialized = [to_view(item, now) for item in items]
    return build_page(serialized, total, pagination)
