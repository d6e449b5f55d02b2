"""Tutors API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.core.config import get_settings
from app.core.enums import LessonTypeEnum
from app.modules.identity.schemas import Actor
from app.modules.identity.service import get_current_actor
from app.modules.tutors.schemas import (
    PriceQuoteRead,
    TutorProfileCreate,
    TutorProfileRead,
    TutorProfileUpdate,
)
from app.modules.tutors.service import TutorsService, get_tutors_service
from app.shared.pagination import Page, build_page, get_pagination_params

settings = get_settings()

router = APIRouter(prefix="/tutors", tags=["tutors"])


@router.post("/profiles", response_model=TutorProfileRead, status_code=status.HTTP_201_CREATED)
async def create_profile(
    payload: TutorProfileCreate,
    service: TutorsService = Depends(get_tutors_service),
    current_actor: Actor = Depends(get_current_actor),
) -> TutorProfileRead:
    """Create tutor profile."""
    profile = await service.create_profile(payload, current_actor)
    return TutorProfileRead.model_validate(profile)


@router.patch("/profiles/{tutor_id}", response_model=TutorProfileRead)
async def update_profile(
    tutor_id: UUID,
    payload: TutorProfileUpdate,
    service: TutorsService = Depends(get_tutors_service),
    current_actor: Actor = Depends(get_current_actor),
) -> TutorProfileRead:
    """Update tutor profile."""
    profile = await service.update_profile(tutor_id, payload, current_actor)
    return TutorProfileRead.model_validate(profile)


@router.get("/profiles", response_model=Page[TutorProfileRead])
async def list_profiles(
    language: str | None = Query(default=None, max_length=64),
    pagination=Depends(get_pagination_params),
    service: TutorsService = Depends(get_tutors_service),
) -> Page[TutorProfileRead]:
    """List tutor profiles."""
    items, total = await service.list_profiles(pagination.limit, pagination.offset, language)
    serialized = [TutorProfileRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@router.get("/profiles/{tutor_id}", response_model=TutorProfileRead)
async def get_profile(
    tutor_id: UUID,
    service: TutorsService = Depends(get_tutors_service),
) -> TutorProfileRead:
    profile = await service.get_profile(tutor_id)
    return TutorProfileRead.model_validate(profile)


@router.get("/profiles/{tutor_id}/quote", response_model=PriceQuoteRead)
async def quote_lesson(
    tutor_id: UUID,
    lesson_type: LessonTypeEnum = Query(default=LessonTypeEnum.REGULAR),
    duration_minutes: int = Query(default=60, gt=0),
    service: TutorsService = Depends(get_tutors_service),
) -> PriceQuoteRead:
    """Quote the price of a lesson."""
    if lesson_type == LessonTypeEnum.TRIAL:
        duration_minutes = settings.trial_lesson_duration_minutes
    price = await service.quote(tutor_id, lesson_type, duration_minutes)
    return PriceQuoteRead(
        tutor_id=tutor_id,
        lesson_type=lesson_type,
        duration_minutes=duration_minutes,
        price=price,
        currency=settings.paypal_currency,
    )
