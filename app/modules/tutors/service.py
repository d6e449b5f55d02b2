"""Tutors business logic layer."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_db_session
from app.core.enums import LessonTypeEnum, RoleEnum
from app.modules.identity.schemas import Actor
from app.modules.tutors.models import TutorProfile
from app.modules.tutors.pricing import quote_price
from app.modules.tutors.repository import TutorsRepository
from app.modules.tutors.schemas import TutorProfileCreate, TutorProfileUpdate
from app.shared.exceptions import (
    BusinessRuleException,
    ConflictException,
    NotFoundException,
    UnauthorizedException,
)

settings = get_settings()


class TutorsService:
    """Tutors domain service."""

    def __init__(self, repository: TutorsRepository) -> None:
        self.repository = repository

    async def create_profile(self, payload: TutorProfileCreate, actor: Actor) -> TutorProfile:
        """Create the acting tutor's profile."""
        if actor.role != RoleEnum.TUTOR:
            raise UnauthorizedException("Only tutors can create a tutor profile")

        existing = await self.repository.get_profile_by_user_id(actor.id)
        if existing is not None:
            raise ConflictException("Tutor profile already exists")

        return await self.repository.create_profile(
            user_id=actor.id,
            display_name=payload.display_name,
            bio=payload.bio,
            hourly_rate=payload.hourly_rate,
            trial_rate=payload.trial_rate,
            languages=payload.languages,
        )

    async def update_profile(
        self,
        tutor_id: UUID,
        payload: TutorProfileUpdate,
        actor: Actor,
    ) -> TutorProfile:
        """Update tutor profile."""
        profile = await self.get_profile(tutor_id)
        if actor.role != RoleEnum.ADMIN and actor.id != profile.user_id:
            raise UnauthorizedException("Only admin or owner can update profile")

        changes = payload.model_dump(exclude_unset=True)
        for required in ("display_name", "hourly_rate", "bio", "languages"):
            if required in changes and changes[required] is None:
                changes.pop(required)
        return await self.repository.update_profile(profile, **changes)

    async def get_profile(self, tutor_id: UUID) -> TutorProfile:
        profile = await self.repository.get_profile_by_user_id(tutor_id)
        if profile is None:
            raise NotFoundException("Tutor profile not found")
        return profile

    async def list_profiles(
        self,
        limit: int,
        offset: int,
        language: str | None = None,
    ) -> tuple[list[TutorProfile], int]:
        """List tutor profiles."""
        return await self.repository.list_profiles(limit=limit, offset=offset, language=language)

    async def quote(
        self,
        tutor_id: UUID,
        lesson_type: LessonTypeEnum,
        duration_minutes: int,
    ) -> Decimal:
        """Return the server-side price for a lesson with this tutor."""
        if duration_minutes not in settings.lesson_durations_minutes:
            raise BusinessRuleException(f"Unsupported lesson duration: {duration_minutes} minutes")

        profile = await self.get_profile(tutor_id)
        return quote_price(profile.hourly_rate, profile.trial_rate, lesson_type, duration_minutes)


async def get_tutors_service(session: AsyncSession = Depends(get_db_session)) -> TutorsService:
    """Dependency provider for tutors service."""
    return TutorsService(TutorsRepository(session))
