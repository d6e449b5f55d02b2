"""Tutors repository layer."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.tutors.models import TutorProfile


class TutorsRepository:
    """DB operations for tutors domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_profile(
        self,
        user_id: UUID,
        display_name: str,
        bio: str,
        hourly_rate: Decimal,
        trial_rate: Decimal | None,
        languages: list[str],
    ) -> TutorProfile:
        profile = TutorProfile(
            user_id=user_id,
            display_name=display_name,
            bio=bio,
            hourly_rate=hourly_rate,
            trial_rate=trial_rate,
            languages=languages,
        )
        self.session.add(profile)
        await self.session.flush()
        return profile

    async def get_profile_by_user_id(self, user_id: UUID) -> TutorProfile | None:
        stmt = select(TutorProfile).where(TutorProfile.user_id == user_id)
        return await self.session.scalar(stmt)

    async def list_profiles(
        self,
        limit: int,
        offset: int,
        language: str | None = None,
    ) -> tuple[list[TutorProfile], int]:
        base_stmt: Select[tuple[TutorProfile]] = select(TutorProfile)
        if language:
            base_stmt = base_stmt.where(TutorProfile.languages.contains([language]))

        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(TutorProfile.display_name.asc()).limit(limit).offset(offset)
        items = list((await self.session.scalars(stmt)).all())
        return items, total

    async def update_profile(self, profile: TutorProfile, **changes) -> TutorProfile:
        for key, value in changes.items():
            setattr(profile, key, value)
        await self.session.flush()
        return profile
