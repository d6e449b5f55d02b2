"""Tutors ORM models."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BaseModelMixin


class TutorProfile(BaseModelMixin, Base):
    """Public tutor profile keyed by the tutor's party id."""

    __tablename__ = "tutor_profiles"
    __table_args__ = (
        CheckConstraint("hourly_rate > 0", name="hourly_rate_positive"),
        CheckConstraint("trial_rate IS NULL OR trial_rate >= 0", name="trial_rate_non_negative"),
    )

    user_id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(128), nullable=False)
    bio: Mapped[str] = mapped_column(Text, default="", nullable=False)
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    trial_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    languages: Mapped[list[str]] = mapped_column(JSONB, default=list, nullable=False)
