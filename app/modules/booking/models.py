"""Booking ORM models."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, DateTime, Integer, Numeric, String, Time
from sqlalchemy import Enum as SAEnum
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BaseModelMixin, enum_values
from app.core.enums import BookingStatusEnum, LessonTypeEnum, PaymentStatusEnum

# Created by the initial migration (btree_gist); rejects overlapping active
# bookings of one tutor on one date.
NO_OVERLAP_CONSTRAINT = "ex_bookings_no_overlap"


class Booking(BaseModelMixin, Base):
    """Lesson booking between a tutor and a student.

    Lesson date, times and the lifecycle timestamps are naive local wall-clock.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="start_before_end"),
        CheckConstraint("price >= 0", name="price_non_negative"),
        CheckConstraint("duration_minutes > 0", name="duration_positive"),
    )

    tutor_id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), nullable=False, index=True)
    student_id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), nullable=False, index=True)
    lesson_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[time] = mapped_column(Time(timezone=False), nullable=False)
    end_time: Mapped[time] = mapped_column(Time(timezone=False), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    lesson_type: Mapped[LessonTypeEnum] = mapped_column(
        SAEnum(
            LessonTypeEnum,
            name="lesson_type_enum",
            native_enum=False,
            values_callable=enum_values,
        ),
        default=LessonTypeEnum.REGULAR,
        nullable=False,
    )
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[BookingStatusEnum] = mapped_column(
        SAEnum(
            BookingStatusEnum,
            name="booking_status_enum",
            native_enum=False,
            values_callable=enum_values,
        ),
        default=BookingStatusEnum.PENDING,
        nullable=False,
        index=True,
    )
    payment_status: Mapped[PaymentStatusEnum] = mapped_column(
        SAEnum(
            PaymentStatusEnum,
            name="payment_status_enum",
            native_enum=False,
            values_callable=enum_values,
        ),
        default=PaymentStatusEnum.PENDING,
        nullable=False,
    )
    payment_order_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    video_room_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    video_host_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(String(512), nullable=True)
    rescheduled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
