"""Initial schema

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 10:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261017_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


booking_status_enum = sa.Enum(
    "pending", "confirmed", "cancelled", "completed", name="booking_status_enum", native_enum=False
)
payment_status_enum = sa.Enum("pending", "completed", "failed", name="payment_status_enum", native_enum=False)
lesson_type_enum = sa.Enum("trial", "regular", name="lesson_type_enum", native_enum=False)
outbox_status_enum = sa.Enum("pending", "processed", "failed", name="outbox_status_enum", native_enum=False)


def _id_col() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False)


def _created_col() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def _updated_col() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")

    op.create_table(
        "tutor_profiles",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("display_name", sa.String(length=128), nullable=False),
        sa.Column("bio", sa.Text(), nullable=False),
        sa.Column("hourly_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("trial_rate", sa.Numeric(10, 2), nullable=True),
        sa.Column("languages", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.UniqueConstraint("user_id", name="uq_tutor_profiles_user_id"),
        sa.CheckConstraint("hourly_rate > 0", name="ck_tutor_profiles_hourly_rate_positive"),
        sa.CheckConstraint(
            "trial_rate IS NULL OR trial_rate >= 0",
            name="ck_tutor_profiles_trial_rate_non_negative",
        ),
    )

    op.create_table(
        "availability_windows",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("tutor_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("day_of_week", sa.SmallInteger(), nullable=False),
        sa.Column("start_time", sa.Time(timezone=False), nullable=False),
        sa.Column("end_time", sa.Time(timezone=False), nullable=False),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_availability_windows_day_of_week_range"),
        sa.CheckConstraint("start_time < end_time", name="ck_availability_windows_start_before_end"),
    )
    op.create_index(
        "ix_availability_windows_tutor_id",
        "availability_windows",
        ["tutor_id"],
        unique=False,
    )

    op.create_table(
        "bookings",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("tutor_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("lesson_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(timezone=False), nullable=False),
        sa.Column("end_time", sa.Time(timezone=False), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("lesson_type", lesson_type_enum, nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", booking_status_enum, nullable=False),
        sa.Column("payment_status", payment_status_enum, nullable=False),
        sa.Column("payment_order_id", sa.String(length=64), nullable=True),
        sa.Column("video_room_url", sa.String(length=1024), nullable=True),
        sa.Column("video_host_url", sa.String(length=2048), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=False), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=False), nullable=True),
        sa.Column("cancellation_reason", sa.String(length=512), nullable=True),
        sa.Column("rescheduled_at", sa.DateTime(timezone=False), nullable=True),
        sa.CheckConstraint("start_time < end_time", name="ck_bookings_start_before_end"),
        sa.CheckConstraint("price >= 0", name="ck_bookings_price_non_negative"),
        sa.CheckConstraint("duration_minutes > 0", name="ck_bookings_duration_positive"),
    )
    op.create_index("ix_bookings_tutor_id", "bookings", ["tutor_id"], unique=False)
    op.create_index("ix_bookings_student_id", "bookings", ["student_id"], unique=False)
    op.create_index("ix_bookings_lesson_date", "bookings", ["lesson_date"], unique=False)
    op.create_index("ix_bookings_status", "bookings", ["status"], unique=False)
    op.create_index("ix_bookings_payment_order_id", "bookings", ["payment_order_id"], unique=False)
    op.execute(
        """
        ALTER TABLE bookings
        ADD CONSTRAINT ex_bookings_no_overlap
        EXCLUDE USING gist (
            tutor_id WITH =,
            tsrange(lesson_date + start_time, lesson_date + end_time, '[)') WITH &&
        )
        WHERE (status IN ('pending', 'confirmed'))
        """
    )

    op.create_table(
        "audit_logs",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("actor_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("action", sa.String(length=128), nullable=False),
        sa.Column("entity_type", sa.String(length=128), nullable=False),
        sa.Column("entity_id", sa.String(length=128), nullable=True),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
    )
    op.create_index("ix_audit_logs_actor_id", "audit_logs", ["actor_id"], unique=False)
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"], unique=False)

    op.create_table(
        "outbox_events",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("aggregate_type", sa.String(length=128), nullable=False),
        sa.Column("aggregate_id", sa.String(length=128), nullable=False),
        sa.Column("event_type", sa.String(length=128), nullable=False),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("status", outbox_status_enum, nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("retries", sa.Integer(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
    )
    op.create_index("ix_outbox_events_aggregate_type", "outbox_events", ["aggregate_type"], unique=False)
    op.create_index("ix_outbox_events_aggregate_id", "outbox_events", ["aggregate_id"], unique=False)
    op.create_index("ix_outbox_events_event_type", "outbox_events", ["event_type"], unique=False)
    op.create_index("ix_outbox_events_status", "outbox_events", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_outbox_events_status", table_name="outbox_events")
    op.drop_index("ix_outbox_events_event_type", table_name="outbox_events")
    op.drop_index("ix_outbox_events_aggregate_id", table_name="outbox_events")
    op.drop_index("ix_outbox_events_aggregate_type", table_name="outbox_events")
    op.drop_table("outbox_events")

    op.drop_index("ix_audit_logs_action", table_name="audit_logs")
    op.drop_index("ix_audit_logs_actor_id", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.execute("ALTER TABLE bookings DROP CONSTRAINT IF EXISTS ex_bookings_no_overlap")
    op.drop_index("ix_bookings_payment_order_id", table_name="bookings")
    op.drop_index("ix_bookings_status", table_name="bookings")
    op.drop_index("ix_bookings_lesson_date", table_name="bookings")
    op.drop_index("ix_bookings_student_id", table_name="bookings")
    op.drop_index("ix_bookings_tutor_id", table_name="bookings")
    op.drop_table("bookings")

    op.drop_index("ix_availability_windows_tutor_id", table_name="availability_windows")
    op.drop_table("availability_windows")

    op.drop_table("tutor_profiles")
