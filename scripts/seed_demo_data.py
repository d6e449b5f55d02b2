"""Seed idempotent demo data for local/non-production environments."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass
from datetime import time
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import SessionLocal, close_engine
from app.core.enums import RoleEnum
from app.core.security import create_access_token
from app.modules.scheduling.models import AvailabilityWindow
from app.modules.tutors.models import TutorProfile

DEMO_TUTOR_ID = UUID("6f1c1d3e-5a0b-4f7e-9a51-3d2b8c0e1a01")
DEMO_STUDENT_ID = UUID("0b7e4c2a-91d3-4c6f-8e25-7a4f9d1c2b02")

# Monday..Friday (0 = Sunday)
DEMO_WINDOW_DAYS = (1, 2, 3, 4, 5)
DEMO_WINDOWS = ((time(9, 0), time(12, 0)), (time(16, 0), time(20, 0)))

DEMO_TOKEN_TTL_MINUTES = 12 * 60


@dataclass(slots=True)
class SeedStats:
    tutor_profile_created: bool = False
    windows_created: int = 0


async def _ensure_tutor_profile(session: AsyncSession) -> bool:
    profile = await session.scalar(
        select(TutorProfile).where(TutorProfile.user_id == DEMO_TUTOR_ID),
    )
    if profile is None:
        session.add(
            TutorProfile(
                user_id=DEMO_TUTOR_ID,
                display_name="Demo Spanish Tutor",
                bio="Conversation practice and exam preparation for all levels.",
                hourly_rate=Decimal("25.00"),
                trial_rate=Decimal("10.00"),
                languages=["Spanish", "English"],
            ),
        )
        await session.flush()
        return True

    profile.hourly_rate = Decimal("25.00")
    profile.trial_rate = Decimal("10.00")
    await session.flush()
    return False


async def _ensure_demo_windows(session: AsyncSession) -> int:
    created = 0
    for day in DEMO_WINDOW_DAYS:
        for start_time, end_time in DEMO_WINDOWS:
            existing = await session.scalar(
                select(AvailabilityWindow).where(
                    AvailabilityWindow.tutor_id == DEMO_TUTOR_ID,
                    AvailabilityWindow.day_of_week == day,
                    AvailabilityWindow.start_time == start_time,
                    AvailabilityWindow.end_time == end_time,
                ),
            )
            if existing is not None:
                continue
            session.add(
                AvailabilityWindow(
                    tutor_id=DEMO_TUTOR_ID,
                    day_of_week=day,
                    start_time=start_time,
                    end_time=end_time,
                ),
            )
            created += 1

    await session.flush()
    return created


async def _run_seed(*, allow_production: bool) -> SeedStats:
    settings = get_settings()
    app_env = settings.app_env.strip().lower()
    if app_env in {"production", "prod"} and not allow_production:
        raise RuntimeError(
            "Refusing to seed demo data in production. "
            "Re-run with --allow-production only if you are absolutely sure.",
        )

    stats = SeedStats()

    async with SessionLocal() as session:
        try:
            stats.tutor_profile_created = await _ensure_tutor_profile(session)
            stats.windows_created = await _ensure_demo_windows(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise

    return stats


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Seed idempotent demo data for LinguaTutor (tutor profile, weekly windows).",
    )
    parser.add_argument(
        "--allow-production",
        action="store_true",
        help="Allow seeding even when APP_ENV is production/prod.",
    )
    return parser


def _print_summary(stats: SeedStats) -> None:
    tutor_token = create_access_token(
        str(DEMO_TUTOR_ID),
        expires_minutes=DEMO_TOKEN_TTL_MINUTES,
        role=RoleEnum.TUTOR.value,
        name="Demo Spanish Tutor",
    )
    student_token = create_access_token(
        str(DEMO_STUDENT_ID),
        expires_minutes=DEMO_TOKEN_TTL_MINUTES,
        role=RoleEnum.STUDENT.value,
        name="Demo Student",
    )
    print("Demo seed completed.")
    print(f"- Tutor profile created: {stats.tutor_profile_created}")
    print(f"- Availability windows created: {stats.windows_created}")
    print("")
    print("Demo bearer tokens (non-production only):")
    print(f"- tutor   {DEMO_TUTOR_ID}: {tutor_token}")
    print(f"- student {DEMO_STUDENT_ID}: {student_token}")


def main() -> int:
    parser = _build_parser()
    args = parser.parse_args()

    try:
        stats = asyncio.run(_run_seed(allow_production=args.allow_production))
    except Exception as exc:
        print(f"Demo seed failed: {exc}")
        return 1
    finally:
        asyncio.run(close_engine())

    _print_summary(stats)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
