"""Identity schemas."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from pydantic import BaseModel

from app.core.enums import RoleEnum


@dataclass(frozen=True, slots=True)
class Actor:
    """Party acting on the API, resolved from the bearer token."""

    id: UUID
    role: RoleEnum
    name: str | None = None


class ActorRead(BaseModel):
    """Current actor response schema."""

    id: UUID
    role: RoleEnum
    name: str | None
