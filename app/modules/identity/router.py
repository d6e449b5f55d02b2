"""Identity API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.modules.identity.schemas import Actor, ActorRead
from app.modules.identity.service import get_current_actor

router = APIRouter(prefix="/identity", tags=["identity"])


@router.get("/me", response_model=ActorRead)
async def read_me(current_actor: Actor = Depends(get_current_actor)) -> ActorRead:
    """Return the party resolved from the bearer token."""
    return ActorRead(id=current_actor.id, role=current_actor.role, name=current_actor.name)
