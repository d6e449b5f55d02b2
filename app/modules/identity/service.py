"""Acting-party resolution from auth provider tokens."""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials

from app.core.enums import RoleEnum
from app.core.security import bearer_scheme, decode_token
from app.modules.identity.schemas import Actor
from app.shared.exceptions import UnauthorizedException


def actor_from_claims(claims: dict) -> Actor:
    """Build actor from decoded access token claims."""
    if claims.get("type") != "access":
        raise UnauthorizedException("Invalid access token")

    subject = claims.get("sub")
    if not subject:
        raise UnauthorizedException("Token subject is missing")

    try:
        actor_id = UUID(str(subject))
        role = RoleEnum(str(claims.get("role", "")).lower())
    except ValueError as exc:
        raise UnauthorizedException("Token claims are malformed") from exc

    name = claims.get("name")
    return Actor(id=actor_id, role=role, name=str(name) if name else None)


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> Actor:
    """Resolve currently authenticated party from bearer token."""
    return actor_from_claims(decode_token(credentials.credentials))


def require_roles(*roles: RoleEnum):
    """Dependency factory for role-based access."""

    async def _checker(current_actor: Actor = Depends(get_current_actor)) -> Actor:
        if current_actor.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Operation not permitted for your role",
            )
        return current_actor

    return _checker
