"""Audit log and outbox persistence."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import OutboxStatusEnum
from app.modules.audit.models import AuditLog, OutboxEvent

logger = logging.getLogger(__name__)

BOOKING_AGGREGATE = "booking"


class AuditRepository:
    """Writes audit entries and outbox events in the caller's transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_audit_log(
        self,
        actor_id: UUID | None,
        action: str,
        entity_type: str,
        entity_id: str | None,
        payload: dict,
    ) -> AuditLog:
        log = AuditLog(
            actor_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            payload=payload,
        )
        self.session.add(log)
        await self.session.flush()
        return log

    async def record_booking_event(self, booking_id: UUID, event_type: str, payload: dict) -> OutboxEvent:
        """Queue a booking event; it becomes visible only if the booking change commits."""
        event = OutboxEvent(
            aggregate_type=BOOKING_AGGREGATE,
            aggregate_id=str(booking_id),
            event_type=event_type,
            payload=payload,
            status=OutboxStatusEnum.PENDING,
        )
        self.session.add(event)
        await self.session.flush()
        logger.debug("Outbox event %s queued for booking %s", event_type, booking_id)
        return event
