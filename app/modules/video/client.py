"""Whereby REST client for lesson video rooms."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

import httpx

from app.core.config import get_settings
from app.shared.exceptions import ExternalServiceException

settings = get_settings()
logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VideoRoom:
    """Participant and host links of a provisioned meeting."""

    room_url: str
    host_room_url: str | None
    meeting_id: str | None = None


def provider_timestamp(value: datetime) -> str:
    """Render ``value`` as UTC ISO-8601 with a ``Z`` suffix; naive values are read as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class WherebyClient:
    """Thin async wrapper over the Whereby meetings API."""

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = (base_url or settings.whereby_api_base_url).rstrip("/")
        self.timeout_seconds = timeout_seconds or settings.external_api_timeout_seconds
        self.transport = transport

    async def create_meeting(
        self,
        room_name_prefix: str,
        start_at: datetime,
        end_at: datetime,
    ) -> VideoRoom:
        payload = {
            "startDate": provider_timestamp(start_at),
            "endDate": provider_timestamp(end_at),
            "roomNamePrefix": room_name_prefix,
            "roomMode": "normal",
            "fields": ["hostRoomUrl"],
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                transport=self.transport,
            ) as client:
                response = await client.post("/meetings", json=payload, headers=headers)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Whereby meeting request failed: %s", exc)
            raise ExternalServiceException("Video room provider is unavailable") from exc

        data = response.json()
        room_url = data.get("roomUrl")
        if not room_url:
            raise ExternalServiceException("Video room provider returned no room URL")
        return VideoRoom(
            room_url=room_url,
            host_room_url=data.get("hostRoomUrl"),
            meeting_id=data.get("meetingId"),
        )
