"""Best-effort video room provisioning for confirmed bookings."""

from __future__ import annotations

import logging
from datetime import timedelta

from app.core.config import get_settings
from app.modules.booking.lifecycle import booking_end, booking_start
from app.modules.booking.models import Booking
from app.modules.booking.repository import BookingRepository
from app.modules.video.client import WherebyClient
from app.shared.exceptions import ExternalServiceException

settings = get_settings()
logger = logging.getLogger(__name__)


def room_name_prefix(booking: Booking) -> str:
    return f"lesson-{str(booking.id)[:8]}"


class VideoRoomService:
    """Attach a meeting room to a booking without ever failing the booking."""

    def __init__(
        self,
        booking_repository: BookingRepository,
        client: WherebyClient | None,
    ) -> None:
        self.booking_repository = booking_repository
        self.client = client

    async def provision_for_booking(self, booking: Booking) -> Booking:
        """Create a room for ``booking`` unless it already has one.

        Provider errors are logged and the booking is returned unchanged.
        """
        if booking.video_room_url:
            return booking
        if self.client is None:
            logger.info("Video provider not configured; booking %s has no room", booking.id)
            return booking

        end_at = booking_end(booking) + timedelta(minutes=settings.video_room_end_buffer_minutes)
        try:
            room = await self.client.create_meeting(
                room_name_prefix=room_name_prefix(booking),
                start_at=booking_start(booking),
                end_at=end_at,
            )
        except ExternalServiceException:
            logger.exception("Video room provisioning failed for booking %s", booking.id)
            return booking

        booking.video_room_url = room.room_url
        booking.video_host_url = room.host_room_url
        await self.booking_repository.save(booking)
        logger.info("Video room attached to booking %s", booking.id)
        return booking


def build_video_room_service(booking_repository: BookingRepository) -> VideoRoomService:
    """Build the service with a client only when an API key is configured."""
    client = WherebyClient(settings.whereby_api_key) if settings.whereby_api_key else None
    return VideoRoomService(booking_repository=booking_repository, client=client)
