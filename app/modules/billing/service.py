"""Billing business logic layer: checkout and capture of lesson payments."""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_db_session
from app.core.enums import BookingStatusEnum, LessonTypeEnum, PaymentStatusEnum, RoleEnum
from app.core.metrics import track_booking_operation
from app.modules.audit.repository import AuditRepository
from app.modules.billing.gateway import PayPalClient, build_paypal_client
from app.modules.billing.schemas import CheckoutRead
from app.modules.booking.models import Booking
from app.modules.booking.repository import BookingRepository
from app.modules.identity.schemas import Actor
from app.modules.tutors.repository import TutorsRepository
from app.modules.video.service import VideoRoomService, build_video_room_service
from app.shared.exceptions import (
    BusinessRuleException,
    ExternalServiceException,
    InvalidTransitionException,
    NotFoundException,
    PaymentFailedException,
    UnauthorizedException,
)

settings = get_settings()
logger = logging.getLogger(__name__)


class BillingService:
    """Billing domain service."""

    def __init__(
        self,
        booking_repository: BookingRepository,
        tutors_repository: TutorsRepository,
        audit_repository: AuditRepository,
        gateway: PayPalClient | None,
        video_rooms: VideoRoomService,
    ) -> None:
        self.booking_repository = booking_repository
        self.tutors_repository = tutors_repository
        self.audit_repository = audit_repository
        self.gateway = gateway
        self.video_rooms = video_rooms

    def _require_gateway(self) -> PayPalClient:
        if self.gateway is None:
            raise BusinessRuleException("Online payments are not configured")
        return self.gateway

    async def _get_student_pending_booking(self, booking_id: UUID, actor: Actor) -> Booking:
        booking = await self.booking_repository.get_booking_by_id(booking_id, for_update=True)
        if booking is None:
            raise NotFoundException("Booking not found")
        if actor.role != RoleEnum.STUDENT or booking.student_id != actor.id:
            raise UnauthorizedException("Only the booking student can pay for it")
        if booking.status != BookingStatusEnum.PENDING:
            raise InvalidTransitionException("Only pending bookings accept payment")
        if booking.payment_status == PaymentStatusEnum.COMPLETED:
            raise InvalidTransitionException("Booking is already paid")
        return booking

    async def _lesson_description(self, booking: Booking) -> str:
        profile = await self.tutors_repository.get_profile_by_user_id(booking.tutor_id)
        tutor_name = profile.display_name if profile is not None else "your tutor"
        kind = "Trial" if booking.lesson_type == LessonTypeEnum.TRIAL else "Regular"
        return f"{kind} lesson with {tutor_name} ({booking.duration_minutes} min)"

    @track_booking_operation("checkout")
    async def start_checkout(self, booking_id: UUID, actor: Actor, now: datetime) -> CheckoutRead:
        """Create a provider order for a pending booking.

        When the provider refuses, the booking is cancelled so its interval is
        released, and the error is raised.
        """
        booking = await self._get_student_pending_booking(booking_id, actor)
        if booking.price <= 0:
            raise BusinessRuleException("Free lessons do not need payment")

        gateway = self._require_gateway()
        if booking.payment_order_id:
            return CheckoutRead(
                booking_id=booking.id,
                order_id=booking.payment_order_id,
                amount=booking.price,
                currency=gateway.currency,
            )

        description = await self._lesson_description(booking)
        try:
            order_id = await gateway.create_order(str(booking.id), description, booking.price)
        except ExternalServiceException:
            await self.booking_repository.set_status(
                booking,
                BookingStatusEnum.CANCELLED,
                payment_status=PaymentStatusEnum.FAILED,
                cancelled_at=now,
                cancellation_reason="Payment order could not be created",
            )
            await self.audit_repository.record_booking_event(
                booking.id,
                "booking.payment.failed",
                {"booking_id": str(booking.id), "stage": "checkout"},
            )
            await self.booking_repository.commit()
            raise

        booking.payment_order_id = order_id
        await self.booking_repository.save(booking)
        await self.audit_repository.create_audit_log(
            actor_id=actor.id,
            action="billing.checkout.create",
            entity_type="booking",
            entity_id=str(booking.id),
            payload={"order_id": order_id, "amount": str(booking.price)},
        )
        return CheckoutRead(
            booking_id=booking.id,
            order_id=order_id,
            amount=booking.price,
            currency=gateway.currency,
        )

    @track_booking_operation("capture")
    async def capture_payment(
        self,
        booking_id: UUID,
        order_id: str,
        actor: Actor,
        now: datetime,
    ) -> Booking:
        """Capture the order and confirm the booking when the provider reports completion."""
        booking = await self._get_student_pending_booking(booking_id, actor)
        if booking.payment_order_id != order_id:
            raise BusinessRuleException("Payment order does not belong to this booking")

        result = await self._require_gateway().capture_order(order_id)
        if not result.completed:
            await self.booking_repository.set_status(
                booking,
                BookingStatusEnum.PENDING,
                payment_status=PaymentStatusEnum.FAILED,
            )
            await self.audit_repository.record_booking_event(
                booking.id,
                "booking.payment.failed",
                {
                    "booking_id": str(booking.id),
                    "stage": "capture",
                    "provider_status": result.status,
                },
            )
            await self.booking_repository.commit()
            logger.warning("Capture of order %s returned %s", order_id, result.status)
            raise PaymentFailedException("Payment was not completed. Please try again.")

        await self.booking_repository.set_status(
            booking,
            BookingStatusEnum.CONFIRMED,
            payment_status=PaymentStatusEnum.COMPLETED,
            confirmed_at=now,
        )
        logger.info("Booking %s paid and confirmed", booking.id)
        await self.audit_repository.record_booking_event(
            booking.id,
            "booking.payment.captured",
            {
                "booking_id": str(booking.id),
                "order_id": order_id,
                "amount": str(booking.price),
            },
        )
        # the provider call must not hold the row lock or the open transaction
        await self.booking_repository.commit()
        await self.video_rooms.provision_for_booking(booking)
        return booking


async def get_billing_service(session: AsyncSession = Depends(get_db_session)) -> BillingService:
    """Dependency provider for billing service."""
    booking_repository = BookingRepository(session)
    return BillingService(
        booking_repository=booking_repository,
        tutors_repository=TutorsRepository(session),
        audit_repository=AuditRepository(session),
        gateway=build_paypal_client(),
        video_rooms=build_video_room_service(booking_repository),
    )
