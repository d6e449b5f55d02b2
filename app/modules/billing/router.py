"""Billing API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from app.core.enums import RoleEnum
from app.modules.billing.schemas import CaptureRequest, CheckoutRead
from app.modules.billing.service import BillingService, get_billing_service
from app.modules.booking.router import to_view
from app.modules.booking.schemas import BookingView
from app.modules.identity.schemas import Actor
from app.modules.identity.service import require_roles
from app.shared.utils import local_now

router = APIRouter(prefix="/billing", tags=["billing"])


@router.post("/bookings/{booking_id}/checkout", response_model=CheckoutRead)
async def start_checkout(
    booking_id: UUID,
    service: BillingService = Depends(get_billing_service),
    current_actor: Actor = Depends(require_roles(RoleEnum.STUDENT)),
) -> CheckoutRead:
    """Create payment order for a pending booking."""
    return await service.start_checkout(booking_id, current_actor, local_now())


@router.post("/bookings/{booking_id}/capture", response_model=BookingView)
async def capture_payment(
    booking_id: UUID,
    payload: CaptureRequest,
    service: BillingService = Depends(get_billing_service),
    current_actor: Actor = Depends(require_roles(RoleEnum.STUDENT)),
) -> BookingView:
    """Capture approved order and confirm booking."""
    now = local_now()
    booking = await service.capture_payment(booking_id, payload.order_id, current_actor, now)
    return to_view(booking, now)
