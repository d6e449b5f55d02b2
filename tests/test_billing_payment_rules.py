from __future__ import annotations

import json
from datetime import time
from decimal import Decimal
from uuid import uuid4

import httpx
import pytest

from app.core.enums import BookingStatusEnum, PaymentStatusEnum, RoleEnum
from app.modules.billing.gateway import CaptureResult, PayPalClient, format_amount
from app.modules.billing.service import BillingService
from app.shared.exceptions import (
    BusinessRuleException,
    ExternalServiceException,
    InvalidTransitionException,
    PaymentFailedException,
    UnauthorizedException,
)
from tests.fakes import (
    FIXED_NOW,
    MONDAY,
    FakeAuditRepository,
    FakeBooking,
    FakeBookingRepository,
    FakeVideoRooms,
    make_actor,
)


class FakeGateway:
    currency = "USD"

    def __init__(self, *, order_id: str = "ORDER-1", capture_status: str = "COMPLETED", fail_create: bool = False):
        self.order_id = order_id
        self.capture_status = capture_status
        self.fail_create = fail_create
        self.created: list[tuple[str, str, Decimal]] = []

    async def create_order(self, reference_id: str, description: str, amount: Decimal) -> str:
        if self.fail_create:
            raise ExternalServiceException("Payment provider could not create the order")
        self.created.append((reference_id, description, amount))
        return self.order_id

    async def capture_order(self, order_id: str) -> CaptureResult:
        return CaptureResult(order_id=order_id, status=self.capture_status)


class FakeTutorsRepository:
    async def get_profile_by_user_id(self, user_id):
        return None


def pending_booking(student_id, **fields) -> FakeBooking:
    return FakeBooking(
        tutor_id=uuid4(),
        student_id=student_id,
        lesson_date=MONDAY,
        start_time=time(9, 0),
        end_time=time(10, 0),
        duration_minutes=60,
        price=Decimal("25.00"),
        status=BookingStatusEnum.PENDING,
        payment_status=PaymentStatusEnum.PENDING,
        **fields,
    )


def make_service(
    booking: FakeBooking,
    gateway: FakeGateway | None,
) -> tuple[BillingService, FakeBookingRepository, FakeAuditRepository, FakeVideoRooms]:
    booking_repo = FakeBookingRepository([booking])
    audit_repo = FakeAuditRepository()
    video_rooms = FakeVideoRooms(booking_repo)
    service = BillingService(
        booking_repository=booking_repo,
        tutors_repository=FakeTutorsRepository(),
        audit_repository=audit_repo,
        gateway=gateway,
        video_rooms=video_rooms,
    )
    return service, booking_repo, audit_repo, video_rooms


@pytest.mark.asyncio
async def test_checkout_creates_order_for_pending_booking() -> None:
    student_id = uuid4()
    booking = pending_booking(student_id)
    gateway = FakeGateway()
    service, _, audit_repo, _ = make_service(booking, gateway)

    checkout = await service.start_checkout(booking.id, make_actor(student_id), FIXED_NOW)

    assert checkout.order_id == "ORDER-1"
    assert checkout.amount == Decimal("25.00")
    assert booking.payment_order_id == "ORDER-1"
    assert gateway.created[0][0] == str(booking.id)
    assert gateway.created[0][1] == "Regular lesson with your tutor (60 min)"
    assert audit_repo.logs[0]["action"] == "billing.checkout.create"


@pytest.mark.asyncio
async def test_checkout_failure_cancels_booking_and_releases_interval() -> None:
    student_id = uuid4()
    booking = pending_booking(student_id)
    service, booking_repo, audit_repo, _ = make_service(booking, FakeGateway(fail_create=True))

    with pytest.raises(ExternalServiceException):
        await service.start_checkout(booking.id, make_actor(student_id), FIXED_NOW)

    assert booking.status == BookingStatusEnum.CANCELLED
    assert booking.payment_status == PaymentStatusEnum.FAILED
    assert booking_repo.commits == 1
    assert await booking_repo.list_active_bookings(booking.tutor_id, MONDAY) == []
    assert audit_repo.event_types() == ["booking.payment.failed"]


@pytest.mark.asyncio
async def test_checkout_requires_owner_and_configured_gateway() -> None:
    student_id = uuid4()
    booking = pending_booking(student_id)

    service, _, _, _ = make_service(booking, FakeGateway())
    with pytest.raises(UnauthorizedException):
        await service.start_checkout(booking.id, make_actor(uuid4()), FIXED_NOW)
    with pytest.raises(UnauthorizedException):
        await service.start_checkout(booking.id, make_actor(booking.tutor_id, RoleEnum.TUTOR), FIXED_NOW)

    service, _, _, _ = make_service(booking, None)
    with pytest.raises(BusinessRuleException):
        await service.start_checkout(booking.id, make_actor(student_id), FIXED_NOW)


@pytest.mark.asyncio
async def test_capture_completed_confirms_booking_and_provisions_room() -> None:
    student_id = uuid4()
    booking = pending_booking(student_id, payment_order_id="ORDER-1")
    service, booking_repo, audit_repo, video_rooms = make_service(booking, FakeGateway())

    captured = await service.capture_payment(booking.id, "ORDER-1", make_actor(student_id), FIXED_NOW)

    assert captured.status == BookingStatusEnum.CONFIRMED
    assert captured.payment_status == PaymentStatusEnum.COMPLETED
    assert captured.confirmed_at == FIXED_NOW
    assert audit_repo.event_types() == ["booking.payment.captured"]
    assert video_rooms.provisioned == [booking.id]
    assert video_rooms.commits_before == [1]
    assert booking_repo.row_locks == [booking.id]

    with pytest.raises(InvalidTransitionException):
        await service.capture_payment(booking.id, "ORDER-1", make_actor(student_id), FIXED_NOW)


@pytest.mark.asyncio
async def test_capture_not_completed_marks_payment_failed() -> None:
    student_id = uuid4()
    booking = pending_booking(student_id, payment_order_id="ORDER-1")
    service, booking_repo, audit_repo, video_rooms = make_service(
        booking,
        FakeGateway(capture_status="INSTRUMENT_DECLINED"),
    )

    with pytest.raises(PaymentFailedException):
        await service.capture_payment(booking.id, "ORDER-1", make_actor(student_id), FIXED_NOW)

    assert booking.status == BookingStatusEnum.PENDING
    assert booking.payment_status == PaymentStatusEnum.FAILED
    assert booking_repo.commits == 1
    assert audit_repo.events[0]["payload"]["provider_status"] == "INSTRUMENT_DECLINED"
    assert video_rooms.provisioned == []


@pytest.mark.asyncio
async def test_capture_rejects_foreign_order_id() -> None:
    student_id = uuid4()
    booking = pending_booking(student_id, payment_order_id="ORDER-1")
    service, _, _, _ = make_service(booking, FakeGateway())

    with pytest.raises(BusinessRuleException):
        await service.capture_payment(booking.id, "ORDER-2", make_actor(student_id), FIXED_NOW)


def test_amount_is_rendered_with_two_decimals() -> None:
    assert format_amount(Decimal("25")) == "25.00"
    assert format_amount(Decimal("12.5")) == "12.50"


@pytest.mark.asyncio
async def test_paypal_client_authenticates_then_creates_and_captures_order() -> None:
    seen: list[tuple[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path))
        if request.url.path == "/v1/oauth2/token":
            assert request.headers["Authorization"].startswith("Basic ")
            assert b"grant_type=client_credentials" in request.content
            return httpx.Response(200, json={"access_token": "token-1"})
        assert request.headers["Authorization"] == "Bearer token-1"
        if request.url.path == "/v2/checkout/orders":
            body = json.loads(request.content)
            assert body["intent"] == "CAPTURE"
            unit = body["purchase_units"][0]
            assert unit["reference_id"] == "booking-1"
            assert unit["amount"] == {"currency_code": "USD", "value": "13.00"}
            return httpx.Response(201, json={"id": "ORDER-9", "status": "CREATED"})
        if request.url.path == "/v2/checkout/orders/ORDER-9/capture":
            return httpx.Response(201, json={"id": "ORDER-9", "status": "COMPLETED"})
        return httpx.Response(404)

    client = PayPalClient(
        "client-id",
        "secret",
        base_url="https://paypal.test",
        currency="USD",
        transport=httpx.MockTransport(handler),
    )

    order_id = await client.create_order("booking-1", "Trial lesson", Decimal("13"))
    result = await client.capture_order(order_id)

    assert order_id == "ORDER-9"
    assert result.completed is True
    assert seen == [
        ("POST", "/v1/oauth2/token"),
        ("POST", "/v2/checkout/orders"),
        ("POST", "/v1/oauth2/token"),
        ("POST", "/v2/checkout/orders/ORDER-9/capture"),
    ]


@pytest.mark.asyncio
async def test_paypal_declined_capture_is_a_payment_outcome() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/oauth2/token":
            return httpx.Response(200, json={"access_token": "token-1"})
        return httpx.Response(422, json={"name": "INSTRUMENT_DECLINED"})

    client = PayPalClient("id", "secret", base_url="https://paypal.test", transport=httpx.MockTransport(handler))

    result = await client.capture_order("ORDER-1")

    assert result.completed is False
    assert result.status == "INSTRUMENT_DECLINED"


@pytest.mark.asyncio
async def test_paypal_errors_surface_as_external_service_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "boom"})

    client = PayPalClient("id", "secret", base_url="https://paypal.test", transport=httpx.MockTransport(handler))

    with pytest.raises(ExternalServiceException):
        await client.create_order("booking-1", "Regular lesson", Decimal("25"))
