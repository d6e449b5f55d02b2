"""PayPal Orders v2 client."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

import httpx

from app.core.config import get_settings
from app.shared.exceptions import ExternalServiceException

settings = get_settings()
logger = logging.getLogger(__name__)

CAPTURE_COMPLETED = "COMPLETED"


@dataclass(frozen=True, slots=True)
class CaptureResult:
    order_id: str
    status: str

    @property
    def completed(self) -> bool:
        return self.status == CAPTURE_COMPLETED


def format_amount(amount: Decimal) -> str:
    """Render amount with exactly two decimals as the provider expects."""
    return f"{Decimal(amount):.2f}"


class PayPalClient:
    """Create and capture checkout orders with client-credentials auth."""

    def __init__(
        self,
        client_id: str,
        secret: str,
        base_url: str | None = None,
        currency: str | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.client_id = client_id
        self.secret = secret
        self.base_url = (base_url or settings.paypal_api_base_url).rstrip("/")
        self.currency = currency or settings.paypal_currency
        self.timeout_seconds = timeout_seconds or settings.external_api_timeout_seconds
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            transport=self.transport,
        )

    async def _access_token(self, client: httpx.AsyncClient) -> str:
        response = await client.post(
            "/v1/oauth2/token",
            data={"grant_type": "client_credentials"},
            auth=(self.client_id, self.secret),
        )
        response.raise_for_status()
        return response.json()["access_token"]

    async def create_order(self, reference_id: str, description: str, amount: Decimal) -> str:
        """Create a CAPTURE order and return its provider id."""
        payload = {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "reference_id": reference_id,
                    "description": description,
                    "amount": {
                        "currency_code": self.currency,
                        "value": format_amount(amount),
                    },
                },
            ],
        }
        try:
            async with self._client() as client:
                token = await self._access_token(client)
                response = await client.post(
                    "/v2/checkout/orders",
                    json=payload,
                    headers={"Authorization": f"Bearer {token}"},
                )
                response.raise_for_status()
                order_id = response.json()["id"]
        except (httpx.HTTPError, KeyError) as exc:
            logger.warning("PayPal order creation failed for %s: %s", reference_id, exc)
            raise ExternalServiceException("Payment provider could not create the order") from exc

        logger.info("PayPal order %s created for %s", order_id, reference_id)
        return order_id

    async def capture_order(self, order_id: str) -> CaptureResult:
        """Capture an approved order; the provider status decides success."""
        try:
            async with self._client() as client:
                token = await self._access_token(client)
                response = await client.post(
                    f"/v2/checkout/orders/{order_id}/capture",
                    headers={
                        "Authorization": f"Bearer {token}",
                        "Content-Type": "application/json",
                    },
                )
                if response.status_code == httpx.codes.UNPROCESSABLE_ENTITY:
                    # declined or otherwise unprocessable orders are a payment outcome
                    reason = response.json().get("name", "UNPROCESSABLE_ENTITY")
                    return CaptureResult(order_id=order_id, status=str(reason))
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            logger.warning("PayPal capture failed for order %s: %s", order_id, exc)
            raise ExternalServiceException("Payment provider could not capture the order") from exc

        return CaptureResult(order_id=order_id, status=str(data.get("status", "")))


def build_paypal_client() -> PayPalClient | None:
    if not (settings.paypal_client_id and settings.paypal_secret):
        return None
    return PayPalClient(settings.paypal_client_id, settings.paypal_secret)
