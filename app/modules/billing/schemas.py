"""Billing schemas."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class CheckoutRead(BaseModel):
    """Provider order the student approves before capture."""

    booking_id: UUID
    order_id: str
    amount: Decimal
    currency: str


class CaptureRequest(BaseModel):
    order_id: str = Field(min_length=1, max_length=64)
