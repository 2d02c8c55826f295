"""Pydantic v2 schemas for the Payments API."""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class CreatePaymentOrderRequest(BaseModel):
    scheme_id: UUID
    terms_version: Optional[str] = Field(default=None, max_length=50)


class PaymentOrderResponse(BaseModel):
    order_id: UUID
    gateway_order_id: str
    key_id: str
    amount: int
    currency: str
    scheme_name: str


class VerifyPaymentRequest(BaseModel):
    order_id: UUID
    gateway_order_id: str = Field(..., min_length=1)
    payment_id: str = Field(..., min_length=1)
    signature: str = Field(..., min_length=1)


class VerifyPaymentResponse(BaseModel):
    order_id: UUID
    status: str
    message: str = "Payment successful! Your application is now being processed."
