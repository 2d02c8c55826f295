"""Payments API: create gateway order, verify checkout, receive gateway webhooks."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from schemedesk.api.dependencies import (
    get_gateway,
    get_order_service,
    get_principal,
    get_session,
)
from schemedesk.api.schemas.payments import (
    CreatePaymentOrderRequest,
    PaymentOrderResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from schemedesk.infra.payments.razorpay import RazorpayGateway
from schemedesk.lifecycle.types import Principal
from schemedesk.services.order_service import OrderService
from schemedesk.services.payment_service import PaymentService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/payments", tags=["payments"])


def _service(
    session: AsyncSession = Depends(get_session),
    gateway: RazorpayGateway = Depends(get_gateway),
    orders: OrderService = Depends(get_order_service),
) -> PaymentService:
    return PaymentService(session, gateway, orders)


@router.post("/create-order", response_model=PaymentOrderResponse)
async def create_payment_order(
    body: CreatePaymentOrderRequest,
    principal: Principal = Depends(get_principal),
    svc: PaymentService = Depends(_service),
):
    created = await svc.create_payment_order(principal.id, body.scheme_id, body.terms_version)
    return PaymentOrderResponse(
        order_id=created.order_id,
        gateway_order_id=created.gateway_order_id,
        key_id=created.key_id,
        amount=created.amount,
        currency=created.currency,
        scheme_name=created.scheme_name,
    )


@router.post("/verify", response_model=VerifyPaymentResponse)
async def verify_payment(
    body: VerifyPaymentRequest,
    principal: Principal = Depends(get_principal),
    svc: PaymentService = Depends(_service),
):
    result = await svc.verify_payment(
        principal.id, body.order_id, body.gateway_order_id, body.payment_id, body.signature,
    )
    return VerifyPaymentResponse(order_id=result.order_id, status=result.status.value)


@router.post("/webhook")
async def payment_webhook(request: Request, svc: PaymentService = Depends(_service)):
    """Gateway callback. Authenticated by the X-Razorpay-Signature HMAC, not a bearer token."""
    body = await request.body()
    return await svc.handle_webhook(body, request.headers.get("X-Razorpay-Signature"))
