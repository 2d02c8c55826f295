"""Payment flow: gateway order creation, checkout verification and webhooks.

The gateway is only ever trusted after an HMAC check. Every path that moves an
order to PAID goes through ``OrderService.confirm_paid``.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from schemedesk.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from schemedesk.infra.database.repositories.order import OrderRepository
from schemedesk.infra.database.repositories.scheme import SchemeRepository
from schemedesk.infra.payments.razorpay import RazorpayGateway
from schemedesk.services.order_service import OrderService, TransitionResult

logger = logging.getLogger(__name__)


def to_minor_units(amount: Decimal) -> int:
    """Rupees -> paise, rounding half up."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _section(value: Dict[str, Any], key: str) -> Dict[str, Any]:
    inner = value.get(key)
    return inner if isinstance(inner, dict) else {}


@dataclass(frozen=True)
class PaymentOrder:
    order_id: UUID
    gateway_order_id: str
    key_id: str
    amount: int
    currency: str
    scheme_name: str


class PaymentService:
    def __init__(
        self,
        session: AsyncSession,
        gateway: RazorpayGateway,
        orders: Optional[OrderService] = None,
    ) -> None:
        self._gateway = gateway
        self._order_repo = OrderRepository(session)
        self._scheme_repo = SchemeRepository(session)
        self._orders = orders or OrderService(self._order_repo)

    async def create_payment_order(
        self,
        user_id: UUID,
        scheme_id: UUID,
        terms_version: Optional[str] = None,
    ) -> PaymentOrder:
        scheme = await self._scheme_repo.get_by_id(scheme_id)
        if scheme is None:
            raise NotFoundError("Scheme not found", details={"scheme_id": str(scheme_id)})
        if not scheme.is_active:
            raise ValidationError("This scheme is not available")

        order = await self._order_repo.create_pending(
            user_id=user_id,
            scheme_id=scheme.id,
            payment_amount=scheme.service_fee,
            terms_version=terms_version,
        )
        amount = to_minor_units(scheme.service_fee)
        gateway_order = await self._gateway.create_order(
            amount=amount,
            receipt=str(order.id),
            notes={
                "userId": str(user_id),
                "schemeId": str(scheme.id),
                "orderId": str(order.id),
                "schemeName": scheme.name,
            },
        )
        gateway_order_id = gateway_order["id"]
        await self._order_repo.set_gateway_order_id(order.id, gateway_order_id)

        logger.info(
            "PaymentService: order %s awaiting payment (gateway order %s)",
            order.id, gateway_order_id,
            extra={"order_id": str(order.id)},
        )
        return PaymentOrder(
            order_id=order.id,
            gateway_order_id=gateway_order_id,
            key_id=self._gateway.key_id,
            amount=amount,
            currency=self._gateway.currency,
            scheme_name=scheme.name,
        )

    async def verify_payment(
        self,
        user_id: UUID,
        order_id: UUID,
        gateway_order_id: str,
        payment_id: str,
        signature: str,
    ) -> TransitionResult:
        """Checkout callback from the browser: signature, ownership, then PAID."""
        if not self._gateway.verify_payment_signature(gateway_order_id, payment_id, signature):
            raise ValidationError("Payment verification failed")

        order = await self._order_repo.get_order(order_id)
        if order is None:
            raise NotFoundError("Order not found", details={"order_id": str(order_id)})
        if order.user_id != user_id:
            raise ForbiddenError("Unauthorized")
        if order.gateway_order_id and order.gateway_order_id != gateway_order_id:
            raise ValidationError(
                "Payment does not belong to this order",
                details={"order_id": str(order_id)},
            )

        return await self._orders.confirm_paid(order_id, payment_id)

    async def handle_webhook(self, body: bytes, signature: Optional[str]) -> Dict[str, Any]:
        if not self._gateway.verify_webhook_signature(body, signature):
            logger.warning("PaymentService: webhook rejected, invalid signature")
            raise UnauthorizedError("Invalid signature")

        try:
            event = json.loads(body)
        except ValueError as exc:
            raise ValidationError("Malformed webhook payload") from exc
        if not isinstance(event, dict):
            raise ValidationError("Malformed webhook payload")

        event_type = event.get("event")
        entity = _section(_section(_section(event, "payload"), "payment"), "entity")
        raw_order_id = _section(entity, "notes").get("orderId")
        logger.info("PaymentService: webhook %s received", event_type)

        if event_type not in ("payment.captured", "payment.failed") or not raw_order_id:
            return {"received": True}

        try:
            order_id = UUID(str(raw_order_id))
        except ValueError:
            logger.warning("PaymentService: webhook %s carries bad order id %r", event_type, raw_order_id)
            return {"received": True}

        if event_type == "payment.captured":
            await self._orders.confirm_paid(order_id, entity.get("id") or "")
        else:
            logger.warning(
                "PaymentService: payment failed for order %s, order stays PENDING_PAYMENT",
                order_id,
                extra={"order_id": str(order_id), "payment_id": entity.get("id")},
            )
        return {"received": True}
