"""Razorpay adapter: order creation over HTTP and HMAC signature checks.

Signature scheme
----------------
- Checkout callback: ``hex(HMAC_SHA256(key_secret, "<gateway_order_id>|<payment_id>"))``
- Webhook: ``hex(HMAC_SHA256(webhook_secret, raw_request_body))`` in the
  ``X-Razorpay-Signature`` header.

Both comparisons use ``hmac.compare_digest`` on bytes.
"""
from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Any, Dict, Optional

import httpx

from schemedesk.config.payments import PaymentConfig
from schemedesk.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


def _hex_hmac(secret: str, body: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def _signature_matches(expected: str, signature: Optional[str]) -> bool:
    # Compared as bytes: client-supplied signatures may carry non-ASCII text.
    supplied = (signature or "").encode("utf-8", "surrogatepass")
    return hmac.compare_digest(expected.encode("ascii"), supplied)


class RazorpayGateway:
    """Thin async client for the parts of the Razorpay API this service needs."""

    def __init__(
        self,
        config: PaymentConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport

    @property
    def key_id(self) -> str:
        return self._config.key_id

    @property
    def currency(self) -> str:
        return self._config.currency

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.api_url,
            auth=(self._config.key_id, self._config.key_secret),
            timeout=self._config.timeout,
            transport=self._transport,
        )

    async def create_order(
        self,
        *,
        amount: int,
        receipt: str,
        notes: Optional[Dict[str, str]] = None,
        currency: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a gateway order. ``amount`` is in the smallest currency unit (paise)."""
        payload = {
            "amount": amount,
            "currency": currency or self._config.currency,
            "receipt": receipt,
            "notes": notes or {},
        }
        try:
            async with self._client() as client:
                resp = await client.post("/orders", json=payload)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Razorpay: order creation for receipt %s failed with HTTP %d",
                receipt, exc.response.status_code,
            )
            raise ExternalServiceError("Failed to create payment order", cause=exc) from exc
        except httpx.HTTPError as exc:
            logger.warning("Razorpay: order creation for receipt %s failed: %s", receipt, exc)
            raise ExternalServiceError("Failed to create payment order", cause=exc) from exc

        logger.info("Razorpay: order %s created (amount=%d, receipt=%s)", data.get("id"), amount, receipt)
        return data

    def verify_payment_signature(
        self, gateway_order_id: str, payment_id: str, signature: str,
    ) -> bool:
        body = f"{gateway_order_id}|{payment_id}".encode("utf-8")
        expected = _hex_hmac(self._config.key_secret, body)
        valid = _signature_matches(expected, signature)
        if not valid:
            logger.warning(
                "Razorpay: invalid payment signature (order=%s payment=%s)",
                gateway_order_id, payment_id,
            )
        return valid

    def verify_webhook_signature(self, body: bytes, signature: Optional[str]) -> bool:
        secret = self._config.webhook_secret
        if not secret:
            logger.warning("Razorpay: webhook secret not configured, rejecting webhook")
            return False
        if not signature:
            return False
        return _signature_matches(_hex_hmac(secret, body), signature)
