"""
schemedesk.config.payments – Razorpay gateway credentials and HTTP settings.

Env vars: RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET, RAZORPAY_WEBHOOK_SECRET,
         RAZORPAY_API_URL, RAZORPAY_TIMEOUT, PAYMENT_CURRENCY.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PaymentConfig:
    key_id: str
    key_secret: str
    webhook_secret: Optional[str] = None
    api_url: str = "https://api.razorpay.com/v1"
    timeout: int = 15
    currency: str = "INR"

    def __post_init__(self) -> None:
        if not self.key_id or not self.key_id.strip():
            raise ValueError("RAZORPAY_KEY_ID is required")
        if not self.key_secret or not self.key_secret.strip():
            raise ValueError("RAZORPAY_KEY_SECRET is required")
        url = (self.api_url or "").strip()
        if not (url.startswith("http://") or url.startswith("https://")):
            raise ValueError("RAZORPAY_API_URL must start with http:// or https://")
        if not isinstance(self.timeout, int) or self.timeout < 1:
            raise ValueError(f"timeout must be a positive integer, got {self.timeout!r}")
        if len(self.currency) != 3:
            raise ValueError(f"currency must be an ISO 4217 code, got {self.currency!r}")

    @classmethod
    def from_env(cls, **overrides: object) -> PaymentConfig:
        key_id = str(overrides.get("key_id") or os.environ.get("RAZORPAY_KEY_ID", "")).strip()
        key_secret = str(overrides.get("key_secret") or os.environ.get("RAZORPAY_KEY_SECRET", "")).strip()
        raw_webhook = overrides.get("webhook_secret") or os.environ.get("RAZORPAY_WEBHOOK_SECRET")
        webhook_secret = str(raw_webhook).strip() if raw_webhook else None
        api_url = str(overrides.get("api_url") or os.environ.get("RAZORPAY_API_URL", "https://api.razorpay.com/v1")).strip().rstrip("/")
        timeout = int(overrides.get("timeout") or os.environ.get("RAZORPAY_TIMEOUT", "15"))
        currency = str(overrides.get("currency") or os.environ.get("PAYMENT_CURRENCY", "INR")).strip().upper()
        return cls(
            key_id=key_id,
            key_secret=key_secret,
            webhook_secret=webhook_secret or None,
            api_url=api_url,
            timeout=timeout,
            currency=currency,
        )


def load_payment_config(**overrides: object) -> PaymentConfig:
    return PaymentConfig.from_env(**overrides)
