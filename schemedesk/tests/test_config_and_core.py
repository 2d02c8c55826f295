"""Config loaders, exception envelope, JSON log formatting and notification plumbing."""
from __future__ import annotations

import asyncio
import json
import logging
import os
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

from schemedesk.config import AppConfig, PaymentConfig, PostgresConfig
from schemedesk.core.exceptions import (
    ExternalServiceError,
    NotFoundError,
    ProjectError,
    ValidationError,
)
from schemedesk.core.logger import JsonFormatter, LoggerConfig, configure
from schemedesk.lifecycle import NotificationIntent, NotificationType, RecipientType
from schemedesk.services.notification_service import (
    DatabaseNotifier,
    NotificationService,
    deliver,
)


def _run(coro):
    return asyncio.run(coro)


class TestConfig(unittest.TestCase):
    def test_postgres_from_env(self):
        env = {"DATABASE_URL": "postgresql://db/schemedesk", "DB_POOL_SIZE": "3"}
        with patch.dict(os.environ, env, clear=False):
            cfg = PostgresConfig.from_env()
        self.assertEqual(cfg.url, "postgresql://db/schemedesk")
        self.assertEqual(cfg.pool_size, 3)

    def test_postgres_rejects_bad_url(self):
        with self.assertRaises(ValueError):
            PostgresConfig(url="mysql://db/x")

    def test_payment_requires_credentials(self):
        with patch.dict(os.environ, {"RAZORPAY_KEY_ID": "", "RAZORPAY_KEY_SECRET": ""}):
            with self.assertRaises(ValueError):
                PaymentConfig.from_env()

    def test_payment_from_env(self):
        env = {
            "RAZORPAY_KEY_ID": "rzp_live",
            "RAZORPAY_KEY_SECRET": "sec",
            "RAZORPAY_API_URL": "https://example.test/v1/",
            "PAYMENT_CURRENCY": "inr",
        }
        with patch.dict(os.environ, env):
            cfg = PaymentConfig.from_env()
        self.assertEqual(cfg.api_url, "https://example.test/v1")
        self.assertEqual(cfg.currency, "INR")

    def test_app_config_from_env(self):
        env = {"CORS_ORIGINS": "https://a.test, https://b.test", "RATE_LIMIT": "5/second"}
        with patch.dict(os.environ, env):
            cfg = AppConfig.from_env()
        self.assertEqual(cfg.cors_origins, ["https://a.test", "https://b.test"])
        self.assertEqual(cfg.rate_limit, "5/second")

    def test_app_config_validates_queue_limit(self):
        with self.assertRaises(ValueError):
            AppConfig(queue_default_limit=500)


class TestExceptions(unittest.TestCase):
    def test_defaults(self):
        err = NotFoundError("Order not found")
        self.assertEqual((err.code, err.http_status), ("NOT_FOUND", 404))
        self.assertEqual(str(err), "Order not found")

    def test_response_envelope(self):
        err = ValidationError("Cannot transition", details={"from_status": "PAID"})
        self.assertEqual(
            err.to_response(),
            {
                "success": False,
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Cannot transition",
                    "details": {"from_status": "PAID"},
                },
            },
        )

    def test_cause_kept_out_of_response(self):
        err = ExternalServiceError("Gateway down", cause=RuntimeError("timeout"))
        self.assertNotIn("cause", err.to_response()["error"])
        self.assertEqual(err.to_dict()["cause"], "timeout")
        self.assertIsInstance(err, ProjectError)


class TestLogger(unittest.TestCase):
    def test_json_formatter_copies_context(self):
        record = logging.LogRecord("schemedesk.x", logging.INFO, __file__, 1, "moved %s", ("o1",), None)
        record.order_id = "o1"
        record.to_status = "PAID"
        data = json.loads(JsonFormatter().format(record))
        self.assertEqual(data["message"], "moved o1")
        self.assertEqual(data["context"], {"order_id": "o1", "to_status": "PAID"})

    def test_configure_console_only(self):
        config = LoggerConfig(level="DEBUG", root_name="schemedesk-test", log_dir=None)
        configure(config)
        root = logging.getLogger("schemedesk-test")
        self.assertEqual(root.level, logging.DEBUG)
        self.assertEqual(len(root.handlers), 1)
        self.assertFalse(root.propagate)

    def test_with_overrides_ignores_none(self):
        config = LoggerConfig().with_overrides(level="WARNING", log_dir=None)
        self.assertEqual(config.level, "WARNING")
        self.assertIsNone(config.log_dir)


def _intent():
    return NotificationIntent(
        recipient_id=uuid4(),
        recipient_type=RecipientType.USER,
        type=NotificationType.ORDER_COMPLETED,
        title="Order Completed!",
        related_order_id=uuid4(),
    )


class _FailingSession:
    async def __aenter__(self):
        raise OSError("connection refused")

    async def __aexit__(self, *exc):
        return False


class TestNotifications(unittest.TestCase):
    def test_database_notifier_never_raises(self):
        notifier = DatabaseNotifier(lambda: _FailingSession())
        with self.assertLogs("schemedesk.services.notification_service", level="ERROR"):
            _run(notifier.enqueue(_intent()))

    def test_deliver_skips_missing_parts(self):
        notifier = SimpleNamespace(enqueue=AsyncMock())
        _run(deliver(None, _intent()))
        _run(deliver(notifier, None))
        notifier.enqueue.assert_not_awaited()

    def test_mark_read_unknown_notification(self):
        svc = NotificationService(MagicMock())
        svc._repo = MagicMock()
        svc._repo.mark_read = AsyncMock(return_value=False)
        with self.assertRaises(NotFoundError):
            _run(svc.mark_read(uuid4(), uuid4()))

    def test_list_clamps_limit(self):
        svc = NotificationService(MagicMock())
        svc._repo = MagicMock()
        svc._repo.list_for_recipient = AsyncMock(return_value=[])
        recipient = uuid4()
        _run(svc.list_for_recipient(recipient, RecipientType.ADMIN, limit=1000))
        svc._repo.list_for_recipient.assert_awaited_once_with(recipient, "ADMIN", limit=100)


if __name__ == "__main__":
    unittest.main()
