"""HTTP-level tests for the FastAPI app with faked services and authenticator."""
from __future__ import annotations

import asyncio
import unittest
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from fastapi.testclient import TestClient

from schemedesk.api.dependencies import get_notifier, get_order_service, get_session
from schemedesk.api.main import create_app
from schemedesk.api.routers import payments
from schemedesk.config import AppConfig
from schemedesk.core.exceptions import ForbiddenError, ValidationError
from schemedesk.lifecycle import (
    AdminRole,
    NotificationIntent,
    NotificationType,
    OrderStatus,
    Principal,
    RecipientType,
)
from schemedesk.services.order_service import QueuePage, TransitionResult

USER = Principal(uuid4(), RecipientType.USER)
ADMIN = Principal(uuid4(), RecipientType.ADMIN, AdminRole.ADMIN)


class FakeAuthenticator:
    tokens = {"user-token": USER, "admin-token": ADMIN}

    async def resolve(self, token):
        return self.tokens.get(token)


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.app = create_app(AppConfig(rate_limit="1000/minute"), authenticator=FakeAuthenticator())
        self.svc = MagicMock()
        self.app.dependency_overrides[get_order_service] = lambda: self.svc
        self.client = TestClient(self.app)


class TestAuthAndEnvelope(ApiTestCase):
    def test_health(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ok"})

    def test_missing_token(self):
        resp = self.client.get("/api/v1/orders")
        self.assertEqual(resp.status_code, 401)
        body = resp.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["error"]["code"], "UNAUTHORIZED")

    def test_unknown_token(self):
        resp = self.client.get("/api/v1/orders", headers=_auth("nope"))
        self.assertEqual(resp.status_code, 401)

    def test_citizen_cannot_use_admin_routes(self):
        resp = self.client.get("/api/v1/orders/admin/queue", headers=_auth("user-token"))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"]["message"], "Admin access required")


class TestOrderRoutes(ApiTestCase):
    def test_transition_success(self):
        order_id = uuid4()
        self.svc.transition_order_status = AsyncMock(
            return_value=TransitionResult(order_id, OrderStatus.IN_PROGRESS, ADMIN.id)
        )
        resp = self.client.patch(
            f"/api/v1/orders/{order_id}/status",
            json={"status": "IN_PROGRESS"},
            headers=_auth("admin-token"),
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "IN_PROGRESS")
        self.assertEqual(resp.json()["assigned_to"], str(ADMIN.id))
        args = self.svc.transition_order_status.call_args.args
        self.assertEqual(args[0], order_id)
        self.assertEqual(args[2].id, ADMIN.id)

    def test_forbidden_renders_details(self):
        other = uuid4()
        self.svc.transition_order_status = AsyncMock(
            side_effect=ForbiddenError(
                "This order is assigned to another admin",
                details={"assigned_to": str(other)},
            )
        )
        resp = self.client.patch(
            f"/api/v1/orders/{uuid4()}/status",
            json={"status": "CANCELLED"},
            headers=_auth("admin-token"),
        )
        self.assertEqual(resp.status_code, 403)
        error = resp.json()["error"]
        self.assertEqual(error["code"], "FORBIDDEN")
        self.assertEqual(error["details"], {"assigned_to": str(other)})

    def test_double_completion(self):
        self.svc.complete_order = AsyncMock(
            side_effect=ValidationError(
                "Order is already completed", details={"reason": "already_completed"},
            )
        )
        resp = self.client.post(f"/api/v1/orders/{uuid4()}/complete", headers=_auth("admin-token"))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"]["message"], "Order is already completed")

    def test_admin_queue_passes_pagination(self):
        row = {
            "id": uuid4(),
            "user_id": uuid4(),
            "user_name": "Asha",
            "user_phone": "+919800000000",
            "scheme_id": uuid4(),
            "scheme_name": "PM Kisan",
            "payment_amount": Decimal("99.00"),
            "status": "PAID",
            "created_at": None,
            "payment_timestamp": None,
            "assigned_to": None,
        }
        self.svc.list_admin_queue = AsyncMock(
            return_value=QueuePage(items=[row], total=1, page=1, limit=100, total_pages=1)
        )
        resp = self.client.get(
            "/api/v1/orders/admin/queue?status=PAID&page=0&limit=500",
            headers=_auth("admin-token"),
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["items"][0]["scheme_name"], "PM Kisan")
        self.svc.list_admin_queue.assert_awaited_once_with(status="PAID", page=0, limit=500)

    def test_get_order_for_owner(self):
        order = SimpleNamespace(
            id=uuid4(),
            user_id=USER.id,
            scheme_id=uuid4(),
            status="PAID",
            payment_amount=Decimal("99.00"),
            payment_id="pay_1",
            payment_timestamp=None,
            assigned_to=None,
            admin_notes=None,
            created_at=None,
            updated_at=None,
        )
        self.svc.get_order_for_principal = AsyncMock(return_value=order)
        resp = self.client.get(f"/api/v1/orders/{order.id}", headers=_auth("user-token"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["payment_id"], "pay_1")
        self.assertIs(self.svc.get_order_for_principal.call_args.args[1], USER)

    def test_list_my_orders(self):
        self.svc.list_user_orders = AsyncMock(return_value=[])
        resp = self.client.get("/api/v1/orders", headers=_auth("user-token"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), [])
        self.svc.list_user_orders.assert_awaited_once_with(USER.id)


class TestPaymentRoutes(ApiTestCase):
    def test_webhook_is_public_and_forwards_raw_body(self):
        payment_svc = MagicMock()
        payment_svc.handle_webhook = AsyncMock(return_value={"received": True})
        self.app.dependency_overrides[payments._service] = lambda: payment_svc
        resp = self.client.post(
            "/api/v1/payments/webhook",
            content=b'{"event":"payment.captured"}',
            headers={"X-Razorpay-Signature": "abc"},
        )
        self.assertEqual(resp.status_code, 200)
        payment_svc.handle_webhook.assert_awaited_once_with(b'{"event":"payment.captured"}', "abc")

    def test_payments_unconfigured(self):
        async def fake_session():
            yield MagicMock()

        self.app.dependency_overrides[get_session] = fake_session
        resp = self.client.post(
            "/api/v1/payments/create-order",
            json={"scheme_id": str(uuid4())},
            headers=_auth("user-token"),
        )
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["error"]["code"], "CONFIGURATION_ERROR")


class TestRequestNotifications(unittest.TestCase):
    """Notifications raised during a request leave only after it succeeded."""

    def setUp(self):
        self.sent = []

        async def enqueue(intent):
            self.sent.append(intent)

        self.request = SimpleNamespace(
            app=SimpleNamespace(state=SimpleNamespace(notifier=SimpleNamespace(enqueue=enqueue)))
        )
        self.intent = NotificationIntent(
            uuid4(), RecipientType.USER, NotificationType.ORDER_COMPLETED, "Order Completed!",
        )

    def test_flushed_after_success(self):
        async def scenario():
            deps = get_notifier(self.request)
            outbox = await deps.__anext__()
            await outbox.enqueue(self.intent)
            self.assertEqual(self.sent, [])
            with self.assertRaises(StopAsyncIteration):
                await deps.__anext__()

        asyncio.run(scenario())
        self.assertEqual(self.sent, [self.intent])

    def test_dropped_when_request_fails(self):
        async def scenario():
            deps = get_notifier(self.request)
            outbox = await deps.__anext__()
            await outbox.enqueue(self.intent)
            with self.assertRaises(RuntimeError):
                await deps.athrow(RuntimeError("commit failed"))

        asyncio.run(scenario())
        self.assertEqual(self.sent, [])

    def test_no_app_notifier(self):
        async def scenario():
            deps = get_notifier(SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace())))
            self.assertIsNone(await deps.__anext__())

        asyncio.run(scenario())


if __name__ == "__main__":
    unittest.main()
