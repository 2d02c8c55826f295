"""ProofService and DocumentService with mocked repositories."""
from __future__ import annotations

import asyncio
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from schemedesk.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from schemedesk.lifecycle import (
    Actor,
    AdminRole,
    NotificationType,
    OrderState,
    OrderStatus,
    Principal,
    RecipientType,
)
from schemedesk.services.document_service import DocumentService
from schemedesk.services.order_service import OrderService, TransitionResult
from schemedesk.services.proof_service import ProofService


def _run(coro):
    return asyncio.run(coro)


A1 = Actor(uuid4(), AdminRole.ADMIN)
A2 = Actor(uuid4(), AdminRole.ADMIN)


def _orders(state):
    orders = MagicMock()
    orders.load_state = AsyncMock(return_value=state)
    orders.transition_order_status = AsyncMock(
        return_value=TransitionResult(state.id, OrderStatus.PROOF_UPLOADED, state.assigned_to)
    )
    orders.get_order_for_principal = AsyncMock()
    return orders


def _state(status=OrderStatus.IN_PROGRESS, assigned_to=None):
    return OrderState(id=uuid4(), user_id=uuid4(), status=status, assigned_to=assigned_to)


class TestProofService(unittest.TestCase):
    def _svc(self, state):
        svc = ProofService(MagicMock(), _orders(state))
        svc._repo = MagicMock()
        return svc

    def test_register_proof_for_owned_order(self):
        state = _state(assigned_to=A1.id)
        svc = self._svc(state)
        svc._repo.create = AsyncMock(return_value=SimpleNamespace(id=uuid4()))
        _run(svc.register_proof(state.id, A1, file_key="proofs/1.pdf", proof_type="RECEIPT"))
        data = svc._repo.create.call_args.args[0]
        self.assertEqual(data["uploaded_by"], A1.id)
        self.assertEqual(data["file_url"], "")

    def test_register_proof_rejects_non_owner(self):
        state = _state(assigned_to=A1.id)
        svc = self._svc(state)
        svc._repo.create = AsyncMock()
        with self.assertRaises(ForbiddenError):
            _run(svc.register_proof(state.id, A2, file_key="k", proof_type="RECEIPT"))
        svc._repo.create.assert_not_awaited()

    def test_register_proof_rejects_unknown_type(self):
        svc = self._svc(_state())
        with self.assertRaises(ValidationError):
            _run(svc.register_proof(uuid4(), A1, file_key="k", proof_type="SELFIE"))

    def test_confirm_goes_through_lifecycle(self):
        state = _state(assigned_to=A1.id)
        svc = self._svc(state)
        proof_id = uuid4()
        svc._repo.get_by_id = AsyncMock(return_value=SimpleNamespace(id=proof_id, order_id=state.id))
        svc._repo.update = AsyncMock()

        result = _run(svc.confirm_proof(proof_id, "https://files/1.pdf", A1))

        self.assertEqual(result.status, OrderStatus.PROOF_UPLOADED)
        svc._orders.transition_order_status.assert_awaited_once_with(
            state.id, OrderStatus.PROOF_UPLOADED, A1,
        )
        svc._repo.update.assert_awaited_once_with(proof_id, {"file_url": "https://files/1.pdf"})

    def test_confirm_denied_leaves_proof_untouched(self):
        state = _state(assigned_to=A1.id)
        svc = self._svc(state)
        svc._orders.transition_order_status = AsyncMock(side_effect=ForbiddenError("no"))
        svc._repo.get_by_id = AsyncMock(return_value=SimpleNamespace(id=uuid4(), order_id=state.id))
        svc._repo.update = AsyncMock()
        with self.assertRaises(ForbiddenError):
            _run(svc.confirm_proof(uuid4(), "u", A2))
        svc._repo.update.assert_not_awaited()

    def test_additional_proof_on_proof_uploaded_order(self):
        state = _state(OrderStatus.PROOF_UPLOADED, assigned_to=A1.id)
        svc = self._svc(state)
        svc._repo.get_by_id = AsyncMock(return_value=SimpleNamespace(id=uuid4(), order_id=state.id))
        svc._repo.update = AsyncMock()
        result = _run(svc.confirm_proof(uuid4(), "u2", A1))
        self.assertEqual(result.status, OrderStatus.PROOF_UPLOADED)
        svc._orders.transition_order_status.assert_not_awaited()
        with self.assertRaises(ForbiddenError):
            _run(svc.confirm_proof(uuid4(), "u3", A2))

    def test_confirm_missing_proof(self):
        svc = self._svc(_state())
        svc._repo.get_by_id = AsyncMock(return_value=None)
        with self.assertRaises(NotFoundError):
            _run(svc.confirm_proof(uuid4(), "u", A1))


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    async def enqueue(self, intent):
        self.sent.append(intent)


class TestProofNotifications(unittest.TestCase):
    """confirm_proof with a real OrderService: the user hears about it only once the proof is stored."""

    def _svc(self, update):
        row = SimpleNamespace(
            id=uuid4(), user_id=uuid4(), status="IN_PROGRESS", assigned_to=A1.id, payment_id="pay_1",
        )
        store = SimpleNamespace(
            get_order=AsyncMock(return_value=row),
            conditional_update_order=AsyncMock(return_value=1),
        )
        self.notifier = RecordingNotifier()
        svc = ProofService(MagicMock(), OrderService(store, self.notifier))
        svc._repo = MagicMock()
        svc._repo.get_by_id = AsyncMock(return_value=SimpleNamespace(id=uuid4(), order_id=row.id))
        svc._repo.update = update
        return svc, row

    def test_failed_proof_write_sends_no_notification(self):
        svc, _ = self._svc(AsyncMock(side_effect=RuntimeError("flush failed")))
        with self.assertRaises(RuntimeError):
            _run(svc.confirm_proof(uuid4(), "https://files/1.pdf", A1))
        self.assertEqual(self.notifier.sent, [])

    def test_stored_proof_notifies_user(self):
        svc, row = self._svc(AsyncMock())
        result = _run(svc.confirm_proof(uuid4(), "https://files/1.pdf", A1))
        self.assertEqual(result.status, OrderStatus.PROOF_UPLOADED)
        self.assertEqual([n.type for n in self.notifier.sent], [NotificationType.PROOF_UPLOADED])
        self.assertEqual(self.notifier.sent[0].recipient_id, row.user_id)


class TestDocumentService(unittest.TestCase):
    def _svc(self, state, notifier=None):
        svc = DocumentService(MagicMock(), _orders(state), notifier)
        svc._repo = MagicMock()
        return svc

    def test_reject_requires_reason(self):
        svc = self._svc(_state(assigned_to=A1.id))
        with self.assertRaises(ValidationError):
            _run(svc.set_status(uuid4(), "REJECTED", A1, "   "))

    def test_reject_notifies_user(self):
        state = _state(assigned_to=A1.id)
        notifier = SimpleNamespace(enqueue=AsyncMock())
        svc = self._svc(state, notifier)
        doc = SimpleNamespace(id=uuid4(), order_id=state.id, doc_type="AADHAAR")
        svc._repo.get_by_id = AsyncMock(return_value=doc)
        svc._repo.update = AsyncMock(return_value=doc)

        _run(svc.set_status(doc.id, "rejected", A1, "Blurry scan"))

        values = svc._repo.update.call_args.args[1]
        self.assertEqual(values["status"], "REJECTED")
        self.assertEqual(values["rejection_reason"], "Blurry scan")
        intent = notifier.enqueue.call_args.args[0]
        self.assertEqual(intent.type, NotificationType.DOCUMENT_REJECTED)
        self.assertEqual(intent.recipient_id, state.user_id)
        self.assertIn("Blurry scan", intent.message)

    def test_verify_records_reviewer(self):
        state = _state(assigned_to=A1.id)
        notifier = SimpleNamespace(enqueue=AsyncMock())
        svc = self._svc(state, notifier)
        doc = SimpleNamespace(id=uuid4(), order_id=state.id, doc_type="PAN")
        svc._repo.get_by_id = AsyncMock(return_value=doc)
        svc._repo.update = AsyncMock(return_value=doc)

        _run(svc.set_status(doc.id, "VERIFIED", A1))

        values = svc._repo.update.call_args.args[1]
        self.assertEqual(values["verified_by"], A1.id)
        self.assertIsNone(values["rejection_reason"])
        notifier.enqueue.assert_not_awaited()

    def test_non_owner_cannot_review(self):
        state = _state(assigned_to=A1.id)
        svc = self._svc(state)
        svc._repo.get_by_id = AsyncMock(return_value=SimpleNamespace(id=uuid4(), order_id=state.id))
        svc._repo.update = AsyncMock()
        with self.assertRaises(ForbiddenError):
            _run(svc.set_status(uuid4(), "VERIFIED", A2))
        svc._repo.update.assert_not_awaited()

    def test_unknown_status(self):
        svc = self._svc(_state())
        with self.assertRaises(ValidationError):
            _run(svc.set_status(uuid4(), "LOST", A1))

    def test_add_document_only_for_own_live_order(self):
        state = _state(OrderStatus.PAID)
        svc = self._svc(state)
        svc._repo.create = AsyncMock(return_value=SimpleNamespace(id=uuid4()))
        owner = Principal(state.user_id, RecipientType.USER)
        _run(svc.add_document(state.id, owner, doc_type="AADHAAR", file_key="k", file_url="u"))
        self.assertEqual(svc._repo.create.call_args.args[0]["status"], "UPLOADED")

        with self.assertRaises(ForbiddenError):
            _run(svc.add_document(
                state.id, Principal(uuid4(), RecipientType.USER),
                doc_type="AADHAAR", file_key="k", file_url="u",
            ))

    def test_add_document_to_closed_order(self):
        state = _state(OrderStatus.CANCELLED)
        svc = self._svc(state)
        owner = Principal(state.user_id, RecipientType.USER)
        with self.assertRaises(ValidationError):
            _run(svc.add_document(state.id, owner, doc_type="PAN", file_key="k", file_url="u"))


if __name__ == "__main__":
    unittest.main()
