"""SQL shape of the order store's compare-and-set and queue queries."""
from __future__ import annotations

import asyncio
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from sqlalchemy.dialects import postgresql

from schemedesk.infra.database.repositories.order import OrderRepository
from schemedesk.lifecycle import OrderPatch, OrderStatus


def _run(coro):
    return asyncio.run(coro)


def _sql(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


class TestConditionalUpdate(unittest.TestCase):
    def _repo(self, rowcount):
        session = MagicMock()
        session.execute = AsyncMock(return_value=SimpleNamespace(rowcount=rowcount))
        return OrderRepository(session), session

    def test_pickup_guards_on_null_assignee(self):
        repo, session = self._repo(1)
        admin = uuid4()
        rows = _run(repo.conditional_update_order(
            uuid4(), OrderStatus.PAID, None,
            OrderPatch(status=OrderStatus.IN_PROGRESS, assigned_to=admin),
        ))
        self.assertEqual(rows, 1)
        sql = _sql(session.execute.call_args.args[0])
        self.assertIn("UPDATE orders SET", sql)
        self.assertIn("orders.assigned_to IS NULL", sql)
        self.assertIn("orders.status = ", sql)
        self.assertIn("updated_at=now()", sql)

    def test_owned_order_guards_on_assignee(self):
        repo, session = self._repo(0)
        rows = _run(repo.conditional_update_order(
            uuid4(), OrderStatus.IN_PROGRESS, uuid4(),
            OrderPatch(status=OrderStatus.PROOF_UPLOADED),
        ))
        self.assertEqual(rows, 0)
        sql = _sql(session.execute.call_args.args[0])
        self.assertIn("orders.assigned_to = ", sql)
        self.assertNotIn("payment_timestamp", sql)

    def test_payment_sets_timestamp(self):
        repo, session = self._repo(1)
        _run(repo.conditional_update_order(
            uuid4(), OrderStatus.PENDING_PAYMENT, None,
            OrderPatch(status=OrderStatus.PAID, payment_id="pay_1"),
        ))
        sql = _sql(session.execute.call_args.args[0])
        self.assertIn("payment_timestamp=now()", sql)


class TestQueueQuery(unittest.TestCase):
    def test_queue_excludes_pending_payment(self):
        session = MagicMock()
        rows_result = MagicMock()
        rows_result.mappings.return_value.all.return_value = [{"id": 1}]
        count_result = MagicMock()
        count_result.scalar_one.return_value = 1
        session.execute = AsyncMock(side_effect=[rows_result, count_result])

        items, total = _run(OrderRepository(session).get_orders_page(
            status=OrderStatus.PAID, offset=10, limit=10,
        ))

        self.assertEqual((items, total), ([{"id": 1}], 1))
        sql = _sql(session.execute.call_args_list[0].args[0])
        self.assertIn("LEFT OUTER JOIN users", sql)
        self.assertIn("LEFT OUTER JOIN schemes", sql)
        self.assertIn("orders.status != ", sql)
        self.assertIn("ORDER BY orders.created_at DESC", sql)


if __name__ == "__main__":
    unittest.main()
