"""Order repository: the store behind the lifecycle engine.

``conditional_update_order`` is the only write path for status/assignment
changes. It is a single UPDATE guarded by the status and assignee the caller
observed, so two admins racing for the same PAID order cannot both win.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select, update

from schemedesk.infra.database.models.account import User
from schemedesk.infra.database.models.order import Order
from schemedesk.infra.database.models.scheme import Scheme
from schemedesk.infra.database.repositories.base import BaseRepository
from schemedesk.lifecycle.types import OrderPatch, OrderStatus


class OrderRepository(BaseRepository[Order]):
    model = Order

    async def get_order(self, id: UUID) -> Optional[Order]:
        return await self.get_by_id(id, refresh=True)

    async def conditional_update_order(
        self,
        id: UUID,
        expected_status: OrderStatus,
        expected_assignee: Optional[UUID],
        patch: OrderPatch,
    ) -> int:
        """Apply ``patch`` only if the row still has the expected status and assignee.

        Returns the number of rows affected (0 means another writer got there first).
        """
        values: Dict[str, Any] = {**patch.as_values(), "updated_at": func.now()}
        if patch.payment_id is not None:
            values["payment_timestamp"] = func.now()

        assignee_cond = (
            Order.assigned_to.is_(None)
            if expected_assignee is None
            else Order.assigned_to == expected_assignee
        )
        stmt = (
            update(Order)
            .where(
                Order.id == id,
                Order.status == expected_status.value,
                assignee_cond,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def get_orders_page(
        self,
        *,
        status: Optional[OrderStatus] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """Admin queue rows joined with user and scheme display fields, newest first.

        Orders still awaiting payment are never part of the queue.
        """
        conditions = [Order.status != OrderStatus.PENDING_PAYMENT.value]
        if status is not None:
            conditions.append(Order.status == status.value)

        stmt = (
            select(
                Order.id,
                Order.user_id,
                User.name.label("user_name"),
                User.phone.label("user_phone"),
                Order.scheme_id,
                Scheme.name.label("scheme_name"),
                Order.payment_amount,
                Order.status,
                Order.created_at,
                Order.payment_timestamp,
                Order.assigned_to,
            )
            .outerjoin(User, Order.user_id == User.id)
            .outerjoin(Scheme, Order.scheme_id == Scheme.id)
            .where(*conditions)
            .order_by(Order.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        rows = (await self.session.execute(stmt)).mappings().all()

        count_stmt = select(func.count()).select_from(Order).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()
        return [dict(r) for r in rows], total

    async def list_for_user(self, user_id: UUID) -> List[Dict[str, Any]]:
        stmt = (
            select(
                Order.id,
                Order.scheme_id,
                Scheme.name.label("scheme_name"),
                Scheme.category.label("scheme_category"),
                Order.payment_amount,
                Order.status,
                Order.created_at,
                Order.payment_timestamp,
            )
            .outerjoin(Scheme, Order.scheme_id == Scheme.id)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc())
        )
        rows = (await self.session.execute(stmt)).mappings().all()
        return [dict(r) for r in rows]

    async def create_pending(
        self,
        *,
        user_id: UUID,
        scheme_id: UUID,
        payment_amount: Decimal,
        terms_version: Optional[str] = None,
    ) -> Order:
        data: Dict[str, Any] = {
            "user_id": user_id,
            "scheme_id": scheme_id,
            "payment_amount": payment_amount,
            "status": OrderStatus.PENDING_PAYMENT.value,
        }
        if terms_version:
            data["terms_version"] = terms_version
            data["consent_timestamp"] = func.now()
        return await self.create(data)

    async def set_gateway_order_id(self, id: UUID, gateway_order_id: str) -> bool:
        """Record the gateway's order id once; later calls are ignored."""
        stmt = (
            update(Order)
            .where(Order.id == id, Order.gateway_order_id.is_(None))
            .values(gateway_order_id=gateway_order_id, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return (result.rowcount or 0) > 0
