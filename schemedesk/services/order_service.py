"""OrderService: applies lifecycle decisions to the store with compare-and-set writes.

Every mutation follows the same loop:

    read order -> decide (pure) -> conditional UPDATE guarded by what was read
                                    |
                       0 rows ------+--> re-read and decide again

so a caller that lost a race gets the same error a later, serialized request
would have seen (e.g. FORBIDDEN "assigned to another admin").
"""
from __future__ import annotations

import logging
import math
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Protocol, Tuple, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from schemedesk.config.app import QUEUE_MAX_LIMIT, QUEUE_MIN_LIMIT
from schemedesk.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from schemedesk.infra.database.repositories.order import OrderRepository
from schemedesk.lifecycle.engine import (
    decide_completion,
    decide_notes_update,
    decide_payment,
    decide_transition,
)
from schemedesk.lifecycle.types import (
    Actor,
    Allowed,
    Decision,
    Denied,
    OrderPatch,
    OrderState,
    OrderStatus,
    Principal,
)
from schemedesk.services.notification_service import NotificationOutbox, Notifier, deliver

logger = logging.getLogger(__name__)

_MAX_CAS_ATTEMPTS = 3


class OrderStore(Protocol):
    async def get_order(self, id: UUID) -> Optional[Any]: ...

    async def conditional_update_order(
        self,
        id: UUID,
        expected_status: OrderStatus,
        expected_assignee: Optional[UUID],
        patch: OrderPatch,
    ) -> int: ...

    async def get_orders_page(
        self,
        *,
        status: Optional[OrderStatus] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Dict[str, Any]], int]: ...

    async def list_for_user(self, user_id: UUID) -> List[Dict[str, Any]]: ...


@dataclass(frozen=True)
class TransitionResult:
    order_id: UUID
    status: OrderStatus
    assigned_to: Optional[UUID] = None


@dataclass
class QueuePage:
    items: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = QUEUE_MIN_LIMIT
    total_pages: int = 0


def parse_status(value: Union[str, OrderStatus]) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).strip().upper())
    except ValueError:
        raise ValidationError(
            f"Unknown order status: {value!r}",
            details={"allowed": [s.value for s in OrderStatus]},
        ) from None


def clamp_pagination(page: Any, limit: Any) -> Tuple[int, int]:
    """page >= 1, limit within [QUEUE_MIN_LIMIT, QUEUE_MAX_LIMIT]."""
    try:
        page = int(page)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        limit = QUEUE_MIN_LIMIT
    return max(page, 1), min(max(limit, QUEUE_MIN_LIMIT), QUEUE_MAX_LIMIT)


class OrderService:
    def __init__(self, store: OrderStore, notifier: Optional[Notifier] = None) -> None:
        self._store = store
        self._notifier = notifier

    @classmethod
    def from_session(
        cls, session: AsyncSession, notifier: Optional[Notifier] = None,
    ) -> "OrderService":
        return cls(OrderRepository(session), notifier)

    @asynccontextmanager
    async def held_notifications(self) -> AsyncIterator[None]:
        """Hold notifications raised inside the block until it completes.

        Steps that run after a transition (attachment writes and the like)
        can still fail; their notifications are dropped with them.
        """
        outer = self._notifier
        if outer is None or isinstance(outer, NotificationOutbox):
            yield
            return
        outbox = NotificationOutbox(outer)
        self._notifier = outbox
        try:
            yield
        except BaseException:
            outbox.discard()
            raise
        finally:
            self._notifier = outer
        await outbox.flush()

    # ── Reads ────────────────────────────────────────────────────────────

    async def load_state(self, order_id: UUID) -> OrderState:
        row = await self._store.get_order(order_id)
        if row is None:
            raise NotFoundError("Order not found", details={"order_id": str(order_id)})
        return OrderState.from_row(row)

    async def get_order_for_principal(self, order_id: UUID, principal: Principal) -> Any:
        """Admins see every order; users only their own."""
        row = await self._store.get_order(order_id)
        if row is None:
            raise NotFoundError("Order not found", details={"order_id": str(order_id)})
        if not principal.is_admin and row.user_id != principal.id:
            raise ForbiddenError("Unauthorized")
        return row

    async def list_user_orders(self, user_id: UUID) -> List[Dict[str, Any]]:
        return await self._store.list_for_user(user_id)

    async def list_admin_queue(
        self,
        *,
        status: Optional[Union[str, OrderStatus]] = None,
        page: Any = 1,
        limit: Any = QUEUE_MIN_LIMIT,
    ) -> QueuePage:
        """Admin triage list, newest first. Every admin sees the same queue."""
        status_filter = parse_status(status) if status else None
        page, limit = clamp_pagination(page, limit)
        items, total = await self._store.get_orders_page(
            status=status_filter, offset=(page - 1) * limit, limit=limit,
        )
        return QueuePage(
            items=items,
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if total else 0,
        )

    # ── Writes ───────────────────────────────────────────────────────────

    async def _apply(
        self,
        order_id: UUID,
        decide: Callable[[OrderState], Optional[Decision]],
        *,
        action: str,
    ) -> Tuple[OrderState, Optional[Allowed]]:
        """Decide-and-CAS loop. ``decide`` returning None means "already done"."""
        for attempt in range(1, _MAX_CAS_ATTEMPTS + 1):
            state = await self.load_state(order_id)
            decision = decide(state)
            if decision is None:
                return state, None
            if isinstance(decision, Denied):
                logger.info(
                    "OrderService: %s on order %s denied (%s): %s",
                    action, order_id, decision.kind.value, decision.message,
                )
                raise decision.to_exception()

            rows = await self._store.conditional_update_order(
                state.id, state.status, state.assigned_to, decision.patch,
            )
            if rows:
                return state, decision
            logger.info(
                "OrderService: %s on order %s lost a concurrent update (attempt %d/%d)",
                action, order_id, attempt, _MAX_CAS_ATTEMPTS,
            )

        raise ValidationError(
            "Order was modified concurrently, please retry",
            details={"order_id": str(order_id), "reason": "concurrent_modification"},
        )

    async def _finish(
        self, state: OrderState, allowed: Allowed, actor_id: Optional[UUID], action: str,
    ) -> TransitionResult:
        patch = allowed.patch
        result = TransitionResult(
            order_id=state.id,
            status=patch.status or state.status,
            assigned_to=patch.assigned_to or state.assigned_to,
        )
        logger.info(
            "OrderService: %s order %s %s -> %s (assigned_to=%s, by=%s)",
            action, state.id, state.status.value, result.status.value,
            result.assigned_to, actor_id,
            extra={
                "order_id": str(state.id),
                "actor_id": str(actor_id) if actor_id else None,
                "from_status": state.status.value,
                "to_status": result.status.value,
            },
        )
        await deliver(self._notifier, allowed.notification)
        return result

    async def transition_order_status(
        self,
        order_id: UUID,
        requested_status: Union[str, OrderStatus],
        actor: Actor,
        notes: Optional[str] = None,
    ) -> TransitionResult:
        requested = parse_status(requested_status)
        state, allowed = await self._apply(
            order_id,
            lambda s: decide_transition(s, requested, actor, notes),
            action="transition",
        )
        return await self._finish(state, allowed, actor.id, "transition")

    async def complete_order(self, order_id: UUID, actor: Actor) -> TransitionResult:
        state, allowed = await self._apply(
            order_id, lambda s: decide_completion(s, actor), action="complete",
        )
        return await self._finish(state, allowed, actor.id, "complete")

    async def update_admin_notes(
        self, order_id: UUID, actor: Actor, notes: str,
    ) -> TransitionResult:
        state, allowed = await self._apply(
            order_id, lambda s: decide_notes_update(s, actor, notes), action="notes",
        )
        return await self._finish(state, allowed, actor.id, "notes")

    async def confirm_paid(self, order_id: UUID, payment_id: str) -> TransitionResult:
        """PENDING_PAYMENT -> PAID from a verified gateway event. Replays are no-ops."""

        def decide(state: OrderState) -> Optional[Decision]:
            if state.payment_id and state.payment_id == payment_id:
                return None
            return decide_payment(state, payment_id)

        state, allowed = await self._apply(order_id, decide, action="payment")
        if allowed is None:
            logger.info(
                "OrderService: payment %s for order %s already applied", payment_id, order_id,
            )
            return TransitionResult(state.id, state.status, state.assigned_to)
        return await self._finish(state, allowed, None, "payment")
