"""Order lifecycle engine: transition table, assignment gate and notification triggers.

Everything here is a pure function of (current order state, requested change,
acting admin). Callers own all I/O: they load an ``OrderState``, ask for a
``Decision``, then apply ``Allowed.patch`` with a compare-and-set write guarded
by the same state the decision was made on.

Gate order for admin-driven transitions
---------------------------------------
1. Terminal current state            -> VALIDATION_ERROR (any actor, any target)
2. Ordinary admin, order owned by
   someone else                      -> FORBIDDEN
3. (from, to) not in ADMIN_TRANSITIONS -> VALIDATION_ERROR citing both states
4. Ordinary admin asking for
   IN_PROGRESS on anything but an
   unassigned PAID order             -> VALIDATION_ERROR

Super admins skip steps 2 and 4.
"""
from __future__ import annotations

from typing import Dict, FrozenSet, Optional

from schemedesk.lifecycle.types import (
    Actor,
    Allowed,
    Decision,
    Denied,
    DenialKind,
    NotificationIntent,
    NotificationType,
    OrderPatch,
    OrderState,
    OrderStatus,
    RecipientType,
)

ADMIN_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING_PAYMENT: frozenset(),
    OrderStatus.PAID: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.PROOF_UPLOADED, OrderStatus.CANCELLED}),
    OrderStatus.PROOF_UPLOADED: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}
"""Edges an admin may request. PENDING_PAYMENT -> PAID belongs to the payment flow."""

PAYMENT_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING_PAYMENT: frozenset({OrderStatus.PAID}),
}

_NOTIFY_ON: Dict[OrderStatus, NotificationType] = {
    OrderStatus.PROOF_UPLOADED: NotificationType.PROOF_UPLOADED,
    OrderStatus.COMPLETED: NotificationType.ORDER_COMPLETED,
}

_NOTIFICATION_TEXT: Dict[NotificationType, tuple[str, str]] = {
    NotificationType.PROOF_UPLOADED: (
        "Proof Uploaded",
        "Admin has uploaded proof for your order. Please check your dashboard.",
    ),
    NotificationType.ORDER_COMPLETED: (
        "Order Completed!",
        "Your order has been processed and completed successfully.",
    ),
    NotificationType.DOCUMENT_REJECTED: (
        "Document Rejected",
        "One of your documents was rejected. Please upload it again.",
    ),
}


def is_admin_transition(from_status: OrderStatus, to_status: OrderStatus) -> bool:
    return to_status in ADMIN_TRANSITIONS.get(from_status, frozenset())


def notification_for(
    state: OrderState,
    notification_type: NotificationType,
    message: Optional[str] = None,
) -> NotificationIntent:
    """User-facing notification about ``state``'s order."""
    title, default_message = _NOTIFICATION_TEXT.get(
        notification_type, (notification_type.value.replace("_", " ").title(), None)
    )
    return NotificationIntent(
        recipient_id=state.user_id,
        recipient_type=RecipientType.USER,
        type=notification_type,
        title=title,
        message=message or default_message,
        related_order_id=state.id,
    )


def _terminal(state: OrderState, requested: OrderStatus) -> Denied:
    return Denied(
        DenialKind.VALIDATION_ERROR,
        f"Order is {state.status.value} and accepts no further changes",
        {"from_status": state.status.value, "to_status": requested.value},
    )


def _foreign_owner(state: OrderState, actor: Actor) -> Optional[Denied]:
    if actor.is_super_admin:
        return None
    if state.assigned_to is not None and state.assigned_to != actor.id:
        return Denied(
            DenialKind.FORBIDDEN,
            "This order is assigned to another admin",
            {"assigned_to": str(state.assigned_to)},
        )
    return None


def _gate(state: OrderState, requested: OrderStatus, actor: Actor) -> Optional[Denied]:
    if state.status.is_terminal:
        return _terminal(state, requested)

    denied = _foreign_owner(state, actor)
    if denied is not None:
        return denied

    if not is_admin_transition(state.status, requested):
        return Denied(
            DenialKind.VALIDATION_ERROR,
            f"Cannot transition from {state.status.value} to {requested.value}",
            {"from_status": state.status.value, "to_status": requested.value},
        )

    if (
        requested is OrderStatus.IN_PROGRESS
        and not actor.is_super_admin
        and not (state.status is OrderStatus.PAID and state.assigned_to is None)
    ):
        return Denied(
            DenialKind.VALIDATION_ERROR,
            "Can only pick up unassigned orders that are in PAID status",
            {"from_status": state.status.value, "to_status": requested.value},
        )
    return None


def _picks_up(state: OrderState, requested: OrderStatus) -> bool:
    return (
        requested is OrderStatus.IN_PROGRESS
        and state.status is OrderStatus.PAID
        and state.assigned_to is None
    )


def decide_transition(
    state: OrderState,
    requested: OrderStatus,
    actor: Actor,
    notes: Optional[str] = None,
) -> Decision:
    """Decide an admin-requested status change.

    Empty ``notes`` leave the stored admin notes as they are; clearing them
    goes through ``decide_notes_update``.
    """
    denied = _gate(state, requested, actor)
    if denied is not None:
        return denied

    patch = OrderPatch(
        status=requested,
        assigned_to=actor.id if _picks_up(state, requested) else None,
        admin_notes=notes or None,
    )
    notify = _NOTIFY_ON.get(requested)
    return Allowed(
        patch=patch,
        notification=notification_for(state, notify) if notify is not None else None,
    )


def decide_completion(state: OrderState, actor: Actor) -> Decision:
    """The "mark complete" shortcut: PROOF_UPLOADED -> COMPLETED, claiming unowned orders."""
    if state.status is OrderStatus.COMPLETED:
        return Denied(
            DenialKind.VALIDATION_ERROR,
            "Order is already completed",
            {"reason": "already_completed", "from_status": state.status.value},
        )

    denied = _gate(state, OrderStatus.COMPLETED, actor)
    if denied is not None:
        return denied

    return Allowed(
        patch=OrderPatch(
            status=OrderStatus.COMPLETED,
            assigned_to=actor.id if state.assigned_to is None else None,
        ),
        notification=notification_for(state, NotificationType.ORDER_COMPLETED),
    )


def authorize_actor(state: OrderState, actor: Actor) -> Optional[Denied]:
    """May ``actor`` touch a live order's data (notes, documents, proofs)?"""
    if state.status.is_terminal:
        return Denied(
            DenialKind.VALIDATION_ERROR,
            f"Order is {state.status.value} and accepts no further changes",
            {"from_status": state.status.value},
        )
    return _foreign_owner(state, actor)


def decide_notes_update(state: OrderState, actor: Actor, notes: str) -> Decision:
    """Admin notes are editable while the order is live, by its owner or a super admin."""
    denied = authorize_actor(state, actor)
    if denied is not None:
        return denied
    return Allowed(patch=OrderPatch(admin_notes=notes))


def decide_payment(state: OrderState, payment_id: str) -> Decision:
    """External payment confirmation: the only way into PAID. Never assigns."""
    if OrderStatus.PAID not in PAYMENT_TRANSITIONS.get(state.status, frozenset()):
        return Denied(
            DenialKind.VALIDATION_ERROR,
            f"Order is {state.status.value}, not awaiting payment",
            {"from_status": state.status.value, "to_status": OrderStatus.PAID.value},
        )
    if not payment_id:
        return Denied(DenialKind.VALIDATION_ERROR, "Payment id is required")
    return Allowed(patch=OrderPatch(status=OrderStatus.PAID, payment_id=payment_id))
