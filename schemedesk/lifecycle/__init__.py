"""Order lifecycle & assignment engine (pure; no I/O)."""
from schemedesk.lifecycle.engine import (
    ADMIN_TRANSITIONS,
    PAYMENT_TRANSITIONS,
    authorize_actor,
    decide_completion,
    decide_notes_update,
    decide_payment,
    decide_transition,
    is_admin_transition,
    notification_for,
)
from schemedesk.lifecycle.types import (
    TERMINAL_STATUSES,
    Actor,
    AdminRole,
    Allowed,
    Decision,
    Denied,
    DenialKind,
    DocumentStatus,
    NotificationIntent,
    NotificationType,
    OrderPatch,
    OrderState,
    OrderStatus,
    Principal,
    RecipientType,
)

__all__ = [
    "ADMIN_TRANSITIONS",
    "PAYMENT_TRANSITIONS",
    "TERMINAL_STATUSES",
    "Actor",
    "AdminRole",
    "Allowed",
    "Decision",
    "Denied",
    "DenialKind",
    "DocumentStatus",
    "NotificationIntent",
    "NotificationType",
    "OrderPatch",
    "OrderState",
    "OrderStatus",
    "Principal",
    "RecipientType",
    "authorize_actor",
    "decide_completion",
    "decide_notes_update",
    "decide_payment",
    "decide_transition",
    "is_admin_transition",
    "notification_for",
]
