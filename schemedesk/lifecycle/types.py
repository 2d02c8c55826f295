"""Core data structures for the order lifecycle engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union
from uuid import UUID

from schemedesk.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    ProjectError,
    ValidationError,
)


class OrderStatus(str, Enum):
    PENDING_PAYMENT = "PENDING_PAYMENT"
    PAID = "PAID"
    IN_PROGRESS = "IN_PROGRESS"
    PROOF_UPLOADED = "PROOF_UPLOADED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})


class AdminRole(str, Enum):
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


class RecipientType(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class NotificationType(str, Enum):
    PAYMENT_SUCCESS = "PAYMENT_SUCCESS"
    ORDER_STATUS_CHANGE = "ORDER_STATUS_CHANGE"
    DOCUMENT_REJECTED = "DOCUMENT_REJECTED"
    PROOF_UPLOADED = "PROOF_UPLOADED"
    ORDER_COMPLETED = "ORDER_COMPLETED"
    NEW_ORDER_ASSIGNED = "NEW_ORDER_ASSIGNED"


class DocumentStatus(str, Enum):
    UPLOADED = "UPLOADED"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"
    RESUBMISSION_REQUIRED = "RESUBMISSION_REQUIRED"


class DenialKind(str, Enum):
    """Failure surface of the engine; values double as API error codes."""
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    FORBIDDEN = "FORBIDDEN"


@dataclass(frozen=True)
class Actor:
    """The admin performing an operation."""
    id: UUID
    role: AdminRole

    @property
    def is_super_admin(self) -> bool:
        return self.role is AdminRole.SUPER_ADMIN


@dataclass(frozen=True)
class Principal:
    """An authenticated caller, as resolved by the authenticator."""
    id: UUID
    user_type: RecipientType
    role: Optional[AdminRole] = None

    @property
    def is_admin(self) -> bool:
        return self.user_type is RecipientType.ADMIN

    def as_actor(self) -> Actor:
        if not self.is_admin:
            raise ForbiddenError("Admin access required")
        return Actor(id=self.id, role=self.role or AdminRole.ADMIN)


@dataclass(frozen=True)
class OrderState:
    """Snapshot of the persisted order fields the engine decides on."""
    id: UUID
    user_id: UUID
    status: OrderStatus
    assigned_to: Optional[UUID] = None
    payment_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: Any) -> "OrderState":
        """Build from an ORM row (or anything with the same attributes)."""
        return cls(
            id=row.id,
            user_id=row.user_id,
            status=OrderStatus(row.status),
            assigned_to=row.assigned_to,
            payment_id=getattr(row, "payment_id", None),
        )


@dataclass(frozen=True)
class OrderPatch:
    """Column changes produced by a decision. ``None`` means "leave as is"."""
    status: Optional[OrderStatus] = None
    assigned_to: Optional[UUID] = None
    admin_notes: Optional[str] = None
    payment_id: Optional[str] = None

    def as_values(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        if self.status is not None:
            values["status"] = self.status.value
        if self.assigned_to is not None:
            values["assigned_to"] = self.assigned_to
        if self.admin_notes is not None:
            values["admin_notes"] = self.admin_notes
        if self.payment_id is not None:
            values["payment_id"] = self.payment_id
        return values


@dataclass(frozen=True)
class NotificationIntent:
    recipient_id: UUID
    recipient_type: RecipientType
    type: NotificationType
    title: str
    message: Optional[str] = None
    related_order_id: Optional[UUID] = None


@dataclass(frozen=True)
class Allowed:
    patch: OrderPatch
    notification: Optional[NotificationIntent] = None
    ok: bool = field(default=True, init=False)


_ERRORS = {
    DenialKind.NOT_FOUND: NotFoundError,
    DenialKind.VALIDATION_ERROR: ValidationError,
    DenialKind.FORBIDDEN: ForbiddenError,
}


@dataclass(frozen=True)
class Denied:
    kind: DenialKind
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    ok: bool = field(default=False, init=False)

    def to_exception(self) -> ProjectError:
        return _ERRORS[self.kind](self.message, details=dict(self.details))


Decision = Union[Allowed, Denied]
