"""Order ORM model and its Document / Proof children."""
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from schemedesk.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class Order(Base, TimestampMixin):
    """One citizen's request for processing assistance on one scheme.

    Rows are never deleted; terminal orders stay for audit.
    """

    __tablename__ = "orders"
    __table_args__ = (
        Index("ix_orders_status_created_at", "status", "created_at"),
        Index("ix_orders_user_id", "user_id"),
        Index("ix_orders_assigned_to", "assigned_to"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False,
    )
    scheme_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("schemes.id"), nullable=False,
    )

    status: Mapped[str] = mapped_column(
        String(30), nullable=False, server_default="PENDING_PAYMENT",
    )
    # PENDING_PAYMENT | PAID | IN_PROGRESS | PROOF_UPLOADED | COMPLETED | CANCELLED

    # Fee captured at purchase time; never updated afterwards
    payment_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    gateway_order_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    payment_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    payment_timestamp: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    consent_timestamp: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    terms_version: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    assigned_to: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("admins.id"), nullable=True,
    )
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"Order(id={self.id!r}, status={self.status!r}, "
            f"assigned_to={self.assigned_to!r})"
        )


class Document(Base):
    """A citizen-supplied document attached to an order."""

    __tablename__ = "documents"
    __table_args__ = (Index("ix_documents_order_id", "order_id"),)

    id: Mapped[uuid.UUID] = _uuid_pk()
    order_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("orders.id"), nullable=False,
    )
    doc_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_url: Mapped[str] = mapped_column(String(500), nullable=False)
    file_key: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[str] = mapped_column(String(30), nullable=False, server_default="UPLOADED")
    # UPLOADED | VERIFIED | REJECTED | RESUBMISSION_REQUIRED
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    verified_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("admins.id"), nullable=True,
    )


class Proof(Base):
    """Admin evidence that the application was filed (receipt, screenshot, reference id)."""

    __tablename__ = "proofs"
    __table_args__ = (Index("ix_proofs_order_id", "order_id"),)

    id: Mapped[uuid.UUID] = _uuid_pk()
    order_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("orders.id"), nullable=False,
    )
    file_key: Mapped[str] = mapped_column(String(500), nullable=False)
    # Empty until the upload is confirmed
    file_url: Mapped[str] = mapped_column(String(500), nullable=False, server_default="")
    proof_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    # RECEIPT | SCREENSHOT | REFERENCE_ID | CONFIRMATION | OTHER
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )
    uploaded_by: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("admins.id"), nullable=False,
    )
