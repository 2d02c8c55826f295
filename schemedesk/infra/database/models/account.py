"""User (citizen) and Admin ORM models."""
from __future__ import annotations

import uuid
from typing import Any, Optional

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from schemedesk.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class User(Base, TimestampMixin):
    """A citizen who buys application assistance."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = _uuid_pk()
    phone: Mapped[str] = mapped_column(String(15), nullable=False, unique=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    # STUDENT | FARMER | LOAN_CANDIDATE | OTHER
    address: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONB, nullable=True)
    profile_complete: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default="false",
    )


class Admin(Base, TimestampMixin):
    """Back-office operator. ``role`` is ADMIN or SUPER_ADMIN."""

    __tablename__ = "admins"

    id: Mapped[uuid.UUID] = _uuid_pk()
    phone: Mapped[str] = mapped_column(String(15), nullable=False, unique=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, server_default="ADMIN")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="true")
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("admins.id", ondelete="SET NULL"), nullable=True,
    )
