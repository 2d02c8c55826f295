"""Scheme ORM model: a government/private programme citizens can apply to."""
from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy import Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from schemedesk.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class Scheme(Base, TimestampMixin):
    __tablename__ = "schemes"

    id: Mapped[uuid.UUID] = _uuid_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    scheme_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    # GOVERNMENT | PRIVATE
    required_docs: Mapped[List[dict[str, Any]]] = mapped_column(
        JSONB, nullable=False, default=list,
    )
    """[{"type": "AADHAAR", "label": "Aadhaar card", "required": true}, ...]"""

    service_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, server_default="ACTIVE")
    # ACTIVE | INACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == "ACTIVE"
