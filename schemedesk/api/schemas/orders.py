"""Pydantic v2 schemas for the Orders API."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class OrderResponse(BaseModel):
    id: UUID
    user_id: UUID
    scheme_id: UUID
    status: str
    payment_amount: Decimal
    payment_id: Optional[str] = None
    payment_timestamp: Optional[datetime] = None
    assigned_to: Optional[UUID] = None
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserOrderItem(BaseModel):
    id: UUID
    scheme_id: UUID
    scheme_name: Optional[str] = None
    scheme_category: Optional[str] = None
    payment_amount: Decimal
    status: str
    created_at: Optional[datetime] = None
    payment_timestamp: Optional[datetime] = None


class QueueItem(BaseModel):
    id: UUID
    user_id: UUID
    user_name: Optional[str] = None
    user_phone: Optional[str] = None
    scheme_id: UUID
    scheme_name: Optional[str] = None
    payment_amount: Decimal
    status: str
    created_at: Optional[datetime] = None
    payment_timestamp: Optional[datetime] = None
    assigned_to: Optional[UUID] = None


class QueueResponse(BaseModel):
    items: List[QueueItem]
    total: int
    page: int
    limit: int
    total_pages: int


class StatusUpdateRequest(BaseModel):
    status: str = Field(..., min_length=1, max_length=30)
    notes: Optional[str] = Field(default=None, max_length=5000)


class NotesUpdateRequest(BaseModel):
    notes: str = Field(..., max_length=5000)


class TransitionResponse(BaseModel):
    order_id: UUID
    status: str
    assigned_to: Optional[UUID] = None
