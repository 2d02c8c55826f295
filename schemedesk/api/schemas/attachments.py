"""Pydantic v2 schemas for proofs, documents and notifications."""
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ProofRegisterRequest(BaseModel):
    order_id: UUID
    file_key: str = Field(..., min_length=1, max_length=500)
    proof_type: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class ProofConfirmRequest(BaseModel):
    file_url: str = Field(..., min_length=1, max_length=500)


class ProofResponse(BaseModel):
    id: UUID
    order_id: UUID
    file_key: str
    file_url: str
    proof_type: Optional[str] = None
    description: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    uploaded_by: UUID

    model_config = {"from_attributes": True}


class DocumentCreateRequest(BaseModel):
    order_id: UUID
    doc_type: str = Field(..., min_length=1, max_length=100)
    file_key: str = Field(..., min_length=1, max_length=500)
    file_url: str = Field(..., min_length=1, max_length=500)


class DocumentStatusRequest(BaseModel):
    status: str = Field(..., min_length=1, max_length=30)
    rejection_reason: Optional[str] = Field(default=None, max_length=2000)


class DocumentResponse(BaseModel):
    id: UUID
    order_id: UUID
    doc_type: str
    file_url: str
    status: str
    rejection_reason: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    verified_by: Optional[UUID] = None

    model_config = {"from_attributes": True}


class NotificationResponse(BaseModel):
    id: UUID
    type: str
    title: str
    message: Optional[str] = None
    related_order_id: Optional[UUID] = None
    read: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
