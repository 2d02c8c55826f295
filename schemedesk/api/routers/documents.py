"""Documents API: citizen uploads and admin review."""
from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schemedesk.api.dependencies import (
    get_admin,
    get_notifier,
    get_order_service,
    get_principal,
    get_session,
)
from schemedesk.api.schemas.attachments import (
    DocumentCreateRequest,
    DocumentResponse,
    DocumentStatusRequest,
)
from schemedesk.lifecycle.types import Actor, Principal
from schemedesk.services.document_service import DocumentService
from schemedesk.services.order_service import OrderService

router = APIRouter(prefix="/documents", tags=["documents"])


def _service(
    session: AsyncSession = Depends(get_session),
    orders: OrderService = Depends(get_order_service),
    notifier=Depends(get_notifier),
) -> DocumentService:
    return DocumentService(session, orders, notifier)


@router.post("", response_model=DocumentResponse, status_code=201)
async def add_document(
    body: DocumentCreateRequest,
    principal: Principal = Depends(get_principal),
    svc: DocumentService = Depends(_service),
):
    document = await svc.add_document(
        body.order_id,
        principal,
        doc_type=body.doc_type,
        file_key=body.file_key,
        file_url=body.file_url,
    )
    return DocumentResponse.model_validate(document)


@router.get("/order/{order_id}", response_model=List[DocumentResponse])
async def list_documents(
    order_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    svc: DocumentService = Depends(_service),
):
    return [DocumentResponse.model_validate(d) for d in await svc.list_for_order(order_id, principal)]


@router.patch("/{document_id}/status", response_model=DocumentResponse)
async def set_document_status(
    document_id: uuid.UUID,
    body: DocumentStatusRequest,
    actor: Actor = Depends(get_admin),
    svc: DocumentService = Depends(_service),
):
    document = await svc.set_status(document_id, body.status, actor, body.rejection_reason)
    return DocumentResponse.model_validate(document)
