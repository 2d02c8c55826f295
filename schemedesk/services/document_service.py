"""Citizen documents attached to an order and their admin review status."""
from __future__ import annotations

import logging
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession

from schemedesk.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from schemedesk.infra.database.models.order import Document
from schemedesk.infra.database.repositories.attachment import DocumentRepository
from schemedesk.lifecycle.engine import authorize_actor, notification_for
from schemedesk.lifecycle.types import (
    Actor,
    DocumentStatus,
    NotificationType,
    Principal,
)
from schemedesk.services.notification_service import Notifier, deliver
from schemedesk.services.order_service import OrderService

logger = logging.getLogger(__name__)


def _parse_document_status(value: Union[str, DocumentStatus]) -> DocumentStatus:
    if isinstance(value, DocumentStatus):
        return value
    try:
        return DocumentStatus(str(value).strip().upper())
    except ValueError:
        raise ValidationError(
            f"Unknown document status: {value!r}",
            details={"allowed": [s.value for s in DocumentStatus]},
        ) from None


class DocumentService:
    def __init__(
        self,
        session: AsyncSession,
        orders: OrderService,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self._repo = DocumentRepository(session)
        self._orders = orders
        self._notifier = notifier

    async def add_document(
        self,
        order_id: UUID,
        principal: Principal,
        *,
        doc_type: str,
        file_key: str,
        file_url: str,
    ) -> Document:
        """Attach a citizen's document to one of their own orders."""
        state = await self._orders.load_state(order_id)
        if state.user_id != principal.id:
            raise ForbiddenError("Unauthorized")
        if state.status.is_terminal:
            raise ValidationError(
                f"Order is {state.status.value} and accepts no further changes",
                details={"from_status": state.status.value},
            )
        document = await self._repo.create({
            "order_id": order_id,
            "doc_type": doc_type,
            "file_key": file_key,
            "file_url": file_url,
            "status": DocumentStatus.UPLOADED.value,
        })
        logger.info("DocumentService: %s document %s added to order %s", doc_type, document.id, order_id)
        return document

    async def list_for_order(self, order_id: UUID, principal: Principal) -> List[Document]:
        await self._orders.get_order_for_principal(order_id, principal)
        return await self._repo.list_for_order(order_id)

    async def set_status(
        self,
        document_id: UUID,
        status: Union[str, DocumentStatus],
        actor: Actor,
        rejection_reason: Optional[str] = None,
    ) -> Document:
        """Admin review. Any status is settable; REJECTED needs a reason and notifies the user."""
        new_status = _parse_document_status(status)
        reason = (rejection_reason or "").strip() or None
        if new_status is DocumentStatus.REJECTED and reason is None:
            raise ValidationError("A rejection reason is required")

        document = await self._repo.get_by_id(document_id)
        if document is None:
            raise NotFoundError("Document not found", details={"document_id": str(document_id)})

        state = await self._orders.load_state(document.order_id)
        denied = authorize_actor(state, actor)
        if denied is not None:
            raise denied.to_exception()

        verified = new_status is DocumentStatus.VERIFIED
        updated = await self._repo.update(document_id, {
            "status": new_status.value,
            "rejection_reason": reason if new_status is DocumentStatus.REJECTED else None,
            "verified_at": func.now() if verified else None,
            "verified_by": actor.id if verified else None,
        })
        logger.info(
            "DocumentService: document %s on order %s set to %s",
            document_id, document.order_id, new_status.value,
            extra={"order_id": str(document.order_id), "actor_id": str(actor.id)},
        )

        if new_status is DocumentStatus.REJECTED:
            await deliver(
                self._notifier,
                notification_for(
                    state,
                    NotificationType.DOCUMENT_REJECTED,
                    f"Your {document.doc_type} document was rejected: {reason}",
                ),
            )
        return updated
