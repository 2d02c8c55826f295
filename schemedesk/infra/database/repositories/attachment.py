"""Document and Proof repositories (children of an order)."""
from __future__ import annotations

from typing import List
from uuid import UUID

from schemedesk.infra.database.models.order import Document, Proof
from schemedesk.infra.database.repositories.base import BaseRepository


class DocumentRepository(BaseRepository[Document]):
    model = Document

    async def list_for_order(self, order_id: UUID) -> List[Document]:
        return await self.list_where(Document.order_id == order_id, order_by=Document.uploaded_at)


class ProofRepository(BaseRepository[Proof]):
    model = Proof

    async def list_for_order(self, order_id: UUID) -> List[Proof]:
        return await self.list_where(Proof.order_id == order_id, order_by=Proof.uploaded_at)
