"""Notification repository."""
from __future__ import annotations

from typing import List
from uuid import UUID

from sqlalchemy import func, select, update

from schemedesk.infra.database.models.notification import Notification
from schemedesk.infra.database.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    model = Notification

    async def list_for_recipient(
        self, recipient_id: UUID, recipient_type: str, *, limit: int = 20,
    ) -> List[Notification]:
        stmt = (
            select(Notification)
            .where(
                Notification.recipient_id == recipient_id,
                Notification.recipient_type == recipient_type,
            )
            .order_by(Notification.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def unread_count(self, recipient_id: UUID, recipient_type: str) -> int:
        stmt = select(func.count()).select_from(Notification).where(
            Notification.recipient_id == recipient_id,
            Notification.recipient_type == recipient_type,
            Notification.read.is_(False),
        )
        return (await self.session.execute(stmt)).scalar_one()

    async def mark_read(self, id: UUID, recipient_id: UUID) -> bool:
        stmt = (
            update(Notification)
            .where(Notification.id == id, Notification.recipient_id == recipient_id)
            .values(read=True)
        )
        result = await self.session.execute(stmt)
        return (result.rowcount or 0) > 0

    async def mark_all_read(self, recipient_id: UUID, recipient_type: str) -> int:
        stmt = (
            update(Notification)
            .where(
                Notification.recipient_id == recipient_id,
                Notification.recipient_type == recipient_type,
                Notification.read.is_(False),
            )
            .values(read=True)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0
