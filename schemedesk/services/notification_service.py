"""Notifications: best-effort delivery from the lifecycle plus the recipient inbox."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from schemedesk.core.exceptions import NotFoundError
from schemedesk.infra.database.models.notification import Notification
from schemedesk.infra.database.repositories.notification import NotificationRepository
from schemedesk.lifecycle.types import NotificationIntent, RecipientType

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Fire-and-forget sink. Implementations must not raise."""

    async def enqueue(self, intent: NotificationIntent) -> None: ...


def _row_data(intent: NotificationIntent) -> Dict[str, Any]:
    return {
        "recipient_id": intent.recipient_id,
        "recipient_type": intent.recipient_type.value,
        "type": intent.type.value,
        "title": intent.title,
        "message": intent.message,
        "related_order_id": intent.related_order_id,
    }


class DatabaseNotifier:
    """Writes notifications in a session of its own so a failed insert never
    touches the caller's transaction."""

    def __init__(self, session_factory: Callable[[], Any]) -> None:
        self._session_factory = session_factory

    async def enqueue(self, intent: NotificationIntent) -> None:
        try:
            async with self._session_factory() as session:
                await NotificationRepository(session).create(_row_data(intent))
                await session.commit()
        except Exception:
            logger.exception(
                "Notifier: failed to store %s notification for %s",
                intent.type.value, intent.recipient_id,
            )
            return
        logger.info(
            "Notifier: %s queued for %s %s",
            intent.type.value, intent.recipient_type.value, intent.recipient_id,
        )


class NotificationOutbox:
    """Holds intents until the surrounding unit of work has succeeded.

    ``flush`` hands everything to the wrapped notifier; ``discard`` drops it.
    Used so a rolled-back change never reaches a recipient.
    """

    def __init__(self, notifier: Notifier) -> None:
        self._notifier = notifier
        self._pending: List[NotificationIntent] = []

    @property
    def pending(self) -> List[NotificationIntent]:
        return list(self._pending)

    async def enqueue(self, intent: NotificationIntent) -> None:
        self._pending.append(intent)

    async def flush(self) -> None:
        pending, self._pending = self._pending, []
        for intent in pending:
            await deliver(self._notifier, intent)

    def discard(self) -> None:
        if self._pending:
            logger.info("Notifier: dropped %d notification(s) from a failed unit of work", len(self._pending))
        self._pending = []


class NotificationService:
    def __init__(self, session: AsyncSession) -> None:
        self._repo = NotificationRepository(session)

    async def list_for_recipient(
        self,
        recipient_id: UUID,
        recipient_type: RecipientType,
        *,
        limit: int = 20,
    ) -> List[Notification]:
        limit = min(max(limit, 1), 100)
        return await self._repo.list_for_recipient(
            recipient_id, recipient_type.value, limit=limit,
        )

    async def unread_count(self, recipient_id: UUID, recipient_type: RecipientType) -> int:
        return await self._repo.unread_count(recipient_id, recipient_type.value)

    async def mark_read(self, notification_id: UUID, recipient_id: UUID) -> None:
        """Mark one of the recipient's notifications as read."""
        if not await self._repo.mark_read(notification_id, recipient_id):
            raise NotFoundError(
                "Notification not found",
                details={"notification_id": str(notification_id)},
            )

    async def mark_all_read(self, recipient_id: UUID, recipient_type: RecipientType) -> int:
        return await self._repo.mark_all_read(recipient_id, recipient_type.value)


async def deliver(notifier: Optional[Notifier], intent: Optional[NotificationIntent]) -> None:
    """Hand ``intent`` to ``notifier``; a misbehaving notifier is logged, never propagated."""
    if notifier is None or intent is None:
        return
    try:
        await notifier.enqueue(intent)
    except Exception:
        logger.exception(
            "Notifier %s raised while enqueuing %s for order %s",
            type(notifier).__name__, intent.type.value, intent.related_order_id,
        )
