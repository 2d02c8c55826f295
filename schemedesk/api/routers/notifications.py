"""Notifications API: the caller's inbox."""
from __future__ import annotations

import uuid
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from schemedesk.api.dependencies import get_principal, get_session
from schemedesk.api.schemas.attachments import NotificationResponse
from schemedesk.lifecycle.types import Principal
from schemedesk.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    limit: int = Query(default=20),
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    svc = NotificationService(session)
    items = await svc.list_for_recipient(principal.id, principal.user_type, limit=limit)
    unread = await svc.unread_count(principal.id, principal.user_type)
    return {
        "notifications": [NotificationResponse.model_validate(n) for n in items],
        "unread_count": unread,
    }


@router.patch("/{notification_id}/read", status_code=204)
async def mark_read(
    notification_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(get_session),
):
    await NotificationService(session).mark_read(notification_id, principal.id)


@router.post("/mark-all-read")
async def mark_all_read(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(get_session),
) -> Dict[str, int]:
    updated = await NotificationService(session).mark_all_read(principal.id, principal.user_type)
    return {"updated": updated}
