"""Orders API: citizen order list, admin queue and lifecycle transitions."""
from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from schemedesk.api.dependencies import get_admin, get_order_service, get_principal
from schemedesk.api.schemas.orders import (
    NotesUpdateRequest,
    OrderResponse,
    QueueItem,
    QueueResponse,
    StatusUpdateRequest,
    TransitionResponse,
    UserOrderItem,
)
from schemedesk.lifecycle.types import Actor, Principal
from schemedesk.services.order_service import OrderService, TransitionResult

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/orders", tags=["orders"])


def _transition_schema(result: TransitionResult) -> TransitionResponse:
    return TransitionResponse(
        order_id=result.order_id,
        status=result.status.value,
        assigned_to=result.assigned_to,
    )


@router.get("", response_model=List[UserOrderItem])
async def list_my_orders(
    principal: Principal = Depends(get_principal),
    svc: OrderService = Depends(get_order_service),
):
    """The calling citizen's orders, newest first."""
    rows = await svc.list_user_orders(principal.id)
    return [UserOrderItem(**row) for row in rows]


@router.get("/admin/queue", response_model=QueueResponse)
async def admin_queue(
    request: Request,
    status: Optional[str] = None,
    page: int = Query(default=1),
    limit: Optional[int] = Query(default=None),
    actor: Actor = Depends(get_admin),
    svc: OrderService = Depends(get_order_service),
):
    if limit is None:
        limit = request.app.state.app_config.queue_default_limit
    result = await svc.list_admin_queue(status=status, page=page, limit=limit)
    return QueueResponse(
        items=[QueueItem(**row) for row in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    svc: OrderService = Depends(get_order_service),
):
    order = await svc.get_order_for_principal(order_id, principal)
    return OrderResponse.model_validate(order)


@router.patch("/{order_id}/status", response_model=TransitionResponse)
async def update_order_status(
    order_id: uuid.UUID,
    body: StatusUpdateRequest,
    actor: Actor = Depends(get_admin),
    svc: OrderService = Depends(get_order_service),
):
    """Admin-requested status change (pickup, proof uploaded, completion, cancellation)."""
    result = await svc.transition_order_status(order_id, body.status, actor, body.notes)
    return _transition_schema(result)


@router.patch("/{order_id}/notes", response_model=TransitionResponse)
async def update_admin_notes(
    order_id: uuid.UUID,
    body: NotesUpdateRequest,
    actor: Actor = Depends(get_admin),
    svc: OrderService = Depends(get_order_service),
):
    result = await svc.update_admin_notes(order_id, actor, body.notes)
    return _transition_schema(result)


@router.post("/{order_id}/complete", response_model=TransitionResponse)
async def complete_order(
    order_id: uuid.UUID,
    actor: Actor = Depends(get_admin),
    svc: OrderService = Depends(get_order_service),
):
    result = await svc.complete_order(order_id, actor)
    return _transition_schema(result)
