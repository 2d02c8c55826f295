"""Proofs API (admin only): register, confirm upload, list per order."""
from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schemedesk.api.dependencies import get_admin, get_order_service, get_session
from schemedesk.api.schemas.attachments import (
    ProofConfirmRequest,
    ProofRegisterRequest,
    ProofResponse,
)
from schemedesk.api.schemas.orders import TransitionResponse
from schemedesk.lifecycle.types import Actor
from schemedesk.services.order_service import OrderService
from schemedesk.services.proof_service import ProofService

router = APIRouter(prefix="/proofs", tags=["proofs"])


def _service(
    session: AsyncSession = Depends(get_session),
    orders: OrderService = Depends(get_order_service),
) -> ProofService:
    return ProofService(session, orders)


@router.post("", response_model=ProofResponse, status_code=201)
async def register_proof(
    body: ProofRegisterRequest,
    actor: Actor = Depends(get_admin),
    svc: ProofService = Depends(_service),
):
    proof = await svc.register_proof(
        body.order_id,
        actor,
        file_key=body.file_key,
        proof_type=body.proof_type,
        description=body.description,
    )
    return ProofResponse.model_validate(proof)


@router.post("/{proof_id}/confirm", response_model=TransitionResponse)
async def confirm_proof(
    proof_id: uuid.UUID,
    body: ProofConfirmRequest,
    actor: Actor = Depends(get_admin),
    svc: ProofService = Depends(_service),
):
    """Record the uploaded file and move the order to PROOF_UPLOADED."""
    result = await svc.confirm_proof(proof_id, body.file_url, actor)
    return TransitionResponse(
        order_id=result.order_id, status=result.status.value, assigned_to=result.assigned_to,
    )


@router.get("/order/{order_id}", response_model=List[ProofResponse])
async def list_proofs(
    order_id: uuid.UUID,
    actor: Actor = Depends(get_admin),
    svc: ProofService = Depends(_service),
):
    return [ProofResponse.model_validate(p) for p in await svc.list_for_order(order_id)]
