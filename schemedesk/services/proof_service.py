"""Proofs: admin evidence that an application was filed on the citizen's behalf."""
from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from schemedesk.core.exceptions import NotFoundError, ValidationError
from schemedesk.infra.database.models.order import Proof
from schemedesk.infra.database.repositories.attachment import ProofRepository
from schemedesk.lifecycle.engine import authorize_actor
from schemedesk.lifecycle.types import Actor, OrderStatus
from schemedesk.services.order_service import OrderService, TransitionResult

logger = logging.getLogger(__name__)

PROOF_TYPES = frozenset({"RECEIPT", "SCREENSHOT", "REFERENCE_ID", "CONFIRMATION", "OTHER"})


class ProofService:
    def __init__(self, session: AsyncSession, orders: OrderService) -> None:
        self._repo = ProofRepository(session)
        self._orders = orders

    async def register_proof(
        self,
        order_id: UUID,
        actor: Actor,
        *,
        file_key: str,
        proof_type: str,
        description: Optional[str] = None,
    ) -> Proof:
        """Create a pending proof row; the file URL is filled in by ``confirm_proof``."""
        if proof_type not in PROOF_TYPES:
            raise ValidationError(
                f"Unknown proof type: {proof_type!r}",
                details={"allowed": sorted(PROOF_TYPES)},
            )
        state = await self._orders.load_state(order_id)
        denied = authorize_actor(state, actor)
        if denied is not None:
            raise denied.to_exception()

        proof = await self._repo.create({
            "order_id": order_id,
            "file_key": file_key,
            "file_url": "",
            "proof_type": proof_type,
            "description": description or None,
            "uploaded_by": actor.id,
        })
        logger.info("ProofService: proof %s registered for order %s", proof.id, order_id)
        return proof

    async def confirm_proof(self, proof_id: UUID, file_url: str, actor: Actor) -> TransitionResult:
        """Record the uploaded file and move the order to PROOF_UPLOADED.

        Additional proofs on an order that is already PROOF_UPLOADED are
        recorded without another transition.
        """
        proof = await self._repo.get_by_id(proof_id)
        if proof is None:
            raise NotFoundError("Proof not found", details={"proof_id": str(proof_id)})

        async with self._orders.held_notifications():
            state = await self._orders.load_state(proof.order_id)
            if state.status is OrderStatus.PROOF_UPLOADED:
                denied = authorize_actor(state, actor)
                if denied is not None:
                    raise denied.to_exception()
                result = TransitionResult(state.id, state.status, state.assigned_to)
            else:
                result = await self._orders.transition_order_status(
                    proof.order_id, OrderStatus.PROOF_UPLOADED, actor,
                )
            await self._repo.update(proof_id, {"file_url": file_url})
        logger.info(
            "ProofService: proof %s confirmed for order %s", proof_id, proof.order_id,
            extra={"order_id": str(proof.order_id), "actor_id": str(actor.id)},
        )
        return result

    async def list_for_order(self, order_id: UUID) -> List[Proof]:
        await self._orders.load_state(order_id)
        return await self._repo.list_for_order(order_id)
