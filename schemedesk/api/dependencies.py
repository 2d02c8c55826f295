"""FastAPI dependency providers."""
from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Optional, Protocol

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from schemedesk.core.exceptions import ConfigurationError, UnauthorizedError
from schemedesk.infra.payments.razorpay import RazorpayGateway
from schemedesk.lifecycle.types import Actor, Principal
from schemedesk.services.notification_service import NotificationOutbox, Notifier
from schemedesk.services.order_service import OrderService


class Authenticator(Protocol):
    """Resolves a bearer token to the calling principal, or None if invalid."""

    async def resolve(self, token: str) -> Optional[Principal]: ...


async def get_notifier(request: Request) -> AsyncGenerator[Optional[Notifier], None]:
    """Per-request outbox in front of the app notifier.

    ``get_session`` depends on this, so its commit runs first on the way out;
    the outbox is flushed only when the request and its commit succeeded.
    """
    notifier: Optional[Notifier] = getattr(request.app.state, "notifier", None)
    if notifier is None:
        yield None
        return
    outbox = NotificationOutbox(notifier)
    try:
        yield outbox
    except Exception:
        outbox.discard()
        raise
    await outbox.flush()


async def get_session(
    request: Request,
    _notifier: Optional[Notifier] = Depends(get_notifier),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a transactional AsyncSession from the app-level session factory."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_principal(request: Request) -> Principal:
    token = _bearer_token(request)
    if token is None:
        raise UnauthorizedError("Authentication required")
    authenticator: Optional[Authenticator] = getattr(request.app.state, "authenticator", None)
    if authenticator is None:
        raise UnauthorizedError("Authentication is not configured")
    principal = await authenticator.resolve(token)
    if principal is None:
        raise UnauthorizedError("Invalid or expired token")
    return principal


async def get_admin(principal: Principal = Depends(get_principal)) -> Actor:
    """The caller as an acting admin; FORBIDDEN for citizens."""
    return principal.as_actor()


def get_gateway(request: Request) -> RazorpayGateway:
    gateway = getattr(request.app.state, "payment_gateway", None)
    if gateway is None:
        raise ConfigurationError("Payment gateway is not configured")
    return gateway


def get_order_service(
    session: AsyncSession = Depends(get_session),
    notifier: Optional[Notifier] = Depends(get_notifier),
) -> OrderService:
    return OrderService.from_session(session, notifier)
