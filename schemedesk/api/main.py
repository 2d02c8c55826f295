"""schemedesk FastAPI application: entry point.

Start with:
    uvicorn schemedesk.api.main:app --reload --host 0.0.0.0 --port 8000

Bearer tokens are resolved by ``app.state.authenticator`` (see
``schemedesk.api.dependencies.Authenticator``); token issuance lives elsewhere.
Payments are disabled until RAZORPAY_KEY_ID / RAZORPAY_KEY_SECRET are set.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from schemedesk.api.dependencies import Authenticator
from schemedesk.api.routers import documents, notifications, orders, payments, proofs
from schemedesk.config import AppConfig, load_app_config, load_payment_config
from schemedesk.core.exceptions import ProjectError
from schemedesk.core.logger import configure
from schemedesk.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)
from schemedesk.infra.payments.razorpay import RazorpayGateway
from schemedesk.services.notification_service import DatabaseNotifier

logger = logging.getLogger(__name__)


def _build_gateway_from_env() -> Optional[RazorpayGateway]:
    try:
        config = load_payment_config()
    except ValueError as exc:
        logger.warning("API: payment gateway not configured (%s), payment routes disabled", exc)
        return None
    logger.info("API: Razorpay gateway ready (%s)", config.api_url)
    return RazorpayGateway(config)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ──────────────────────────────────────────────────
    configure()

    await ensure_database_exists()
    engine = build_engine()
    session_factory = build_session_factory(engine)
    await init_db()

    app.state.session_factory = session_factory
    app.state.notifier = DatabaseNotifier(session_factory)
    app.state.payment_gateway = _build_gateway_from_env()
    logger.info("API: started")

    yield

    # ── Shutdown ─────────────────────────────────────────────────
    await close_engine()
    logger.info("API: engine disposed")


async def project_error_handler(request: Request, exc: ProjectError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("API: %s %s failed: %s", request.method, request.url.path, exc.to_dict())
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def create_app(
    config: Optional[AppConfig] = None,
    *,
    authenticator: Optional[Authenticator] = None,
) -> FastAPI:
    config = config or load_app_config()
    app = FastAPI(
        title="schemedesk API",
        version="1.0.0",
        description="Scheme application marketplace: orders, payments, admin processing.",
        lifespan=lifespan,
    )
    app.state.app_config = config
    app.state.authenticator = authenticator
    app.state.notifier = None
    app.state.payment_gateway = None

    limiter = Limiter(key_func=get_remote_address, default_limits=[config.rate_limit])
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(ProjectError, project_error_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for module in (orders, payments, notifications, proofs, documents):
        app.include_router(module.router, prefix="/api/v1")

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
