"""FastAPI application entry-point.

Assembles routers, middleware, exception handlers, and lifecycle hooks.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from interview_ai import __version__
from interview_ai.adapters.inbound.rest.routers import (
    credit_monitor_router,
    health_router,
    metrics_router,
    orchestrator_router,
)
from interview_ai.adapters.outbound.persistence.models import Base
from interview_ai.adapters.outbound.persistence.seed import seed_providers
from interview_ai.config import Settings
from interview_ai.dependencies import ServiceContainer, build_container, get_cached_settings
from interview_ai.shared.errors import register_exception_handlers
from interview_ai.shared.middleware import AccessLogMiddleware, RequestIdMiddleware
from interview_ai.shared.observability import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifecycle — startup & shutdown hooks."""
    settings: Settings = app.state.settings
    container: ServiceContainer = app.state.container
    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.is_production,
    )
    logger.info(
        "application_starting",
        env=settings.app_env.value,
        question_fallback=settings.question_fallback_on_unavailable,
    )

    if settings.database_auto_create and container.engine is not None:
        async with container.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        if container.session_factory is not None:
            await seed_providers(container.session_factory)

    yield

    await container.aclose()
    logger.info("application_shutdown")


def create_app(
    settings: Settings | None = None,
    container: ServiceContainer | None = None,
) -> FastAPI:
    """Application factory — creates a fully configured FastAPI instance."""
    settings = settings or (container.settings if container else get_cached_settings())

    app = FastAPI(
        title="Interview AI Orchestrator",
        description=(
            "Routes interview question generation, speech synthesis, transcription, "
            "and response evaluation across quota-gated AI providers, with "
            "single-strike failover and deterministic fallback content."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.container = container or build_container(settings)

    # ── Middleware (order matters: last added = outermost) ───
    cors_origins = settings.cors_origins
    # CORSMiddleware does not allow ["*"] together with allow_credentials.
    allow_all_origins = "*" in cors_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[] if allow_all_origins else cors_origins,
        allow_origin_regex=".*" if allow_all_origins else None,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # ── Exception handlers ───────────────────────────────────
    register_exception_handlers(app)

    # ── REST routers (versioned) ─────────────────────────────
    api_v1 = "/api/v1"
    app.include_router(health_router, prefix=api_v1)
    if settings.prometheus_enabled:
        app.include_router(metrics_router, prefix=api_v1)
    app.include_router(orchestrator_router, prefix=api_v1)
    app.include_router(credit_monitor_router, prefix=api_v1)

    return app


def get_app() -> FastAPI:
    """Uvicorn factory entry-point: ``uvicorn interview_ai.main:get_app --factory``."""
    return create_app()
