"""Dependency injection container — wires adapters to ports.

Everything with a lifetime (engine, HTTP client, event bus) is built once
in ``build_container`` and parked on ``app.state``.  FastAPI's ``Depends()``
factories below only read from it, so tests can hand ``create_app`` a
container built around a SQLite store and scripted adapters.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache

import httpx
import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from interview_ai.adapters.outbound.event_bus import InProcessEventBus
from interview_ai.adapters.outbound.persistence.database import (
    create_engine,
    create_session_factory,
)
from interview_ai.adapters.outbound.persistence.repositories import SQLAlchemyCreditStore
from interview_ai.adapters.outbound.providers import build_provider_slots
from interview_ai.application.consumers import ProviderAlertConsumer
from interview_ai.application.services import (
    CreditMonitorService,
    InterviewOrchestrationService,
)
from interview_ai.config import Settings, get_settings
from interview_ai.domain.enums import Capability
from interview_ai.ports.outbound import CreditStorePort
from interview_ai.shared.providers import (
    CandidateRouter,
    CandidateSlot,
    FailoverGateway,
    SingleStrikeBreaker,
    UsageTracker,
)

logger = structlog.get_logger(__name__)


# ── Settings ─────────────────────────────────────────────────
@lru_cache(maxsize=1)
def get_cached_settings() -> Settings:
    return get_settings()


# ── Container ────────────────────────────────────────────────
@dataclass
class ServiceContainer:
    settings: Settings
    store: CreditStorePort
    event_bus: InProcessEventBus
    alerts: ProviderAlertConsumer
    gateway: FailoverGateway
    orchestrator: InterviewOrchestrationService
    credit_monitor: CreditMonitorService
    engine: AsyncEngine | None = None
    session_factory: async_sessionmaker[AsyncSession] | None = None
    http_client: httpx.AsyncClient | None = None

    async def aclose(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()
        if self.engine is not None:
            await self.engine.dispose()


def build_container(
    settings: Settings,
    *,
    store: CreditStorePort | None = None,
    slots: Mapping[Capability, Sequence[CandidateSlot]] | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ServiceContainer:
    """Assemble the object graph.

    ``store`` and ``slots`` replace the SQLAlchemy store and the real HTTP
    adapters respectively; whatever is not supplied is built from settings.
    """
    engine: AsyncEngine | None = None
    session_factory: async_sessionmaker[AsyncSession] | None = None
    if store is None:
        engine = create_engine(settings)
        session_factory = create_session_factory(engine)
        store = SQLAlchemyCreditStore(session_factory)

    if slots is None:
        http_client = http_client or httpx.AsyncClient(
            timeout=settings.provider_timeout_seconds
        )
        slots = build_provider_slots(settings, http_client)

    event_bus = InProcessEventBus()
    alerts = ProviderAlertConsumer()
    alerts.register(event_bus)

    gateway = FailoverGateway(
        store,
        CandidateRouter(slots),
        SingleStrikeBreaker(store, event_bus),
        UsageTracker(store, event_bus),
        timeout_seconds=settings.provider_timeout_seconds,
    )

    logger.debug(
        "container_built",
        store=type(store).__name__,
        capabilities=[c.value for c in slots],
    )
    return ServiceContainer(
        settings=settings,
        store=store,
        event_bus=event_bus,
        alerts=alerts,
        gateway=gateway,
        orchestrator=InterviewOrchestrationService(
            gateway,
            store,
            question_fallback_on_unavailable=settings.question_fallback_on_unavailable,
        ),
        credit_monitor=CreditMonitorService(
            store, event_bus, cas_attempts=settings.credit_check_cas_attempts
        ),
        engine=engine,
        session_factory=session_factory,
        http_client=http_client,
    )


# ── Request-scoped accessors ─────────────────────────────────
def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container  # type: ignore[no-any-return]


def get_orchestrator(
    container: ServiceContainer = Depends(get_container),
) -> InterviewOrchestrationService:
    return container.orchestrator


def get_credit_monitor(
    container: ServiceContainer = Depends(get_container),
) -> CreditMonitorService:
    return container.credit_monitor
