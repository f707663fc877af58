"""Event consumers (handlers) for domain events.

Turns provider state changes into operator-facing log lines and counters.
"""

from __future__ import annotations

import structlog

from interview_ai.domain.events import (
    PROVIDER_EXHAUSTED,
    PROVIDER_TRIPPED,
    ProviderExhaustedEvent,
    ProviderTrippedEvent,
)
from interview_ai.ports.outbound import EventBusPort
from interview_ai.shared.observability.metrics import PROVIDER_EXHAUSTIONS

logger = structlog.get_logger(__name__)


class ProviderAlertConsumer:
    """Raises the alarm when a provider drops out of rotation."""

    def __init__(self) -> None:
        self.exhausted: list[ProviderExhaustedEvent] = []
        self.tripped: list[ProviderTrippedEvent] = []

    def register(self, bus: EventBusPort) -> None:
        bus.subscribe(PROVIDER_EXHAUSTED, self.handle_exhausted)
        bus.subscribe(PROVIDER_TRIPPED, self.handle_tripped)

    async def handle_exhausted(self, event: ProviderExhaustedEvent) -> None:
        self.exhausted.append(event)
        PROVIDER_EXHAUSTIONS.labels(provider=event.codename, reason=event.reason).inc()
        logger.warning(
            "provider_credits_exhausted",
            provider=event.codename,
            reason=event.reason,
            usage=event.usage,
            limit=event.limit,
            occurred_at=event.occurred_at.isoformat(),
        )

    async def handle_tripped(self, event: ProviderTrippedEvent) -> None:
        self.tripped.append(event)
        logger.warning(
            "provider_out_of_rotation",
            provider=event.codename,
            capability=event.capability,
            error=event.error,
            occurred_at=event.occurred_at.isoformat(),
        )
