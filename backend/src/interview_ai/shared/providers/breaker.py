"""Single-strike breaker — one failed call takes a provider out of rotation.

Unlike a classic three-state circuit breaker there is no half-open trial call:
the provider stays off until the credit monitor's daily/monthly reset (or an
admin ``reset_credits``) turns it back on.  The state lives in the credit
store so every worker sees the trip immediately.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from interview_ai.domain.enums import Capability
from interview_ai.domain.events import ProviderExhaustedEvent, ProviderTrippedEvent
from interview_ai.domain.value_objects import ExhaustionNotice
from interview_ai.ports.outbound import CreditStorePort, EventBusPort
from interview_ai.shared.observability.metrics import BREAKER_TRIPS

logger = structlog.get_logger(__name__)


class SingleStrikeBreaker:
    def __init__(
        self,
        store: CreditStorePort,
        event_bus: EventBusPort | None = None,
    ) -> None:
        self._store = store
        self._event_bus = event_bus

    async def trip(
        self,
        codename: str,
        *,
        capability: Capability,
        reason: str,
        now: datetime | None = None,
    ) -> bool:
        """Persist ``credit_status = False`` for ``codename``.

        Returns whether a row was updated.
        """
        now = now or datetime.now(timezone.utc)
        updated = await self._store.mark_unavailable(codename, now=now)

        BREAKER_TRIPS.labels(provider=codename).inc()
        logger.warning(
            "provider_tripped",
            provider=codename,
            capability=capability.value,
            error=reason,
            row_updated=updated,
        )

        if self._event_bus is not None:
            await self._event_bus.publish(
                ProviderTrippedEvent(
                    codename=codename,
                    capability=capability.value,
                    error=reason,
                )
            )
        return updated


async def announce_exhaustion(
    notice: ExhaustionNotice,
    event_bus: EventBusPort | None = None,
    *,
    source: str,
) -> None:
    """Log and publish a provider running out of quota."""
    logger.warning(
        "provider_exhausted",
        provider=notice.codename,
        reason=notice.reason,
        usage=notice.usage,
        limit=notice.limit,
        source=source,
    )
    if event_bus is not None:
        await event_bus.publish(
            ProviderExhaustedEvent(
                codename=notice.codename,
                reason=notice.reason,
                usage=notice.usage,
                limit=notice.limit,
            )
        )
