"""Credit Monitor Service.

Batch driver around the availability gate: resets counters whose window has
rolled over, takes exhausted providers out of rotation, and re-enables
providers whose limits have reset.

Writes are compare-and-set against the row as read, so a usage increment
that lands between our read and our write is never overwritten; on a miss
the single row is re-read and re-evaluated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

import structlog

from interview_ai.domain.entities import ProviderRecord
from interview_ai.domain.value_objects import ExhaustionNotice
from interview_ai.ports.outbound import CreditStorePort, EventBusPort
from interview_ai.shared.providers.availability import (
    GateDecision,
    evaluate,
    exhaustion_reason,
)
from interview_ai.shared.providers.breaker import announce_exhaustion

logger = structlog.get_logger(__name__)


@dataclass
class CreditCheckReport:
    timestamp: datetime
    exhausted_models: list[ExhaustionNotice] = field(default_factory=list)
    updated_models: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ExhaustedModel:
    record: ProviderRecord
    reason: str


class CreditMonitorService:
    def __init__(
        self,
        store: CreditStorePort,
        event_bus: EventBusPort | None = None,
        *,
        cas_attempts: int = 3,
    ) -> None:
        self._store = store
        self._event_bus = event_bus
        self._cas_attempts = cas_attempts

    async def check_credits(self, now: datetime | None = None) -> CreditCheckReport:
        now = now or datetime.now(timezone.utc)
        report = CreditCheckReport(timestamp=now)

        for record in await self._store.list_providers():
            decision = await self._settle(record, now)
            if decision is None or not decision.changed:
                continue
            report.updated_models.append(decision.record.codename)
            if decision.exhausted is not None:
                report.exhausted_models.append(decision.exhausted)
                await announce_exhaustion(
                    decision.exhausted, self._event_bus, source="credit_check"
                )

        logger.info(
            "credit_check_completed",
            updated=len(report.updated_models),
            exhausted=[n.codename for n in report.exhausted_models],
        )
        return report

    async def _settle(self, record: ProviderRecord, now: datetime) -> GateDecision | None:
        """Evaluate and persist one provider, retrying on a lost race."""
        current: ProviderRecord | None = record
        for attempt in range(1, self._cas_attempts + 1):
            if current is None:
                return None
            decision = evaluate(now, current)
            if not decision.changed:
                return decision
            if await self._store.compare_and_set(current, decision.record):
                return decision
            logger.info(
                "credit_check_conflict", provider=record.codename, attempt=attempt
            )
            current = await self._store.get_provider(record.codename)

        logger.warning(
            "credit_check_gave_up", provider=record.codename, attempts=self._cas_attempts
        )
        return None

    async def reset_credits(self, now: datetime | None = None) -> int:
        now = now or datetime.now(timezone.utc)
        count = await self._store.reset_all(now=now)
        logger.info("credits_reset", providers=count)
        return count

    async def get_exhausted_models(self) -> list[ExhaustedModel]:
        return [
            ExhaustedModel(record=record, reason=exhaustion_reason(record).value)
            for record in await self._store.list_exhausted()
        ]
