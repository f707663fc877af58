"""Usage tracker — records every successful provider call.

Two writes, two transactions:

    1. append a row to the usage log
    2. atomically bump the aggregate counters on the provider row

The pair is not atomic.  A crash between them leaves the log ahead of the
aggregates, so the aggregates can undercount; they never overcount.  A log
write that fails outright is logged and skipped: the counters enforce quota,
the log is evidence.

The increment that pushes a provider over a limit switches it off in the
store; that edge is announced here, since the credit monitor will later read
a row that is already off.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from interview_ai.domain.entities import UsageRecord, UsageSnapshot
from interview_ai.domain.exceptions import CreditStoreError
from interview_ai.ports.outbound import CreditStorePort, EventBusPort
from interview_ai.shared.observability.metrics import USAGE_RECORDS
from interview_ai.shared.providers.availability import exhaustion_notice
from interview_ai.shared.providers.breaker import announce_exhaustion

logger = structlog.get_logger(__name__)


class UsageTracker:
    def __init__(
        self,
        store: CreditStorePort,
        event_bus: EventBusPort | None = None,
    ) -> None:
        self._store = store
        self._event_bus = event_bus

    async def track(
        self,
        codename: str,
        session_id: str,
        *,
        requests_made: int = 1,
        tokens_used: int = 0,
        now: datetime | None = None,
    ) -> UsageSnapshot | None:
        now = now or datetime.now(timezone.utc)

        try:
            await self._store.append_usage(
                UsageRecord(
                    provider_codename=codename,
                    session_id=session_id,
                    requests_made=requests_made,
                    tokens_used=tokens_used,
                    timestamp=now,
                )
            )
        except CreditStoreError as exc:
            logger.error("usage_log_write_failed", provider=codename, error=exc.message)

        snapshot = await self._store.increment_usage(
            codename, requests=requests_made, now=now
        )
        USAGE_RECORDS.labels(provider=codename).inc()

        if snapshot is None:
            logger.warning("usage_provider_missing", provider=codename)
            return None

        logger.info(
            "usage_tracked",
            provider=codename,
            session_id=session_id,
            tokens=tokens_used,
            daily_usage=snapshot.daily_usage,
            monthly_usage=snapshot.monthly_usage,
        )
        if snapshot.newly_exhausted:
            await announce_exhaustion(
                exhaustion_notice(snapshot.as_record()),
                self._event_bus,
                source="usage",
            )
        return snapshot
