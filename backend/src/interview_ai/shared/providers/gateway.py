"""Failover gateway — the main entry-point for provider calls.

Composes the credit store (eligibility), the ``CandidateRouter`` (fixed
priority), the ``SingleStrikeBreaker`` and the ``UsageTracker`` into one
walk over a capability's candidates:

    eligible?  → configured?  → invoke once
        success → track usage, return
        failure → trip breaker, try the next one

The gateway never serves canned content itself; it reports *why* nothing
was served and the orchestrator picks the capability-specific fallback.
"""

from __future__ import annotations

import asyncio
import time

import structlog

from interview_ai.domain.enums import Capability
from interview_ai.domain.exceptions import CreditStoreError, ProviderCallFailedError
from interview_ai.domain.value_objects import InterviewContext
from interview_ai.ports.outbound import CreditStorePort
from interview_ai.shared.observability.metrics import PROVIDER_CALLS, PROVIDER_LATENCY
from interview_ai.shared.providers.breaker import SingleStrikeBreaker
from interview_ai.shared.providers.router import CandidateRouter
from interview_ai.shared.providers.types import (
    CandidateSlot,
    GatewayOutcome,
    OutcomeStatus,
    ProviderResult,
)
from interview_ai.shared.providers.usage import UsageTracker

logger = structlog.get_logger(__name__)


class FailoverGateway:
    """Quota-gated, single-attempt-per-provider failover.

    Usage::

        outcome = await gateway.execute(Capability.QUESTION_GENERATION, ctx)
        if outcome.served:
            ...
    """

    def __init__(
        self,
        store: CreditStorePort,
        router: CandidateRouter,
        breaker: SingleStrikeBreaker,
        usage: UsageTracker,
        *,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._store = store
        self._router = router
        self._breaker = breaker
        self._usage = usage
        self._timeout = timeout_seconds

    # ── Main entry-point ─────────────────────────────────────
    async def execute(
        self, capability: Capability, context: InterviewContext
    ) -> GatewayOutcome:
        candidates = self._router.candidates(capability)
        log = logger.bind(capability=capability.value)

        eligible_records = await self._store.list_eligible(candidates)
        eligible = {record.codename for record in eligible_records}
        if not eligible:
            log.warning("no_eligible_providers", candidates=list(candidates))
            return GatewayOutcome(
                status=OutcomeStatus.NO_ELIGIBLE,
                capability=capability,
                candidates=candidates,
            )

        errors: dict[str, str] = {}
        attempted: list[str] = []

        for slot in self._router.plan(capability, eligible):
            attempted.append(slot.codename)
            result = await self._invoke(slot, capability, context)

            if result.ok:
                await self._track(slot.codename, context, result)
                if len(attempted) > 1:
                    log.info(
                        "provider_failover_success",
                        provider=slot.codename,
                        attempts=len(attempted),
                        failed_providers=attempted[:-1],
                    )
                return GatewayOutcome(
                    status=OutcomeStatus.SERVED,
                    capability=capability,
                    candidates=candidates,
                    provider=slot.codename,
                    payload=result.value,
                    attempted=tuple(attempted),
                    errors=errors,
                )

            reason = result.error or "unknown error"
            errors[slot.codename] = reason
            await self._breaker.trip(slot.codename, capability=capability, reason=reason)

        log.warning(
            "all_providers_exhausted",
            candidates=list(candidates),
            attempted=attempted,
            errors=errors,
        )
        return GatewayOutcome(
            status=OutcomeStatus.EXHAUSTED,
            capability=capability,
            candidates=candidates,
            attempted=tuple(attempted),
            errors=errors,
        )

    # ── Single attempt ───────────────────────────────────────
    async def _invoke(
        self,
        slot: CandidateSlot,
        capability: Capability,
        context: InterviewContext,
    ) -> ProviderResult:
        log = logger.bind(provider=slot.codename, capability=capability.value)
        start = time.monotonic()
        try:
            result = await asyncio.wait_for(
                slot.adapter.invoke(context), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            result = ProviderResult.failure(
                ProviderCallFailedError(
                    slot.codename, f"Timeout after {self._timeout}s"
                ).message
            )
        latency = time.monotonic() - start

        outcome = "success" if result.ok else "failure"
        PROVIDER_CALLS.labels(
            capability=capability.value, provider=slot.codename, outcome=outcome
        ).inc()
        PROVIDER_LATENCY.labels(provider=slot.codename).observe(latency)

        if result.ok:
            log.info("provider_request_success", latency_ms=round(latency * 1000, 1))
        else:
            log.warning(
                "provider_request_failed",
                error=result.error,
                latency_ms=round(latency * 1000, 1),
            )
        return result

    async def _track(
        self, codename: str, context: InterviewContext, result: ProviderResult
    ) -> None:
        # The provider already answered; losing the usage row only undercounts.
        try:
            await self._usage.track(
                codename, context.session_id, tokens_used=result.tokens_used
            )
        except CreditStoreError as exc:
            logger.error("usage_tracking_failed", provider=codename, error=exc.message)
