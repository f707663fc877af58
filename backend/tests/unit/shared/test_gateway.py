"""Tests for the failover gateway, single-strike breaker, and their store effects."""

from __future__ import annotations

import asyncio
import random

import pytest
from conftest import NOW, ScriptedAdapter, fail, ok, put_record, slots_for

from interview_ai.adapters.outbound.event_bus import InProcessEventBus
from interview_ai.adapters.outbound.persistence.repositories import SQLAlchemyCreditStore
from interview_ai.domain.enums import Capability
from interview_ai.domain.events import PROVIDER_TRIPPED, ProviderTrippedEvent
from interview_ai.domain.value_objects import InterviewContext, ProviderResult
from interview_ai.shared.providers import (
    CandidateRouter,
    FailoverGateway,
    OutcomeStatus,
    SingleStrikeBreaker,
    UsageTracker,
)

QG = Capability.QUESTION_GENERATION
CTX = InterviewContext(session_id="sess-1", question_number=2)


class ShuffledStore(SQLAlchemyCreditStore):
    """Returns eligible rows in a random order on every call."""

    def __init__(self, inner: SQLAlchemyCreditStore, seed: int) -> None:
        super().__init__(inner._session_factory)
        self._rng = random.Random(seed)

    async def list_eligible(self, codenames):
        rows = await super().list_eligible(codenames)
        self._rng.shuffle(rows)
        return rows


def _gateway(store, *adapters, bus=None, timeout: float = 30.0) -> FailoverGateway:
    return FailoverGateway(
        store,
        CandidateRouter(slots_for(*adapters)),
        SingleStrikeBreaker(store, bus),
        UsageTracker(store),
        timeout_seconds=timeout,
    )


class TestFailoverGateway:
    @pytest.mark.asyncio
    async def test_first_candidate_serves(self, store) -> None:
        orion = ScriptedAdapter("Orion", QG, [ok("Why this role?")])
        titan = ScriptedAdapter("Titan", QG, [ok("unused")])
        outcome = await _gateway(store, orion, titan).execute(QG, CTX)

        assert outcome.status == OutcomeStatus.SERVED
        assert outcome.provider == "Orion"
        assert outcome.payload == "Why this role?"
        assert outcome.attempted == ("Orion",)
        assert titan.calls == []

    @pytest.mark.asyncio
    async def test_breaker_trip_persists_and_next_candidate_serves(self, store) -> None:
        orion = ScriptedAdapter("Orion", QG, [fail("HTTP 500: upstream")])
        titan = ScriptedAdapter("Titan", QG, [ok("Describe a refactor.")])
        outcome = await _gateway(store, orion, titan).execute(QG, CTX)

        assert outcome.served
        assert outcome.provider == "Titan"
        assert outcome.errors == {"Orion": "HTTP 500: upstream"}

        orion_row = await store.get_provider("Orion")
        titan_row = await store.get_provider("Titan")
        assert orion_row is not None and orion_row.credit_status is False
        assert titan_row is not None and titan_row.credit_status is True
        assert titan_row.daily_usage == 1

    @pytest.mark.asyncio
    async def test_tripped_provider_is_not_retried_on_next_request(self, store) -> None:
        orion = ScriptedAdapter("Orion", QG, [fail(), ok("never")])
        titan = ScriptedAdapter("Titan", QG, [ok("one"), ok("two")])
        gateway = _gateway(store, orion, titan)

        await gateway.execute(QG, CTX)
        second = await gateway.execute(QG, CTX)

        assert second.provider == "Titan"
        assert len(orion.calls) == 1

    @pytest.mark.asyncio
    async def test_no_eligible(self, store) -> None:
        for codename in ("Orion", "Titan", "Nova"):
            await store.mark_unavailable(codename, now=NOW)
        orion = ScriptedAdapter("Orion", QG)
        outcome = await _gateway(store, orion).execute(QG, CTX)

        assert outcome.status == OutcomeStatus.NO_ELIGIBLE
        assert outcome.attempted == ()
        assert orion.calls == []

    @pytest.mark.asyncio
    async def test_all_fail_is_exhausted_and_every_candidate_tripped(self, store) -> None:
        adapters = [ScriptedAdapter(c, QG, [fail(f"{c} down")]) for c in ("Orion", "Titan", "Nova")]
        outcome = await _gateway(store, *adapters).execute(QG, CTX)

        assert outcome.status == OutcomeStatus.EXHAUSTED
        assert outcome.attempted == ("Orion", "Titan", "Nova")
        assert set(outcome.errors) == {"Orion", "Titan", "Nova"}
        assert {r.codename for r in await store.list_exhausted()} == {"Orion", "Titan", "Nova"}

    @pytest.mark.asyncio
    async def test_unconfigured_candidate_is_skipped_not_tripped(self, store) -> None:
        orion = ScriptedAdapter("Orion", QG, configured=False)
        titan = ScriptedAdapter("Titan", QG, [ok("q")])
        outcome = await _gateway(store, orion, titan).execute(QG, CTX)

        assert outcome.provider == "Titan"
        assert orion.calls == []
        orion_row = await store.get_provider("Orion")
        assert orion_row is not None and orion_row.credit_status is True

    @pytest.mark.asyncio
    async def test_timeout_counts_as_failure(self, store) -> None:
        class SlowAdapter(ScriptedAdapter):
            async def invoke(self, context: InterviewContext) -> ProviderResult:
                await asyncio.sleep(1.0)
                return ok("too late")

        slow = SlowAdapter("Orion", QG)
        titan = ScriptedAdapter("Titan", QG, [ok("fast")])
        outcome = await _gateway(store, slow, titan, timeout=0.05).execute(QG, CTX)

        assert outcome.provider == "Titan"
        assert "Timeout" in outcome.errors["Orion"]

    @pytest.mark.asyncio
    async def test_trip_publishes_event(self, store) -> None:
        bus = InProcessEventBus()
        seen: list[ProviderTrippedEvent] = []

        async def _collect(event: ProviderTrippedEvent) -> None:
            seen.append(event)

        bus.subscribe(PROVIDER_TRIPPED, _collect)
        orion = ScriptedAdapter("Orion", QG, [fail("bad key")])
        await _gateway(store, orion, bus=bus).execute(QG, CTX)

        assert len(seen) == 1
        assert seen[0].codename == "Orion"
        assert seen[0].capability == QG.value
        assert seen[0].error == "bad key"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seed", range(8))
    async def test_order_is_invariant_to_store_ordering(self, store, seed) -> None:
        await store.mark_unavailable("Orion", now=NOW)
        shuffled = ShuffledStore(store, seed)
        titan = ScriptedAdapter("Titan", QG, [ok("titan")])
        nova = ScriptedAdapter("Nova", QG, [ok("nova")])
        orion = ScriptedAdapter("Orion", QG, [ok("orion")])

        outcome = await _gateway(shuffled, orion, titan, nova).execute(QG, CTX)

        assert outcome.provider == "Titan"
        assert nova.calls == []

    @pytest.mark.asyncio
    async def test_usage_is_recorded_only_for_the_serving_provider(self, store) -> None:
        orion = ScriptedAdapter("Orion", QG, [fail()])
        titan = ScriptedAdapter("Titan", QG, [ProviderResult.success("abc", tokens_used=42)])
        await _gateway(store, orion, titan).execute(QG, CTX)

        usage = await store.list_usage()
        assert [(u.provider_codename, u.session_id, u.tokens_used) for u in usage] == [
            ("Titan", "sess-1", 42)
        ]
        orion_row = await store.get_provider("Orion")
        assert orion_row is not None and orion_row.daily_usage == 0

    @pytest.mark.asyncio
    async def test_limit_reached_by_usage_takes_provider_out(self, store, make_record) -> None:
        await put_record(store, make_record("Titan", daily_usage=999, daily_limit=1000, monthly_limit=30000))
        titan = ScriptedAdapter("Titan", QG, [ok("last one")])
        outcome = await _gateway(store, titan).execute(QG, CTX)

        assert outcome.served
        row = await store.get_provider("Titan")
        assert row is not None
        assert row.daily_usage == 1000
        assert row.credit_status is False
