"""Tests for the credit monitor batch pass."""

from __future__ import annotations

from datetime import timedelta

import pytest
from conftest import NOW, put_record

from interview_ai.adapters.outbound.event_bus import InProcessEventBus
from interview_ai.adapters.outbound.persistence.repositories import SQLAlchemyCreditStore
from interview_ai.application.consumers import ProviderAlertConsumer
from interview_ai.application.services import CreditMonitorService
from interview_ai.domain.enums import ExhaustionReason


class RacingStore(SQLAlchemyCreditStore):
    """Lands one usage increment right before the first compare-and-set."""

    def __init__(self, inner: SQLAlchemyCreditStore, codename: str) -> None:
        super().__init__(inner._session_factory)
        self._codename = codename
        self.cas_calls = 0

    async def compare_and_set(self, expected, updated) -> bool:
        if expected.codename == self._codename:
            self.cas_calls += 1
            if self.cas_calls == 1:
                await self.increment_usage(self._codename, requests=1, now=NOW)
        return await super().compare_and_set(expected, updated)


class AlwaysLosingStore(SQLAlchemyCreditStore):
    def __init__(self, inner: SQLAlchemyCreditStore) -> None:
        super().__init__(inner._session_factory)
        self.cas_calls = 0

    async def compare_and_set(self, expected, updated) -> bool:
        self.cas_calls += 1
        return False


class TestCheckCredits:
    @pytest.mark.asyncio
    async def test_quiet_pass_changes_nothing(self, store) -> None:
        report = await CreditMonitorService(store).check_credits(now=NOW)

        assert report.updated_models == []
        assert report.exhausted_models == []
        assert report.timestamp == NOW

    @pytest.mark.asyncio
    async def test_daily_rollover_clears_counter_and_reenables(self, store, make_record) -> None:
        two_days_ago = NOW - timedelta(days=2)
        await put_record(
            store,
            make_record(
                "Titan",
                credit_status=False,
                daily_usage=150,
                daily_limit=100,
                monthly_usage=150,
                monthly_limit=30000,
                last_reset_daily=two_days_ago,
            ),
        )

        report = await CreditMonitorService(store).check_credits(now=NOW)

        assert report.updated_models == ["Titan"]
        assert report.exhausted_models == []
        record = await store.get_provider("Titan")
        assert record is not None
        assert record.daily_usage == 0
        assert record.monthly_usage == 150
        assert record.credit_status is True
        assert record.last_reset_daily == NOW

    @pytest.mark.asyncio
    async def test_exhaustion_is_reported_and_published(self, store, make_record) -> None:
        await put_record(store, make_record("Athena", daily_usage=500, daily_limit=500, monthly_limit=10000))
        bus = InProcessEventBus()
        alerts = ProviderAlertConsumer()
        alerts.register(bus)

        report = await CreditMonitorService(store, bus).check_credits(now=NOW)

        [notice] = report.exhausted_models
        assert notice.codename == "Athena"
        assert notice.reason == ExhaustionReason.DAILY.value
        assert (notice.usage, notice.limit) == (500, 500)
        assert [e.codename for e in alerts.exhausted] == ["Athena"]
        record = await store.get_provider("Athena")
        assert record is not None and record.credit_status is False

    @pytest.mark.asyncio
    async def test_already_off_provider_is_not_reannounced(self, store, make_record) -> None:
        await put_record(
            store,
            make_record("Athena", credit_status=False, daily_usage=500, daily_limit=500, monthly_limit=10000),
        )

        report = await CreditMonitorService(store).check_credits(now=NOW)

        assert report.exhausted_models == []
        assert report.updated_models == []

    @pytest.mark.asyncio
    async def test_lost_race_is_retried_on_fresh_row(self, store, make_record) -> None:
        await put_record(
            store,
            make_record("Vox", daily_usage=40, daily_limit=100, monthly_usage=40, last_reset_daily=NOW - timedelta(days=1)),
        )
        racing = RacingStore(store, "Vox")

        report = await CreditMonitorService(racing).check_credits(now=NOW)

        assert racing.cas_calls == 2
        assert report.updated_models == ["Vox"]
        record = await store.get_provider("Vox")
        assert record is not None
        # The racing increment was counted before the reset, not lost after it.
        assert record.daily_usage == 0
        assert record.monthly_usage == 41

    @pytest.mark.asyncio
    async def test_gives_up_after_configured_attempts(self, store, make_record) -> None:
        await put_record(store, make_record("Vox", daily_usage=100, daily_limit=100))
        losing = AlwaysLosingStore(store)

        report = await CreditMonitorService(losing, cas_attempts=2).check_credits(now=NOW)

        assert losing.cas_calls == 2
        assert report.updated_models == []

    @pytest.mark.asyncio
    async def test_rerun_is_idempotent(self, store, make_record) -> None:
        await put_record(store, make_record("Titan", daily_usage=100, daily_limit=100))
        service = CreditMonitorService(store)

        first = await service.check_credits(now=NOW)
        second = await service.check_credits(now=NOW)

        assert first.updated_models == ["Titan"]
        assert second.updated_models == []
        assert second.exhausted_models == []


class TestResetAndListing:
    @pytest.mark.asyncio
    async def test_reset_credits_restores_everything(self, store, make_record) -> None:
        await put_record(store, make_record("Orion", credit_status=False, daily_usage=9))
        later = NOW + timedelta(hours=3)

        count = await CreditMonitorService(store).reset_credits(now=later)

        assert count == 7
        for record in await store.list_providers():
            assert record.credit_status is True
            assert (record.daily_usage, record.monthly_usage) == (0, 0)
            assert record.last_reset_daily == later

    @pytest.mark.asyncio
    async def test_exhausted_models_carry_reason(self, store, make_record) -> None:
        await put_record(
            store,
            make_record("Titan", credit_status=False, monthly_usage=30000, daily_limit=1000, monthly_limit=30000),
        )
        await put_record(store, make_record("Nova", credit_status=False))

        exhausted = {m.record.codename: m.reason for m in await CreditMonitorService(store).get_exhausted_models()}

        assert exhausted == {
            "Titan": ExhaustionReason.MONTHLY.value,
            "Nova": ExhaustionReason.MONTHLY.value,
        }
