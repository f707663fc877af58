"""Shared test fixtures."""

from __future__ import annotations

import dataclasses
from collections.abc import AsyncIterator, Callable, Iterable
from datetime import datetime, timezone

import pytest

from interview_ai.adapters.outbound.persistence.database import (
    create_engine,
    create_session_factory,
)
from interview_ai.adapters.outbound.persistence.models import Base
from interview_ai.adapters.outbound.persistence.repositories import SQLAlchemyCreditStore
from interview_ai.adapters.outbound.persistence.seed import default_records, seed_providers
from interview_ai.config import Settings, get_settings
from interview_ai.domain.entities import ProviderRecord
from interview_ai.domain.enums import Capability
from interview_ai.domain.value_objects import InterviewContext, ProviderResult
from interview_ai.ports.outbound import ProviderPort
from interview_ai.shared.providers.types import CandidateSlot

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


# ═══════════════════════════════════════════════════════════════
#  Records
# ═══════════════════════════════════════════════════════════════
@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_record() -> Callable[..., ProviderRecord]:
    def _make(codename: str = "Orion", **overrides: object) -> ProviderRecord:
        base = ProviderRecord(
            codename=codename,
            original_name=f"{codename} model",
            daily_limit=100,
            monthly_limit=1000,
            last_reset_daily=NOW,
            last_reset_monthly=NOW,
            last_checked=NOW,
        )
        return dataclasses.replace(base, **overrides)

    return _make


# ═══════════════════════════════════════════════════════════════
#  Credit store (file-backed SQLite per test)
# ═══════════════════════════════════════════════════════════════
@pytest.fixture
def settings(tmp_path) -> Settings:
    return get_settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path}/credits.db",
        groq_api_key="test-groq",
        mistral_api_key="test-mistral",
        anthropic_api_key="test-anthropic",
        elevenlabs_api_key="test-elevenlabs",
        azure_speech_key="test-azure",
        azure_speech_region="westeurope",
        prometheus_enabled=True,
    )


@pytest.fixture
async def store(settings) -> AsyncIterator[SQLAlchemyCreditStore]:
    engine = create_engine(settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = create_session_factory(engine)
    await seed_providers(factory, default_records(NOW))
    yield SQLAlchemyCreditStore(factory)
    await engine.dispose()


async def put_record(store: SQLAlchemyCreditStore, record: ProviderRecord) -> None:
    """Overwrite a provider row unconditionally (test setup only)."""
    current = await store.get_provider(record.codename)
    assert current is not None
    assert await store.compare_and_set(current, record)


# ═══════════════════════════════════════════════════════════════
#  Scripted provider adapters
# ═══════════════════════════════════════════════════════════════
class ScriptedAdapter(ProviderPort):
    """Provider double that replays a fixed list of results."""

    def __init__(
        self,
        codename: str,
        capability: Capability,
        results: Iterable[ProviderResult] = (),
        *,
        configured: bool = True,
    ) -> None:
        self.codename = codename
        self.capability = capability
        self._results = list(results)
        self._configured = configured
        self.calls: list[InterviewContext] = []

    @property
    def is_configured(self) -> bool:
        return self._configured

    async def invoke(self, context: InterviewContext) -> ProviderResult:
        self.calls.append(context)
        if not self._results:
            return ProviderResult.failure(f"{self.codename} has no scripted result")
        return self._results.pop(0)


def ok(value: str) -> ProviderResult:
    return ProviderResult.success(value)


def fail(error: str = "boom") -> ProviderResult:
    return ProviderResult.failure(error)


def slots_for(*adapters: ScriptedAdapter) -> dict[Capability, tuple[CandidateSlot, ...]]:
    """Group adapters into per-capability priority lists, preserving argument order."""
    grouped: dict[Capability, list[CandidateSlot]] = {c: [] for c in Capability}
    for adapter in adapters:
        grouped[adapter.capability].append(CandidateSlot(adapter.codename, adapter))
    return {c: tuple(entries) for c, entries in grouped.items()}
