"""Provisioned providers and their default quota limits.

The Alembic migration inserts the same rows; ``seed_providers`` is the
development shortcut used when ``database_auto_create`` is on, and by tests.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from interview_ai.domain.entities import ProviderRecord
from interview_ai.domain.enums import Codename

from .models import AIModelModel
from .repositories import record_to_model

logger = structlog.get_logger(__name__)

# (codename, upstream model, daily limit, monthly limit); 0 = unlimited
DEFAULT_PROVIDERS: tuple[tuple[str, str, int, int], ...] = (
    (Codename.ORION.value, "LLaMA-3.1 70B", 14400, 0),
    (Codename.TITAN.value, "Mixtral 8x7B", 1000, 30000),
    (Codename.NOVA.value, "Gemma 7B", 0, 0),
    (Codename.ATHENA.value, "Claude Haiku", 500, 10000),
    (Codename.VOX.value, "ElevenLabs", 100, 1000),
    (Codename.AETHER.value, "Azure TTS", 500, 5000),
    (Codename.ECHO.value, "Whisper", 0, 0),
)


def default_records(now: datetime | None = None) -> list[ProviderRecord]:
    now = now or datetime.now(timezone.utc)
    return [
        ProviderRecord(
            codename=codename,
            original_name=name,
            daily_limit=daily,
            monthly_limit=monthly,
            last_reset_daily=now,
            last_reset_monthly=now,
            last_checked=now,
        )
        for codename, name, daily, monthly in DEFAULT_PROVIDERS
    ]


async def seed_providers(
    session_factory: async_sessionmaker[AsyncSession],
    records: Iterable[ProviderRecord] | None = None,
    *,
    now: datetime | None = None,
) -> int:
    """Insert provider rows that do not exist yet.  Existing rows are left alone."""
    records = list(records) if records is not None else default_records(now)

    async with session_factory() as session, session.begin():
        result = await session.execute(select(AIModelModel.codename))
        existing = set(result.scalars())
        missing = [r for r in records if r.codename not in existing]
        session.add_all(record_to_model(r) for r in missing)

    if missing:
        logger.info("providers_seeded", codenames=[r.codename for r in missing])
    return len(missing)
