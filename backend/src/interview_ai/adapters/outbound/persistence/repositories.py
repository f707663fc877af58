"""SQLAlchemy implementation of the credit store port.

Every method runs in its own short transaction.  Mutations that can race
with concurrent requests are expressed as a single UPDATE so the database,
not Python, serialises them.
"""

from __future__ import annotations

import dataclasses
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from sqlalchemy import false, select, text, true, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from interview_ai.domain.entities import ProviderRecord, UsageRecord, UsageSnapshot
from interview_ai.domain.exceptions import CreditStoreError
from interview_ai.ports.outbound import CreditStorePort

from .models import AIModelModel, UsageTrackingModel

logger = structlog.get_logger(__name__)


# ── Converters ───────────────────────────────────────────────
def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _model_to_record(m: AIModelModel) -> ProviderRecord:
    return ProviderRecord(
        codename=m.codename,
        original_name=m.original_name,
        credit_status=m.credit_status,
        daily_usage=m.daily_usage,
        monthly_usage=m.monthly_usage,
        daily_limit=m.daily_limit,
        monthly_limit=m.monthly_limit,
        last_reset_daily=_as_utc(m.last_reset_daily),
        last_reset_monthly=_as_utc(m.last_reset_monthly),
        last_checked=_as_utc(m.last_checked),
    )


def record_to_model(r: ProviderRecord) -> AIModelModel:
    return AIModelModel(
        codename=r.codename,
        original_name=r.original_name,
        credit_status=r.credit_status,
        daily_usage=r.daily_usage,
        monthly_usage=r.monthly_usage,
        daily_limit=r.daily_limit,
        monthly_limit=r.monthly_limit,
        last_reset_daily=r.last_reset_daily,
        last_reset_monthly=r.last_reset_monthly,
        last_checked=r.last_checked,
    )


def _usage_to_model(u: UsageRecord) -> UsageTrackingModel:
    return UsageTrackingModel(
        model_codename=u.provider_codename,
        session_id=u.session_id,
        requests_made=u.requests_made,
        tokens_used=u.tokens_used,
        created_at=u.timestamp,
    )


# ═══════════════════════════════════════════════════════════════
#  SQLAlchemy Credit Store
# ═══════════════════════════════════════════════════════════════
class SQLAlchemyCreditStore(CreditStorePort):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session, session.begin():
                yield session
        except SQLAlchemyError as exc:
            logger.error("credit_store_failure", operation=operation, error=str(exc))
            raise CreditStoreError(f"Credit store {operation} failed") from exc

    # ── Reads ────────────────────────────────────────────────
    async def list_providers(self) -> list[ProviderRecord]:
        async with self._transaction("list_providers") as session:
            result = await session.execute(
                select(AIModelModel).order_by(AIModelModel.codename)
            )
            return [_model_to_record(m) for m in result.scalars()]

    async def get_provider(self, codename: str) -> ProviderRecord | None:
        async with self._transaction("get_provider") as session:
            model = await session.get(AIModelModel, codename)
            return _model_to_record(model) if model else None

    async def list_eligible(self, codenames: Sequence[str]) -> list[ProviderRecord]:
        if not codenames:
            return []
        async with self._transaction("list_eligible") as session:
            result = await session.execute(
                select(AIModelModel).where(
                    AIModelModel.codename.in_(list(codenames)),
                    AIModelModel.credit_status.is_(true()),
                )
            )
            return [_model_to_record(m) for m in result.scalars()]

    async def list_exhausted(self) -> list[ProviderRecord]:
        async with self._transaction("list_exhausted") as session:
            result = await session.execute(
                select(AIModelModel)
                .where(AIModelModel.credit_status.is_(false()))
                .order_by(AIModelModel.codename)
            )
            return [_model_to_record(m) for m in result.scalars()]

    # ── Atomic writes ────────────────────────────────────────
    async def compare_and_set(
        self, expected: ProviderRecord, updated: ProviderRecord
    ) -> bool:
        stmt = (
            update(AIModelModel)
            .where(
                AIModelModel.codename == expected.codename,
                AIModelModel.daily_usage == expected.daily_usage,
                AIModelModel.monthly_usage == expected.monthly_usage,
                AIModelModel.credit_status == expected.credit_status,
                AIModelModel.last_reset_daily == expected.last_reset_daily,
                AIModelModel.last_reset_monthly == expected.last_reset_monthly,
            )
            .values(
                credit_status=updated.credit_status,
                daily_usage=updated.daily_usage,
                monthly_usage=updated.monthly_usage,
                last_reset_daily=updated.last_reset_daily,
                last_reset_monthly=updated.last_reset_monthly,
                last_checked=updated.last_checked,
            )
            .execution_options(synchronize_session=False)
        )
        async with self._transaction("compare_and_set") as session:
            result = await session.execute(stmt)
            return result.rowcount == 1

    async def mark_unavailable(self, codename: str, *, now: datetime) -> bool:
        stmt = (
            update(AIModelModel)
            .where(AIModelModel.codename == codename)
            .values(credit_status=False, last_checked=now)
            .execution_options(synchronize_session=False)
        )
        async with self._transaction("mark_unavailable") as session:
            result = await session.execute(stmt)
            return result.rowcount == 1

    async def increment_usage(
        self, codename: str, *, requests: int, now: datetime
    ) -> UsageSnapshot | None:
        bump = (
            update(AIModelModel)
            .where(AIModelModel.codename == codename)
            .values(
                daily_usage=AIModelModel.daily_usage + requests,
                monthly_usage=AIModelModel.monthly_usage + requests,
                last_checked=now,
            )
            .returning(
                AIModelModel.daily_usage,
                AIModelModel.monthly_usage,
                AIModelModel.daily_limit,
                AIModelModel.monthly_limit,
                AIModelModel.credit_status,
            )
            .execution_options(synchronize_session=False)
        )
        switch_off = (
            update(AIModelModel)
            .where(
                AIModelModel.codename == codename,
                AIModelModel.credit_status.is_(true()),
            )
            .values(credit_status=False)
            .execution_options(synchronize_session=False)
        )
        # Both statements share one transaction; the bump holds the row lock,
        # so exactly one caller observes the switch-off.
        async with self._transaction("increment_usage") as session:
            row = (await session.execute(bump)).one_or_none()
            if row is None:
                return None
            snapshot = UsageSnapshot(
                codename=codename,
                daily_usage=row.daily_usage,
                monthly_usage=row.monthly_usage,
                credit_status=bool(row.credit_status),
                daily_limit=row.daily_limit,
                monthly_limit=row.monthly_limit,
            )
            if not snapshot.as_record().is_exhausted:
                return snapshot
            switched = (await session.execute(switch_off)).rowcount == 1
            return dataclasses.replace(
                snapshot, credit_status=False, newly_exhausted=switched
            )

    async def append_usage(self, record: UsageRecord) -> None:
        async with self._transaction("append_usage") as session:
            session.add(_usage_to_model(record))

    async def reset_all(self, *, now: datetime) -> int:
        stmt = (
            update(AIModelModel)
            .values(
                credit_status=True,
                daily_usage=0,
                monthly_usage=0,
                last_reset_daily=now,
                last_reset_monthly=now,
                last_checked=now,
            )
            .execution_options(synchronize_session=False)
        )
        async with self._transaction("reset_all") as session:
            result = await session.execute(stmt)
            return result.rowcount

    async def ping(self) -> bool:
        try:
            async with self._transaction("ping") as session:
                await session.execute(text("SELECT 1"))
        except CreditStoreError:
            return False
        return True

    # ── Usage log reads ──────────────────────────────────────
    async def list_usage(self, codename: str | None = None) -> list[UsageRecord]:
        stmt = select(UsageTrackingModel).order_by(UsageTrackingModel.id)
        if codename:
            stmt = stmt.where(UsageTrackingModel.model_codename == codename)
        async with self._transaction("list_usage") as session:
            result = await session.execute(stmt)
            return [
                UsageRecord(
                    provider_codename=m.model_codename,
                    session_id=m.session_id,
                    requests_made=m.requests_made,
                    tokens_used=m.tokens_used,
                    timestamp=_as_utc(m.created_at),
                )
                for m in result.scalars()
            ]
