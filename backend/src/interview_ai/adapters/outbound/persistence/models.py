"""SQLAlchemy ORM models for the credit store.

These are *infrastructure* models — they map to database tables but are
separate from domain entities.  Converters translate between the two layers.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


class AIModelModel(Base):
    """One row per provider: quota limits, running counters, and eligibility."""

    __tablename__ = "ai_models"

    codename: Mapped[str] = mapped_column(String(32), primary_key=True)
    original_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    credit_status: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )
    daily_usage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    monthly_usage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    daily_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    monthly_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_reset_daily: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    last_reset_monthly: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    last_checked: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (Index("ix_ai_models_credit_status", "credit_status"),)


class UsageTrackingModel(Base):
    """Append-only log of successful provider calls."""

    __tablename__ = "ai_usage_tracking"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    model_codename: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    session_id: Mapped[str] = mapped_column(Text, nullable=False, default="")
    requests_made: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    tokens_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (Index("ix_ai_usage_tracking_created", "created_at"),)
