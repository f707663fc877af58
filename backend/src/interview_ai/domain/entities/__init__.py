"""Domain entities — provider quota state and the usage log.

``ProviderRecord`` is the unit the availability gate reasons about; it is
mutated only through the gate, the credit monitor, and the single-strike
breaker.  ``UsageRecord`` rows are append-only evidence for its counters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════════
#  Provider quota state
# ═══════════════════════════════════════════════════════════════
@dataclass(frozen=True, slots=True)
class ProviderRecord:
    """Persisted quota state of one provider.

    Limits of ``0`` mean "unlimited" for that dimension.
    """

    codename: str
    original_name: str = ""
    credit_status: bool = True
    daily_usage: int = 0
    monthly_usage: int = 0
    daily_limit: int = 0
    monthly_limit: int = 0
    last_reset_daily: datetime = field(default_factory=_utcnow)
    last_reset_monthly: datetime = field(default_factory=_utcnow)
    last_checked: datetime = field(default_factory=_utcnow)

    @property
    def daily_exceeded(self) -> bool:
        return self.daily_limit > 0 and self.daily_usage >= self.daily_limit

    @property
    def monthly_exceeded(self) -> bool:
        return self.monthly_limit > 0 and self.monthly_usage >= self.monthly_limit

    @property
    def is_exhausted(self) -> bool:
        return self.daily_exceeded or self.monthly_exceeded

    def same_state(self, other: ProviderRecord) -> bool:
        """Equality that ignores the ``last_checked`` bookkeeping stamp."""
        return (
            self.credit_status == other.credit_status
            and self.daily_usage == other.daily_usage
            and self.monthly_usage == other.monthly_usage
            and self.last_reset_daily == other.last_reset_daily
            and self.last_reset_monthly == other.last_reset_monthly
        )


@dataclass(frozen=True, slots=True)
class UsageSnapshot:
    """Aggregate counters as they stand right after an atomic increment.

    ``newly_exhausted`` is true only for the increment that switched the
    provider off; concurrent callers never both see it.
    """

    codename: str
    daily_usage: int
    monthly_usage: int
    credit_status: bool
    daily_limit: int = 0
    monthly_limit: int = 0
    newly_exhausted: bool = False

    def as_record(self) -> ProviderRecord:
        return ProviderRecord(
            codename=self.codename,
            credit_status=self.credit_status,
            daily_usage=self.daily_usage,
            monthly_usage=self.monthly_usage,
            daily_limit=self.daily_limit,
            monthly_limit=self.monthly_limit,
        )


# ═══════════════════════════════════════════════════════════════
#  Usage log
# ═══════════════════════════════════════════════════════════════
@dataclass(frozen=True, slots=True)
class UsageRecord:
    """One successful provider call.  Never mutated once written."""

    provider_codename: str
    session_id: str
    requests_made: int = 1
    tokens_used: int = 0
    timestamp: datetime = field(default_factory=_utcnow)
