"""Domain events — typed records of things that happened to a provider.

Events are published *after* the corresponding store write has committed so
subscribers never observe a state change that could still roll back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class DomainEvent:
    """Base class for all domain events."""

    event_type: str = "DOMAIN_EVENT"
    occurred_at: datetime = field(default_factory=_utcnow)
    metadata: dict[str, Any] = field(default_factory=dict)


PROVIDER_EXHAUSTED = "PROVIDER_EXHAUSTED"
PROVIDER_TRIPPED = "PROVIDER_TRIPPED"


# ── Quota events ─────────────────────────────────────────────
@dataclass(frozen=True, slots=True)
class ProviderExhaustedEvent(DomainEvent):
    event_type: str = PROVIDER_EXHAUSTED
    codename: str = ""
    reason: str = ""
    usage: int = 0
    limit: int = 0


# ── Breaker events ───────────────────────────────────────────
@dataclass(frozen=True, slots=True)
class ProviderTrippedEvent(DomainEvent):
    event_type: str = PROVIDER_TRIPPED
    codename: str = ""
    capability: str = ""
    error: str = ""
