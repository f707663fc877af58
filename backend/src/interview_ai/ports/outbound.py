"""Outbound ports — interfaces that infrastructure adapters must implement.

These are the *driven* ports in hexagonal architecture.  The application
layer depends only on these abstractions, never on concrete implementations
(database drivers, HTTP clients, etc.).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from interview_ai.domain.entities import ProviderRecord, UsageRecord, UsageSnapshot
from interview_ai.domain.enums import Capability
from interview_ai.domain.events import DomainEvent
from interview_ai.domain.value_objects import InterviewContext, ProviderResult


# ═══════════════════════════════════════════════════════════════
#  Credit store port
# ═══════════════════════════════════════════════════════════════
class CreditStorePort(ABC):
    """Persisted per-provider quota state plus the append-only usage log.

    Every mutation that can race with another request is a single atomic
    statement at the store: callers never read, modify, and write back.
    """

    @abstractmethod
    async def list_providers(self) -> list[ProviderRecord]:
        """All provider rows, ordered by codename."""
        ...

    @abstractmethod
    async def get_provider(self, codename: str) -> ProviderRecord | None: ...

    @abstractmethod
    async def list_eligible(self, codenames: Sequence[str]) -> list[ProviderRecord]:
        """Rows among ``codenames`` whose credit status is true, in no particular order."""
        ...

    @abstractmethod
    async def list_exhausted(self) -> list[ProviderRecord]: ...

    @abstractmethod
    async def compare_and_set(
        self, expected: ProviderRecord, updated: ProviderRecord
    ) -> bool:
        """Write ``updated`` only if the stored counters, status, and reset stamps still match ``expected``."""
        ...

    @abstractmethod
    async def mark_unavailable(self, codename: str, *, now: datetime) -> bool:
        """Atomically force ``credit_status`` to false."""
        ...

    @abstractmethod
    async def increment_usage(
        self, codename: str, *, requests: int, now: datetime
    ) -> UsageSnapshot | None:
        """Server-side increment of both counters, flipping status when a limit is hit.

        The snapshot is marked ``newly_exhausted`` only for the call that
        performed the flip.
        """
        ...

    @abstractmethod
    async def append_usage(self, record: UsageRecord) -> None: ...

    @abstractmethod
    async def reset_all(self, *, now: datetime) -> int: ...

    @abstractmethod
    async def ping(self) -> bool: ...


# ═══════════════════════════════════════════════════════════════
#  Provider port
# ═══════════════════════════════════════════════════════════════
class ProviderPort(ABC):
    """One external capability unit: call with context, get text or a failure."""

    codename: str
    capability: Capability

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the credentials / endpoint needed to call this provider are present."""
        ...

    @abstractmethod
    async def invoke(self, context: InterviewContext) -> ProviderResult: ...


# ═══════════════════════════════════════════════════════════════
#  Event bus port
# ═══════════════════════════════════════════════════════════════
class EventBusPort(ABC):
    """Publish domain events to interested subscribers.

    ``publish`` reports how many subscribers failed; publishers never see
    the failures themselves.
    """

    @abstractmethod
    async def publish(self, event: DomainEvent) -> int: ...

    @abstractmethod
    def subscribe(self, event_type: str, handler: Any) -> None: ...
