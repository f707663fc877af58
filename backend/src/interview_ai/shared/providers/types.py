"""Core types for the quota-gated provider framework."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from interview_ai.domain.enums import Capability
from interview_ai.domain.value_objects import ProviderResult

if TYPE_CHECKING:
    from interview_ai.ports.outbound import ProviderPort

__all__ = ["CandidateSlot", "GatewayOutcome", "OutcomeStatus", "ProviderResult"]


@dataclass(frozen=True, slots=True)
class CandidateSlot:
    """One entry in a capability's fixed priority list."""

    codename: str
    adapter: ProviderPort

    @property
    def configured(self) -> bool:
        return self.adapter.is_configured


class OutcomeStatus(str, enum.Enum):
    SERVED = "served"
    NO_ELIGIBLE = "no_eligible"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True, slots=True)
class GatewayOutcome:
    """What the failover gateway managed to do for one capability request.

    Attributes:
        status:     SERVED, NO_ELIGIBLE (nothing had credit), or EXHAUSTED
                    (candidates were tried or skipped and none succeeded).
        candidates: The capability's full priority list, in order.
        provider:   Codename that produced ``payload`` (SERVED only).
        payload:    Text or audio URL returned by the provider.
        attempted:  Codenames actually invoked, in call order.
        errors:     Failure reason per invoked provider.
    """

    status: OutcomeStatus
    capability: Capability
    candidates: tuple[str, ...]
    provider: str | None = None
    payload: str | None = None
    attempted: tuple[str, ...] = ()
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def served(self) -> bool:
        return self.status == OutcomeStatus.SERVED
