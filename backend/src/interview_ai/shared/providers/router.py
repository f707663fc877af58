"""Candidate router — fixed per-capability priority lists.

The order of candidates is part of the configuration, never derived from
the credit store: the store only tells us *which* candidates may be tried.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence

import structlog

from interview_ai.domain.enums import Capability
from interview_ai.shared.providers.types import CandidateSlot

logger = structlog.get_logger(__name__)


class CandidateRouter:
    """Holds the ordered ``CandidateSlot`` tuple for every capability."""

    def __init__(self, slots: Mapping[Capability, Sequence[CandidateSlot]]) -> None:
        self._slots: dict[Capability, tuple[CandidateSlot, ...]] = {
            capability: tuple(entries) for capability, entries in slots.items()
        }

    def slots(self, capability: Capability) -> tuple[CandidateSlot, ...]:
        return self._slots.get(capability, ())

    def candidates(self, capability: Capability) -> tuple[str, ...]:
        """Codenames for a capability, highest priority first."""
        return tuple(slot.codename for slot in self.slots(capability))

    def plan(
        self, capability: Capability, eligible: Collection[str]
    ) -> list[CandidateSlot]:
        """Walk the priority list, keeping eligible and configured slots.

        ``eligible`` may come back from the store in any order; the result
        always follows the configured priority.
        """
        planned: list[CandidateSlot] = []
        for slot in self.slots(capability):
            if slot.codename not in eligible:
                continue
            if not slot.configured:
                logger.debug(
                    "provider_not_configured",
                    provider=slot.codename,
                    capability=capability.value,
                )
                continue
            planned.append(slot)
        return planned
