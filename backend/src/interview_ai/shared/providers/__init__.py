"""Quota-gated provider framework.

Provides the availability gate, fixed-priority routing, the single-strike
breaker, usage tracking, and the failover gateway that composes them.
"""

from interview_ai.shared.providers.types import (
    CandidateSlot,
    GatewayOutcome,
    OutcomeStatus,
    ProviderResult,
)
from interview_ai.shared.providers.availability import (
    GateDecision,
    evaluate,
    exhaustion_notice,
    exhaustion_reason,
)
from interview_ai.shared.providers.router import CandidateRouter
from interview_ai.shared.providers.breaker import SingleStrikeBreaker, announce_exhaustion
from interview_ai.shared.providers.usage import UsageTracker
from interview_ai.shared.providers.gateway import FailoverGateway

__all__ = [
    "CandidateRouter",
    "CandidateSlot",
    "FailoverGateway",
    "GateDecision",
    "GatewayOutcome",
    "OutcomeStatus",
    "ProviderResult",
    "SingleStrikeBreaker",
    "UsageTracker",
    "announce_exhaustion",
    "evaluate",
    "exhaustion_notice",
    "exhaustion_reason",
]
