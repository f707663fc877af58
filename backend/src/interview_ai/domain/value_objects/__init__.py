"""Value objects — immutable, identity-less descriptors."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class InterviewContext:
    """Everything a provider may need to serve one interview request."""

    session_id: str = ""
    session_type: str = "general"
    difficulty: int = 5
    question_number: int = 1
    previous_questions: tuple[str, ...] = ()
    user_response: str | None = None
    audio_data: str | None = None


@dataclass(frozen=True, slots=True)
class ExhaustionNotice:
    """Emitted when a provider flips from eligible to exhausted."""

    codename: str
    reason: str
    usage: int
    limit: int


@dataclass(frozen=True, slots=True)
class EvaluationScores:
    clarity: int
    confidence: int
    content: int
    tone: int

    def as_dict(self) -> dict[str, int]:
        return {
            "clarity": self.clarity,
            "confidence": self.confidence,
            "content": self.content,
            "tone": self.tone,
        }


@dataclass(frozen=True, slots=True)
class Evaluation:
    text: str
    used_model: str
    scores: EvaluationScores | None = field(default=None)


@dataclass(frozen=True, slots=True)
class ProviderResult:
    """Outcome of exactly one adapter call.

    Adapters never raise for provider-side problems; they return a failed
    result and the gateway decides what to do with it.
    """

    ok: bool
    value: str | None = None
    error: str | None = None
    tokens_used: int = 0

    @classmethod
    def success(cls, value: str, *, tokens_used: int | None = None) -> ProviderResult:
        return cls(
            ok=True,
            value=value,
            tokens_used=len(value) if tokens_used is None else tokens_used,
        )

    @classmethod
    def failure(cls, error: str) -> ProviderResult:
        return cls(ok=False, error=error)
