"""Deterministic canned content served when no provider can answer."""

from __future__ import annotations

from interview_ai.domain.enums import FALLBACK_MODEL
from interview_ai.domain.value_objects import Evaluation, EvaluationScores

FALLBACK_QUESTIONS: tuple[str, ...] = (
    "Tell me about a challenging project you've worked on recently.",
    "How do you handle working under pressure and tight deadlines?",
    "What motivates you in your professional work?",
    "Describe a time when you had to learn something new quickly.",
    "What are your greatest professional strengths?",
)

FALLBACK_EVALUATION_TEXT = "Response received and noted. Continue with the interview."

FALLBACK_SCORES = EvaluationScores(clarity=7, confidence=7, content=7, tone=7)


def fallback_question(question_number: int) -> str:
    """Pick the canned question for a 1-indexed question number.

    Depends on nothing but ``question_number``; numbers wrap around the list.
    """
    return FALLBACK_QUESTIONS[(question_number - 1) % len(FALLBACK_QUESTIONS)]


def fallback_evaluation() -> Evaluation:
    return Evaluation(
        text=FALLBACK_EVALUATION_TEXT,
        used_model=FALLBACK_MODEL,
        scores=FALLBACK_SCORES,
    )
