"""Interview Orchestration Service.

One method per capability.  Each hands the request to the failover gateway
and turns its outcome into a capability-specific answer:

    question generation → canned question when nothing can serve
    evaluation          → canned 7/7/7/7 evaluation
    text-to-speech      → tell the browser to speak the text itself
    speech-to-text      → no safe fallback, surfaced as unavailable
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from interview_ai.domain.entities import ProviderRecord
from interview_ai.domain.enums import FALLBACK_MODEL, Capability
from interview_ai.domain.exceptions import (
    AllCandidatesFailedError,
    CreditStoreError,
    MissingContextFieldError,
    NoCandidatesEligibleError,
)
from interview_ai.domain.services.fallback import fallback_evaluation, fallback_question
from interview_ai.domain.value_objects import Evaluation, InterviewContext
from interview_ai.ports.outbound import CreditStorePort
from interview_ai.shared.observability.metrics import FALLBACKS_SERVED
from interview_ai.shared.providers.gateway import FailoverGateway
from interview_ai.shared.providers.types import GatewayOutcome, OutcomeStatus

logger = structlog.get_logger(__name__)


@dataclass
class GeneratedQuestion:
    question: str
    used_model: str
    evaluation: str | None = None
    model_status: list[ProviderRecord] = field(default_factory=list)

    @property
    def is_fallback(self) -> bool:
        return self.used_model == FALLBACK_MODEL


@dataclass
class Transcript:
    transcript: str
    used_model: str


@dataclass
class SynthesizedSpeech:
    """Either a data URL from a provider, or a request to use browser TTS."""

    audio_url: str | None = None
    used_model: str | None = None

    @property
    def use_browser_tts(self) -> bool:
        return self.audio_url is None


class InterviewOrchestrationService:
    def __init__(
        self,
        gateway: FailoverGateway,
        store: CreditStorePort,
        *,
        question_fallback_on_unavailable: bool = True,
    ) -> None:
        self._gateway = gateway
        self._store = store
        self._question_fallback = question_fallback_on_unavailable

    # ── Question generation ──────────────────────────────────
    async def generate_question(self, context: InterviewContext) -> GeneratedQuestion:
        log = logger.bind(session_id=context.session_id, question_number=context.question_number)
        outcome = await self._gateway.execute(Capability.QUESTION_GENERATION, context)

        if outcome.served and outcome.payload is not None and outcome.provider is not None:
            question, used_model = outcome.payload, outcome.provider
        elif outcome.status == OutcomeStatus.NO_ELIGIBLE and not self._question_fallback:
            raise NoCandidatesEligibleError(outcome.capability.value, outcome.candidates)
        else:
            question, used_model = fallback_question(context.question_number), FALLBACK_MODEL
            self._record_fallback(outcome)

        evaluation: str | None = None
        if context.user_response:
            evaluation = await self._evaluate_alongside(context)

        log.info("question_generated", used_model=used_model, evaluated=evaluation is not None)
        return GeneratedQuestion(
            question=question,
            used_model=used_model,
            evaluation=evaluation,
            model_status=await self._store.list_providers(),
        )

    async def _evaluate_alongside(self, context: InterviewContext) -> str | None:
        """Real evaluator output only; canned evaluations are not attached."""
        try:
            outcome = await self._gateway.execute(Capability.EVALUATION, context)
        except CreditStoreError as exc:
            logger.warning("side_evaluation_failed", error=exc.message)
            return None
        if outcome.served:
            return outcome.payload
        logger.info("side_evaluation_skipped", status=outcome.status.value)
        return None

    # ── Speech-to-text ───────────────────────────────────────
    async def process_audio(self, context: InterviewContext) -> Transcript:
        if not context.audio_data:
            raise MissingContextFieldError("audioData")

        outcome = await self._gateway.execute(Capability.SPEECH_TO_TEXT, context)
        if outcome.served and outcome.payload is not None and outcome.provider is not None:
            return Transcript(transcript=outcome.payload, used_model=outcome.provider)
        if outcome.status == OutcomeStatus.NO_ELIGIBLE:
            raise NoCandidatesEligibleError(outcome.capability.value, outcome.candidates)
        raise AllCandidatesFailedError(
            outcome.capability.value, outcome.candidates, outcome.errors
        )

    # ── Text-to-speech ───────────────────────────────────────
    async def generate_speech(self, context: InterviewContext) -> SynthesizedSpeech:
        if not context.user_response:
            raise MissingContextFieldError("userResponse")

        outcome = await self._gateway.execute(Capability.TEXT_TO_SPEECH, context)
        if outcome.served and outcome.payload is not None:
            return SynthesizedSpeech(audio_url=outcome.payload, used_model=outcome.provider)
        if outcome.status == OutcomeStatus.NO_ELIGIBLE:
            raise NoCandidatesEligibleError(outcome.capability.value, outcome.candidates)
        self._record_fallback(outcome)
        return SynthesizedSpeech()

    # ── Evaluation ───────────────────────────────────────────
    async def evaluate_response(self, context: InterviewContext) -> Evaluation:
        if not context.user_response:
            logger.info("evaluation_without_response", session_id=context.session_id)
            FALLBACKS_SERVED.labels(capability=Capability.EVALUATION.value).inc()
            return fallback_evaluation()

        outcome = await self._gateway.execute(Capability.EVALUATION, context)
        if outcome.served and outcome.payload is not None and outcome.provider is not None:
            return Evaluation(text=outcome.payload, used_model=outcome.provider)
        self._record_fallback(outcome)
        return fallback_evaluation()

    # ── Status ───────────────────────────────────────────────
    async def get_model_status(self) -> list[ProviderRecord]:
        return await self._store.list_providers()

    @staticmethod
    def _record_fallback(outcome: GatewayOutcome) -> None:
        FALLBACKS_SERVED.labels(capability=outcome.capability.value).inc()
        logger.warning(
            "fallback_served",
            capability=outcome.capability.value,
            status=outcome.status.value,
            attempted=list(outcome.attempted),
        )
