"""Provider adapters and the per-capability priority lists they fill."""

from __future__ import annotations

import httpx

from interview_ai.config import Settings
from interview_ai.domain.enums import Capability
from interview_ai.shared.providers.types import CandidateSlot

from .base import HTTPProviderAdapter, ProviderResponseError
from .evaluation import AnthropicEvaluationAdapter
from .speech import AzureSpeechAdapter, ElevenLabsSpeechAdapter, WhisperTranscriptionAdapter
from .text import GroqQuestionAdapter, LocalQuestionAdapter, MistralQuestionAdapter


def _slot(adapter: HTTPProviderAdapter) -> CandidateSlot:
    return CandidateSlot(codename=adapter.codename, adapter=adapter)


def build_provider_slots(
    settings: Settings, client: httpx.AsyncClient
) -> dict[Capability, tuple[CandidateSlot, ...]]:
    """Fixed priority order per capability; first entry is tried first."""
    return {
        Capability.QUESTION_GENERATION: (
            _slot(GroqQuestionAdapter(client, settings.groq_api_key)),
            _slot(MistralQuestionAdapter(client, settings.mistral_api_key)),
            _slot(LocalQuestionAdapter(client, settings.nova_endpoint)),
        ),
        Capability.TEXT_TO_SPEECH: (
            _slot(ElevenLabsSpeechAdapter(client, settings.elevenlabs_api_key)),
            _slot(
                AzureSpeechAdapter(
                    client, settings.azure_speech_key, settings.azure_speech_region
                )
            ),
        ),
        Capability.SPEECH_TO_TEXT: (
            _slot(WhisperTranscriptionAdapter(client, settings.echo_endpoint)),
        ),
        Capability.EVALUATION: (
            _slot(AnthropicEvaluationAdapter(client, settings.anthropic_api_key)),
        ),
    }


__all__ = [
    "AnthropicEvaluationAdapter",
    "AzureSpeechAdapter",
    "ElevenLabsSpeechAdapter",
    "GroqQuestionAdapter",
    "HTTPProviderAdapter",
    "LocalQuestionAdapter",
    "MistralQuestionAdapter",
    "ProviderResponseError",
    "WhisperTranscriptionAdapter",
    "build_provider_slots",
]
