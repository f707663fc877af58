"""Domain enumerations for the interview orchestrator."""

from __future__ import annotations

import enum


class Capability(str, enum.Enum):
    """A kind of work that can be routed to an external provider."""

    QUESTION_GENERATION = "question_generation"
    TEXT_TO_SPEECH = "text_to_speech"
    SPEECH_TO_TEXT = "speech_to_text"
    EVALUATION = "evaluation"


class Codename(str, enum.Enum):
    """Stable short names of the provisioned providers."""

    ORION = "Orion"  # Groq LLaMA-3.1 70B
    TITAN = "Titan"  # Mistral Mixtral 8x7B
    NOVA = "Nova"  # self-hosted Gemma 7B
    ATHENA = "Athena"  # Anthropic Claude Haiku
    VOX = "Vox"  # ElevenLabs TTS
    AETHER = "Aether"  # Azure TTS
    ECHO = "Echo"  # self-hosted Whisper


# Reported as ``usedModel`` whenever canned content is served.
FALLBACK_MODEL = "Fallback"


class ExhaustionReason(str, enum.Enum):
    DAILY = "Daily limit exceeded"
    MONTHLY = "Monthly limit exceeded"
