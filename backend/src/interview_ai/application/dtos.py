"""Data Transfer Objects — Pydantic models for API boundaries.

DTOs handle serialisation, validation, and documentation.  They live in the
application layer because they are *not* domain objects — they adapt between
the external world and the domain.  The browser client speaks camelCase, so
every DTO aliases its fields and accepts either spelling on input.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from interview_ai.domain.entities import ProviderRecord
from interview_ai.domain.value_objects import InterviewContext


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ═══════════════════════════════════════════════════════════════
#  Common
# ═══════════════════════════════════════════════════════════════
class ErrorResponse(CamelModel):
    error: str
    code: str | None = None
    unavailable_models: list[str] | None = None


class HealthResponse(CamelModel):
    status: str = "ok"
    version: str = "0.1.0"
    environment: str = "development"
    services: dict[str, str] = Field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════
#  Requests
# ═══════════════════════════════════════════════════════════════
class InterviewContextDTO(CamelModel):
    session_id: str = ""
    session_type: str = "general"
    difficulty: int = 5
    question_number: int = 1
    previous_questions: list[str] = Field(default_factory=list)
    user_response: str | None = None
    audio_data: str | None = None

    def to_domain(self) -> InterviewContext:
        return InterviewContext(
            session_id=self.session_id,
            session_type=self.session_type,
            difficulty=self.difficulty,
            question_number=self.question_number,
            previous_questions=tuple(self.previous_questions),
            user_response=self.user_response,
            audio_data=self.audio_data,
        )


class ActionRequest(BaseModel):
    """Envelope shared by both action endpoints."""

    action: str
    context: InterviewContextDTO = Field(default_factory=InterviewContextDTO)


# ═══════════════════════════════════════════════════════════════
#  Orchestrator responses
# ═══════════════════════════════════════════════════════════════
class ModelStatusEntry(CamelModel):
    codename: str
    credit_status: bool
    daily_usage: int
    monthly_usage: int
    daily_limit: int
    monthly_limit: int

    @classmethod
    def from_record(cls, record: ProviderRecord) -> ModelStatusEntry:
        return cls(
            codename=record.codename,
            credit_status=record.credit_status,
            daily_usage=record.daily_usage,
            monthly_usage=record.monthly_usage,
            daily_limit=record.daily_limit,
            monthly_limit=record.monthly_limit,
        )


class QuestionResponse(CamelModel):
    question: str
    used_model: str
    evaluation: str | None = None
    model_status: list[ModelStatusEntry] = Field(default_factory=list)


class TranscriptResponse(CamelModel):
    transcript: str
    used_model: str


class SpeechResponse(CamelModel):
    audio_url: str
    used_model: str


class BrowserSpeechFallback(CamelModel):
    """Soft failure: every TTS provider failed, the browser should speak instead."""

    error: str = "All TTS models failed"
    use_browser_tts: bool = Field(default=True, serialization_alias="useBrowserTTS")


class EvaluationResponse(CamelModel):
    evaluation: str
    used_model: str
    scores: dict[str, int] | None = None


# ═══════════════════════════════════════════════════════════════
#  Credit monitor responses
# ═══════════════════════════════════════════════════════════════
class ExhaustedNoticeEntry(CamelModel):
    codename: str
    reason: str
    usage: int
    limit: int


class CreditCheckResponse(CamelModel):
    success: bool = True
    exhausted_models: list[ExhaustedNoticeEntry] = Field(default_factory=list)
    updated_models: int = 0
    timestamp: datetime


class CreditResetResponse(CamelModel):
    success: bool = True
    message: str = "All credits reset"


class ExhaustedModelEntry(CamelModel):
    codename: str
    name: str
    daily_usage: int
    monthly_usage: int
    daily_limit: int
    monthly_limit: int
    reason: str


class ExhaustedModelsResponse(CamelModel):
    exhausted_models: list[ExhaustedModelEntry] = Field(default_factory=list)


def dump(model: BaseModel) -> dict[str, Any]:
    """Wire representation: camelCase keys, JSON-safe values."""
    return model.model_dump(mode="json", by_alias=True)
