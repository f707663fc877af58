"""Application services — orchestrate domain logic through port interfaces."""

from interview_ai.application.services.credit_monitor import (
    CreditCheckReport,
    CreditMonitorService,
    ExhaustedModel,
)
from interview_ai.application.services.orchestrator import (
    GeneratedQuestion,
    InterviewOrchestrationService,
    SynthesizedSpeech,
    Transcript,
)

__all__ = [
    "CreditCheckReport",
    "CreditMonitorService",
    "ExhaustedModel",
    "GeneratedQuestion",
    "InterviewOrchestrationService",
    "SynthesizedSpeech",
    "Transcript",
]
