"""REST API routers — thin adapters that delegate to application services.

Both action endpoints take ``{action, context}`` and dispatch on ``action``;
each handler turns a service result into its camelCase wire shape.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import ORJSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from interview_ai import __version__
from interview_ai.application.dtos import (
    ActionRequest,
    BrowserSpeechFallback,
    CreditCheckResponse,
    CreditResetResponse,
    EvaluationResponse,
    ErrorResponse,
    ExhaustedModelEntry,
    ExhaustedModelsResponse,
    ExhaustedNoticeEntry,
    HealthResponse,
    ModelStatusEntry,
    QuestionResponse,
    SpeechResponse,
    TranscriptResponse,
    dump,
)
from interview_ai.application.services import (
    CreditMonitorService,
    InterviewOrchestrationService,
)
from interview_ai.dependencies import (
    ServiceContainer,
    get_container,
    get_credit_monitor,
    get_orchestrator,
)
from interview_ai.domain.exceptions import UnknownActionError
from interview_ai.domain.value_objects import InterviewContext

Payload = dict[str, Any] | list[dict[str, Any]]

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    500: {"model": ErrorResponse, "description": "Unknown action or malformed body"},
    503: {"model": ErrorResponse, "description": "No provider could serve the request"},
}


# ═══════════════════════════════════════════════════════════════
#  Health & Metrics
# ═══════════════════════════════════════════════════════════════
health_router = APIRouter(tags=["Health"])


@health_router.get("/health", response_model=HealthResponse)
async def health_check(
    container: ServiceContainer = Depends(get_container),
) -> ORJSONResponse:
    store_ok = await container.store.ping()
    body = HealthResponse(
        status="ok" if store_ok else "degraded",
        version=__version__,
        environment=container.settings.app_env.value,
        services={"credit_store": "connected" if store_ok else "disconnected"},
    )
    return ORJSONResponse(status_code=200 if store_ok else 503, content=dump(body))


metrics_router = APIRouter(tags=["Health"])


@metrics_router.get("/metrics")
async def prometheus_metrics() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )


# ═══════════════════════════════════════════════════════════════
#  AI Orchestrator
# ═══════════════════════════════════════════════════════════════
orchestrator_router = APIRouter(tags=["AI Orchestrator"])

OrchestratorAction = Callable[
    [InterviewOrchestrationService, InterviewContext], Awaitable[Payload]
]


async def _generate_question(
    service: InterviewOrchestrationService, context: InterviewContext
) -> Payload:
    result = await service.generate_question(context)
    return dump(
        QuestionResponse(
            question=result.question,
            used_model=result.used_model,
            evaluation=result.evaluation,
            model_status=[ModelStatusEntry.from_record(r) for r in result.model_status],
        )
    )


async def _process_audio(
    service: InterviewOrchestrationService, context: InterviewContext
) -> Payload:
    result = await service.process_audio(context)
    return dump(TranscriptResponse(transcript=result.transcript, used_model=result.used_model))


async def _generate_speech(
    service: InterviewOrchestrationService, context: InterviewContext
) -> Payload:
    result = await service.generate_speech(context)
    if result.audio_url is None or result.used_model is None:
        return dump(BrowserSpeechFallback())
    return dump(SpeechResponse(audio_url=result.audio_url, used_model=result.used_model))


async def _evaluate_response(
    service: InterviewOrchestrationService, context: InterviewContext
) -> Payload:
    result = await service.evaluate_response(context)
    body = dump(EvaluationResponse(evaluation=result.text, used_model=result.used_model))
    if result.scores is not None:
        body["scores"] = result.scores.as_dict()
    else:
        body.pop("scores")
    return body


async def _get_model_status(
    service: InterviewOrchestrationService, context: InterviewContext
) -> Payload:
    records = await service.get_model_status()
    return [dump(ModelStatusEntry.from_record(r)) for r in records]


_ORCHESTRATOR_ACTIONS: dict[str, OrchestratorAction] = {
    "generate_question": _generate_question,
    "process_audio": _process_audio,
    "generate_speech": _generate_speech,
    "evaluate_response": _evaluate_response,
    "get_model_status": _get_model_status,
}


@orchestrator_router.post("/ai-orchestrator", responses=_ERROR_RESPONSES)
async def ai_orchestrator(
    body: ActionRequest,
    service: InterviewOrchestrationService = Depends(get_orchestrator),
) -> Any:
    handler = _ORCHESTRATOR_ACTIONS.get(body.action)
    if handler is None:
        raise UnknownActionError(body.action)
    return await handler(service, body.context.to_domain())


# ═══════════════════════════════════════════════════════════════
#  Credit Monitor
# ═══════════════════════════════════════════════════════════════
credit_monitor_router = APIRouter(tags=["Credit Monitor"])

CreditAction = Callable[[CreditMonitorService], Awaitable[Payload]]


async def _check_credits(service: CreditMonitorService) -> Payload:
    report = await service.check_credits()
    return dump(
        CreditCheckResponse(
            exhausted_models=[
                ExhaustedNoticeEntry(
                    codename=n.codename, reason=n.reason, usage=n.usage, limit=n.limit
                )
                for n in report.exhausted_models
            ],
            updated_models=len(report.updated_models),
            timestamp=report.timestamp,
        )
    )


async def _reset_credits(service: CreditMonitorService) -> Payload:
    await service.reset_credits()
    return dump(CreditResetResponse())


async def _get_exhausted_models(service: CreditMonitorService) -> Payload:
    exhausted = await service.get_exhausted_models()
    return dump(
        ExhaustedModelsResponse(
            exhausted_models=[
                ExhaustedModelEntry(
                    codename=m.record.codename,
                    name=m.record.original_name,
                    daily_usage=m.record.daily_usage,
                    monthly_usage=m.record.monthly_usage,
                    daily_limit=m.record.daily_limit,
                    monthly_limit=m.record.monthly_limit,
                    reason=m.reason,
                )
                for m in exhausted
            ]
        )
    )


_CREDIT_ACTIONS: dict[str, CreditAction] = {
    "check_credits": _check_credits,
    "reset_credits": _reset_credits,
    "get_exhausted_models": _get_exhausted_models,
}


@credit_monitor_router.post("/credit-monitor", responses=_ERROR_RESPONSES)
async def credit_monitor(
    body: ActionRequest,
    service: CreditMonitorService = Depends(get_credit_monitor),
) -> Any:
    handler = _CREDIT_ACTIONS.get(body.action)
    if handler is None:
        raise UnknownActionError(body.action)
    return await handler(service)
