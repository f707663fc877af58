"""Global exception handlers — map domain errors to HTTP responses.

Every error body carries an ``error`` message (what the browser client
reads) and the machine-readable ``code`` of the domain exception.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
import structlog

from interview_ai.domain.exceptions import (
    AllCandidatesFailedError,
    CreditStoreError,
    DomainError,
    MissingContextFieldError,
    NoCandidatesEligibleError,
    UnknownActionError,
)

logger = structlog.get_logger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all domain→HTTP exception mappings."""

    @app.exception_handler(RequestValidationError)
    async def handle_malformed(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        logger.warning("malformed_request_body", path=request.url.path, errors=exc.errors())
        return ORJSONResponse(
            status_code=500,
            content={"code": "MALFORMED_REQUEST", "error": "Malformed request body"},
        )

    @app.exception_handler(MissingContextFieldError)
    async def handle_missing_field(
        request: Request, exc: MissingContextFieldError
    ) -> ORJSONResponse:
        logger.warning("missing_context_field", path=request.url.path, field=exc.field)
        return ORJSONResponse(
            status_code=500,
            content={"code": exc.code, "error": exc.message},
        )

    @app.exception_handler(UnknownActionError)
    async def handle_unknown_action(
        request: Request, exc: UnknownActionError
    ) -> ORJSONResponse:
        logger.warning("unknown_action", path=request.url.path, action=exc.action)
        return ORJSONResponse(
            status_code=500,
            content={"code": exc.code, "error": exc.message},
        )

    @app.exception_handler(NoCandidatesEligibleError)
    async def handle_no_candidates(
        request: Request, exc: NoCandidatesEligibleError
    ) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=503,
            content={
                "code": exc.code,
                "error": exc.message,
                "unavailableModels": exc.candidates,
            },
        )

    @app.exception_handler(AllCandidatesFailedError)
    async def handle_all_failed(
        request: Request, exc: AllCandidatesFailedError
    ) -> ORJSONResponse:
        logger.error(
            "all_providers_failed_http",
            capability=exc.capability,
            errors=exc.errors,
        )
        return ORJSONResponse(
            status_code=503,
            content={
                "code": exc.code,
                "error": exc.message,
                "unavailableModels": exc.candidates,
            },
        )

    @app.exception_handler(CreditStoreError)
    async def handle_credit_store(
        request: Request, exc: CreditStoreError
    ) -> ORJSONResponse:
        logger.error("credit_store_error_http", message=exc.message)
        return ORJSONResponse(
            status_code=503,
            content={"code": exc.code, "error": "Credit store unavailable"},
        )

    @app.exception_handler(DomainError)
    async def handle_domain(request: Request, exc: DomainError) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=400,
            content={"code": exc.code, "error": exc.message},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception("unhandled_exception", error=str(exc))
        return ORJSONResponse(
            status_code=500,
            content={
                "code": "INTERNAL_ERROR",
                "error": "An unexpected error occurred",
            },
        )
