"""HTTP middleware: request correlation and access logging with metrics."""

from __future__ import annotations

import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from interview_ai.shared.observability.metrics import (
    HTTP_REQUEST_DURATION,
    HTTP_REQUESTS_TOTAL,
)

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
UNMATCHED_ROUTE = "unmatched"

CallNext = Callable[[Request], Awaitable[Response]]


def route_label(request: Request) -> str:
    """The matched route template, so metric labels stay bounded."""
    route = request.scope.get("route")
    template = getattr(route, "path_format", None) or getattr(route, "path", None)
    return template or UNMATCHED_ROUTE


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Correlates every log line of a request with one id.

    A caller-supplied ``X-Request-ID`` is reused; otherwise one is minted.
    The id is echoed back on the response.
    """

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        with structlog.contextvars.bound_contextvars(request_id=request_id):
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """One timing per request, reported both as a log line and as metrics."""

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        route = route_label(request)
        HTTP_REQUESTS_TOTAL.labels(
            method=request.method, endpoint=route, status_code=response.status_code
        ).inc()
        HTTP_REQUEST_DURATION.labels(method=request.method, endpoint=route).observe(elapsed)

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "http_request",
            method=request.method,
            route=route,
            status=response.status_code,
            duration_ms=round(elapsed * 1000, 2),
        )
        return response
