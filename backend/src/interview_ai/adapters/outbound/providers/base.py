"""Shared plumbing for HTTP provider adapters.

Each concrete adapter only builds one request and pulls one field out of
the response.  ``invoke`` turns every transport, status, and payload
problem into ``ProviderResult.failure`` so the gateway never has to catch.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any

import httpx
import structlog

from interview_ai.domain.enums import Capability
from interview_ai.domain.value_objects import InterviewContext, ProviderResult
from interview_ai.ports.outbound import ProviderPort

logger = structlog.get_logger(__name__)


class ProviderResponseError(Exception):
    """The provider answered, but not with something usable."""


class HTTPProviderAdapter(ProviderPort):
    codename: str
    capability: Capability

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def invoke(self, context: InterviewContext) -> ProviderResult:
        try:
            value = await self._call(context)
        except httpx.HTTPStatusError as exc:
            return ProviderResult.failure(
                f"HTTP {exc.response.status_code}: {_error_message(exc.response)}"
            )
        except httpx.HTTPError as exc:
            return ProviderResult.failure(f"{type(exc).__name__}: {exc}")
        except (ProviderResponseError, ValueError, KeyError, IndexError, TypeError) as exc:
            return ProviderResult.failure(f"Malformed response: {type(exc).__name__}: {exc}")
        except Exception as exc:
            logger.exception("provider_adapter_error", provider=self.codename)
            return ProviderResult.failure(f"{type(exc).__name__}: {exc}")

        if not value:
            return ProviderResult.failure("Malformed response: empty payload")
        return ProviderResult.success(value, tokens_used=self._tokens_used(context, value))

    @abstractmethod
    async def _call(self, context: InterviewContext) -> str:
        """Perform the single HTTP request and extract the payload."""
        ...

    def _tokens_used(self, context: InterviewContext, value: str) -> int:
        return len(value)


def _error_message(response: httpx.Response) -> str:
    """Best-effort ``error.message`` from a JSON error body."""
    try:
        data: Any = response.json()
    except ValueError:
        return response.reason_phrase or "request failed"
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        if data.get("detail"):
            return str(data["detail"])
    return response.reason_phrase or "request failed"


def first_present(data: Any, *keys: str) -> str:
    """Return the first non-empty string among ``keys`` in a JSON object."""
    if not isinstance(data, dict):
        raise ProviderResponseError(f"expected a JSON object, got {type(data).__name__}")
    for key in keys:
        value = data.get(key)
        if value:
            return str(value)
    raise ProviderResponseError(f"none of {', '.join(keys)} in response")
