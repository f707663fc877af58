"""Response-evaluation adapter: Athena (Anthropic Claude Haiku)."""

from __future__ import annotations

import httpx

from interview_ai.domain.enums import Capability, Codename
from interview_ai.domain.value_objects import InterviewContext

from .base import HTTPProviderAdapter, ProviderResponseError


class AnthropicEvaluationAdapter(HTTPProviderAdapter):
    """Athena — the HR evaluator."""

    codename = Codename.ATHENA.value
    capability = Capability.EVALUATION
    url = "https://api.anthropic.com/v1/messages"
    model = "claude-3-haiku-20240307"

    def __init__(self, client: httpx.AsyncClient, api_key: str) -> None:
        super().__init__(client)
        self._api_key = api_key

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def _call(self, context: InterviewContext) -> str:
        if not context.user_response:
            raise ProviderResponseError("no response to evaluate")

        response = await self._client.post(
            self.url,
            headers={
                "x-api-key": self._api_key,
                "anthropic-version": "2023-06-01",
                "content-type": "application/json",
            },
            json={
                "model": self.model,
                "max_tokens": 300,
                "messages": [
                    {
                        "role": "user",
                        "content": (
                            "As Athena, the HR evaluator, analyze this interview "
                            f'response: "{context.user_response}". Provide scores '
                            "(1-10) for clarity, confidence, content, and tone. Be "
                            "constructive and professional."
                        ),
                    }
                ],
            },
        )
        response.raise_for_status()
        data = response.json()
        return str(data["content"][0]["text"]).strip()
