"""Question-generation adapters: Orion (Groq), Titan (Mistral), Nova (self-hosted)."""

from __future__ import annotations

from abc import abstractmethod
from typing import Any

import httpx

from interview_ai.domain.enums import Capability, Codename
from interview_ai.domain.value_objects import InterviewContext

from .base import HTTPProviderAdapter, first_present

_MAX_TOKENS = 200


class ChatCompletionsAdapter(HTTPProviderAdapter):
    """OpenAI-compatible ``/chat/completions`` endpoint with bearer auth."""

    capability = Capability.QUESTION_GENERATION
    url: str
    model: str

    def __init__(self, client: httpx.AsyncClient, api_key: str) -> None:
        super().__init__(client)
        self._api_key = api_key

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    @abstractmethod
    def _messages(self, context: InterviewContext) -> list[dict[str, str]]: ...

    def _body(self, context: InterviewContext) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": self._messages(context),
            "max_tokens": _MAX_TOKENS,
        }

    async def _call(self, context: InterviewContext) -> str:
        response = await self._client.post(
            self.url,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            json=self._body(context),
        )
        response.raise_for_status()
        data = response.json()
        return str(data["choices"][0]["message"]["content"]).strip()


class GroqQuestionAdapter(ChatCompletionsAdapter):
    """Orion — the chief interviewer."""

    codename = Codename.ORION.value
    url = "https://api.groq.com/openai/v1/chat/completions"
    model = "llama-3.1-70b-versatile"

    def _messages(self, context: InterviewContext) -> list[dict[str, str]]:
        return [
            {
                "role": "system",
                "content": (
                    f"You are Orion, the chief interviewer. Generate a "
                    f"{context.session_type} interview question at difficulty level "
                    f"{context.difficulty}/10. Be professional, engaging, and adapt "
                    f"to the conversation flow."
                ),
            },
            {
                "role": "user",
                "content": (
                    f"Previous questions: {', '.join(context.previous_questions)}. "
                    f"Generate question #{context.question_number}."
                ),
            },
        ]

    def _body(self, context: InterviewContext) -> dict[str, Any]:
        return {**super()._body(context), "temperature": 0.7}


class MistralQuestionAdapter(ChatCompletionsAdapter):
    """Titan — the technical interviewer."""

    codename = Codename.TITAN.value
    url = "https://api.mistral.ai/v1/chat/completions"
    model = "mixtral-8x7b-instruct"

    def _messages(self, context: InterviewContext) -> list[dict[str, str]]:
        return [
            {
                "role": "system",
                "content": (
                    "You are Titan, the technical interviewer. Focus on technical "
                    f"aspects and problem-solving. Difficulty: {context.difficulty}/10."
                ),
            },
            {
                "role": "user",
                "content": (
                    "Generate a technical interview question. Context: "
                    f"{context.session_type}, Question #{context.question_number}"
                ),
            },
        ]


class LocalQuestionAdapter(HTTPProviderAdapter):
    """Nova — self-hosted model behind a plain ``/generate`` endpoint."""

    codename = Codename.NOVA.value
    capability = Capability.QUESTION_GENERATION

    def __init__(self, client: httpx.AsyncClient, endpoint: str) -> None:
        super().__init__(client)
        self._endpoint = endpoint.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self._endpoint)

    async def _call(self, context: InterviewContext) -> str:
        response = await self._client.post(
            f"{self._endpoint}/generate",
            json={
                "prompt": (
                    f"Generate a {context.session_type} interview question at "
                    f"difficulty {context.difficulty}/10. Question number: "
                    f"{context.question_number}"
                ),
                "max_tokens": _MAX_TOKENS,
            },
        )
        response.raise_for_status()
        return first_present(response.json(), "response", "text", "output").strip()
