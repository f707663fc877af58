"""Speech adapters: Vox (ElevenLabs) and Aether (Azure) for TTS, Echo (Whisper) for STT."""

from __future__ import annotations

import base64
from xml.sax.saxutils import escape

import httpx

from interview_ai.domain.enums import Capability, Codename
from interview_ai.domain.value_objects import InterviewContext

from .base import HTTPProviderAdapter, ProviderResponseError, first_present


def audio_data_url(audio: bytes) -> str:
    if not audio:
        raise ProviderResponseError("empty audio body")
    return "data:audio/mpeg;base64," + base64.b64encode(audio).decode("ascii")


class SpeechSynthesisAdapter(HTTPProviderAdapter):
    """TTS adapters speak ``user_response`` and bill by input length."""

    capability = Capability.TEXT_TO_SPEECH

    def _text(self, context: InterviewContext) -> str:
        if not context.user_response:
            raise ProviderResponseError("no text to synthesize")
        return context.user_response

    def _tokens_used(self, context: InterviewContext, value: str) -> int:
        return len(context.user_response or "")


class ElevenLabsSpeechAdapter(SpeechSynthesisAdapter):
    """Vox — ElevenLabs text-to-speech."""

    codename = Codename.VOX.value
    voice_id = "21m00Tcm4TlvDq8ikWAM"

    def __init__(self, client: httpx.AsyncClient, api_key: str) -> None:
        super().__init__(client)
        self._api_key = api_key

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def _call(self, context: InterviewContext) -> str:
        response = await self._client.post(
            f"https://api.elevenlabs.io/v1/text-to-speech/{self.voice_id}",
            headers={
                "xi-api-key": self._api_key,
                "Content-Type": "application/json",
                "Accept": "audio/mpeg",
            },
            json={
                "text": self._text(context),
                "model_id": "eleven_monolingual_v1",
                "voice_settings": {"stability": 0.5, "similarity_boost": 0.5},
            },
        )
        response.raise_for_status()
        return audio_data_url(response.content)


class AzureSpeechAdapter(SpeechSynthesisAdapter):
    """Aether — Azure Cognitive Services neural TTS."""

    codename = Codename.AETHER.value
    voice = "en-US-AriaNeural"

    def __init__(self, client: httpx.AsyncClient, api_key: str, region: str) -> None:
        super().__init__(client)
        self._api_key = api_key
        self._region = region

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key and self._region)

    def _ssml(self, text: str) -> str:
        return (
            "<speak version='1.0' xml:lang='en-US'>"
            f"<voice xml:lang='en-US' xml:gender='Female' name='{self.voice}'>"
            f"{escape(text)}</voice></speak>"
        )

    async def _call(self, context: InterviewContext) -> str:
        response = await self._client.post(
            f"https://{self._region}.tts.speech.microsoft.com/cognitiveservices/v1",
            headers={
                "Ocp-Apim-Subscription-Key": self._api_key,
                "Content-Type": "application/ssml+xml",
                "X-Microsoft-OutputFormat": "audio-16khz-128kbitrate-mono-mp3",
            },
            content=self._ssml(self._text(context)).encode("utf-8"),
        )
        response.raise_for_status()
        return audio_data_url(response.content)


class WhisperTranscriptionAdapter(HTTPProviderAdapter):
    """Echo — self-hosted Whisper behind a ``/transcribe`` endpoint."""

    codename = Codename.ECHO.value
    capability = Capability.SPEECH_TO_TEXT

    def __init__(self, client: httpx.AsyncClient, endpoint: str) -> None:
        super().__init__(client)
        self._endpoint = endpoint.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self._endpoint)

    async def _call(self, context: InterviewContext) -> str:
        if not context.audio_data:
            raise ProviderResponseError("no audio to transcribe")
        response = await self._client.post(
            f"{self._endpoint}/transcribe",
            json={"audio": context.audio_data},
        )
        response.raise_for_status()
        return first_present(response.json(), "transcript", "text").strip()
