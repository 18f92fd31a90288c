import asyncio
import logging

import httpx

from birthday_api.services.upstream import (
    TtsKeyMissing,
    UpstreamBadResponse,
    UpstreamTimeout,
    UpstreamUnavailable,
)

ELEVENLABS_BASE_URL = "https://api.elevenlabs.io/v1"
VOICE_ID = "JBFqnCBsd6RMkjVDRZzb"
HTTP_MODEL_ID = "eleven_monolingual_v1"
SDK_MODEL_ID = "eleven_multilingual_v2"
SDK_OUTPUT_FORMAT = "mp3_44100_128"
VOICE_SETTINGS = {"stability": 0.5, "similarity_boost": 0.75}

SERVICE_NAME = "tts"
logger = logging.getLogger(__name__)


class SpeechSynthesizer:
    """Turns text into MP3 bytes using a remote TTS provider."""

    name = "base"

    def __init__(self, api_key: str | None, timeout: float = 30):
        self.api_key = api_key
        self.timeout = timeout

    def _require_key(self) -> str:
        if not self.api_key:
            raise TtsKeyMissing()
        return self.api_key

    async def synthesize(self, text: str) -> bytes:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class ElevenLabsHttpSynthesizer(SpeechSynthesizer):
    """Calls the ElevenLabs REST endpoint directly."""

    name = "http"

    def __init__(
        self,
        api_key: str | None,
        timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(api_key, timeout)
        self.transport = transport

    async def synthesize(self, text: str) -> bytes:
        api_key = self._require_key()
        headers = {
            "xi-api-key": api_key,
            "Accept": "audio/mpeg",
            "Content-Type": "application/json",
        }
        payload = {
            "text": text,
            "model_id": HTTP_MODEL_ID,
            "voice_settings": VOICE_SETTINGS,
        }
        url = f"{ELEVENLABS_BASE_URL}/text-to-speech/{VOICE_ID}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, json=payload, headers=headers)
                response.raise_for_status()
                audio = response.content
        except httpx.TimeoutException as exc:
            raise UpstreamTimeout("TTS service timed out", service=SERVICE_NAME) from exc
        except httpx.HTTPStatusError as exc:
            logger.warning("ElevenLabs returned status %s", exc.response.status_code)
            raise UpstreamUnavailable(
                f"TTS error: {exc.response.status_code}", service=SERVICE_NAME
            ) from exc
        except httpx.RequestError as exc:
            raise UpstreamUnavailable("Unable to reach TTS service", service=SERVICE_NAME) from exc

        if not audio:
            raise UpstreamBadResponse("TTS service returned no audio", service=SERVICE_NAME)
        return audio


class ElevenLabsSdkSynthesizer(SpeechSynthesizer):
    """Goes through the official ``elevenlabs`` SDK.

    The SDK client is synchronous, so the call runs in the default executor.
    """

    name = "sdk"

    def __init__(self, api_key: str | None, timeout: float = 30, client=None):
        super().__init__(api_key, timeout)
        self._client = client

    @property
    def client(self):
        if self._client is None:
            from elevenlabs import ElevenLabs

            self._client = ElevenLabs(api_key=self._require_key(), timeout=self.timeout)
        return self._client

    def _convert(self, text: str) -> bytes:
        chunks = self.client.text_to_speech.convert(
            voice_id=VOICE_ID,
            text=text,
            model_id=SDK_MODEL_ID,
            output_format=SDK_OUTPUT_FORMAT,
        )
        return b"".join(chunks)

    async def synthesize(self, text: str) -> bytes:
        from elevenlabs.core.api_error import ApiError

        self._require_key()
        loop = asyncio.get_running_loop()
        try:
            audio = await loop.run_in_executor(None, self._convert, text)
        except httpx.TimeoutException as exc:
            raise UpstreamTimeout("TTS service timed out", service=SERVICE_NAME) from exc
        except ApiError as exc:
            logger.warning("ElevenLabs SDK returned status %s", exc.status_code)
            raise UpstreamUnavailable(f"TTS error: {exc.status_code}", service=SERVICE_NAME) from exc
        except httpx.RequestError as exc:
            raise UpstreamUnavailable("Unable to reach TTS service", service=SERVICE_NAME) from exc

        if not audio:
            raise UpstreamBadResponse("TTS service returned no audio", service=SERVICE_NAME)
        return audio


SYNTHESIZERS = {
    ElevenLabsHttpSynthesizer.name: ElevenLabsHttpSynthesizer,
    ElevenLabsSdkSynthesizer.name: ElevenLabsSdkSynthesizer,
}


def build_synthesizer(provider: str, api_key: str | None, timeout: float = 30) -> SpeechSynthesizer:
    try:
        synthesizer_cls = SYNTHESIZERS[provider]
    except KeyError:
        raise ValueError(
            f"Unknown TTS_PROVIDER {provider!r}, expected one of {sorted(SYNTHESIZERS)}"
        ) from None
    return synthesizer_cls(api_key, timeout=timeout)
