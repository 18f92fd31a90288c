import logging

import httpx
import openai
from openai import AsyncOpenAI

from birthday_api.services.upstream import (
    UpstreamBadResponse,
    UpstreamNotConfigured,
    UpstreamTimeout,
    UpstreamUnavailable,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "llm"


class LyricsGenerator:
    """Chat-completion client for an OpenAI-compatible endpoint."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str,
        model: str,
        temperature: float = 0.2,
        timeout: float = 30,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self._http_client = http_client
        self._client: AsyncOpenAI | None = None

    @property
    def client(self) -> AsyncOpenAI:
        if not self.api_key:
            raise UpstreamNotConfigured("LLM API key is not configured", service=SERVICE_NAME)
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
                http_client=self._http_client,
            )
        return self._client

    async def generate(self, prompt: str) -> str:
        client = self.client
        logger.info("Requesting lyrics model=%s prompt_chars=%s", self.model, len(prompt))
        try:
            completion = await client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except openai.APITimeoutError as exc:
            logger.warning("LLM request timed out after %ss", self.timeout)
            raise UpstreamTimeout("Lyrics service timed out", service=SERVICE_NAME) from exc
        except openai.APIStatusError as exc:
            logger.warning("LLM returned status %s", exc.status_code)
            raise UpstreamUnavailable(
                f"Lyrics service error: {exc.status_code}", service=SERVICE_NAME
            ) from exc
        except openai.APIConnectionError as exc:
            logger.warning("Unable to reach LLM at %s: %s", self.base_url, exc)
            raise UpstreamUnavailable("Unable to reach lyrics service", service=SERVICE_NAME) from exc

        return extract_lyrics(completion)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()


def extract_lyrics(completion) -> str:
    """Pull the trimmed text of the first choice out of a completion."""
    choices = getattr(completion, "choices", None) or []
    if not choices:
        raise UpstreamBadResponse("Lyrics service returned no choices", service=SERVICE_NAME)
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    if not isinstance(content, str) or not content.strip():
        raise UpstreamBadResponse("Lyrics service returned empty text", service=SERVICE_NAME)
    return content.strip()
