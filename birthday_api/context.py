import logging
from dataclasses import dataclass

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from birthday_api.config import Settings
from birthday_api.database import build_engine, build_session_factory
from birthday_api.services.lyrics_service import LyricsGenerator
from birthday_api.services.tts_service import SpeechSynthesizer, build_synthesizer

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything a request handler needs, built once per application."""

    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    lyrics_generator: LyricsGenerator
    synthesizer: SpeechSynthesizer

    async def aclose(self) -> None:
        await self.lyrics_generator.aclose()
        await self.synthesizer.aclose()
        self.engine.dispose()


def build_context(settings: Settings) -> AppContext:
    engine = build_engine(settings.DATABASE_URL)
    lyrics_generator = LyricsGenerator(
        api_key=settings.GEMINI_API_KEY,
        base_url=settings.LLM_BASE_URL,
        model=settings.LLM_MODEL,
        temperature=settings.LLM_TEMPERATURE,
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
    )
    synthesizer = build_synthesizer(
        settings.TTS_PROVIDER,
        settings.ELEVENLABS_API_KEY,
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
    )
    logger.info(
        "Application context ready (llm_model=%s, tts_provider=%s)",
        settings.LLM_MODEL,
        synthesizer.name,
    )
    return AppContext(
        settings=settings,
        engine=engine,
        session_factory=build_session_factory(engine),
        lyrics_generator=lyrics_generator,
        synthesizer=synthesizer,
    )


def get_context(request: Request) -> AppContext:
    return request.app.state.context
