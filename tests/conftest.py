import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

BASE_DIR = Path(__file__).resolve().parents[1]

if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

import birthday_api.main as main  # noqa: E402
from birthday_api.config import Settings  # noqa: E402
from birthday_api.context import build_context  # noqa: E402
from birthday_api.services.tts_service import SpeechSynthesizer  # noqa: E402


class FakeLyricsGenerator:
    """Records prompts and answers with a canned reply or error."""

    def __init__(self, reply: str = "Happy birthday to you"):
        self.reply = reply
        self.error: Exception | None = None
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply

    async def aclose(self) -> None:
        return None


class FakeSynthesizer(SpeechSynthesizer):
    name = "fake"

    def __init__(self, audio: bytes = b"ID3fake-mp3"):
        super().__init__(api_key="test-tts-key")
        self.audio = audio
        self.error: Exception | None = None
        self.texts: list[str] = []

    async def synthesize(self, text: str) -> bytes:
        self.texts.append(text)
        if self.error is not None:
            raise self.error
        return self.audio


@pytest.fixture()
def test_settings(tmp_path):
    settings = Settings()
    settings.DATABASE_URL = f"sqlite:///{tmp_path / 'test.db'}"
    settings.GEMINI_API_KEY = "test-llm-key"
    settings.ELEVENLABS_API_KEY = "test-tts-key"
    settings.TTS_PROVIDER = "http"
    return settings


@pytest.fixture()
def context(test_settings):
    app_context = build_context(test_settings)
    app_context.lyrics_generator = FakeLyricsGenerator()
    app_context.synthesizer = FakeSynthesizer()
    return app_context


@pytest.fixture()
def client(context):
    """Provide a TestClient whose upstream clients are fakes."""
    with TestClient(main.create_app(context=context)) as test_client:
        yield test_client


@pytest.fixture()
def db_session(client, context):
    session = context.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def registration_payload():
    return {
        "name": "Asha Rao",
        "phone": "9876543210",
        "email": "asha@example.com",
    }
