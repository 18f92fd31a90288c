import asyncio
import json

import httpx
import pytest
from elevenlabs.core.api_error import ApiError

from birthday_api.services.tts_service import (
    ElevenLabsHttpSynthesizer,
    ElevenLabsSdkSynthesizer,
    build_synthesizer,
)
from birthday_api.services.upstream import (
    TtsKeyMissing,
    UpstreamBadResponse,
    UpstreamTimeout,
    UpstreamUnavailable,
)


def test_tts_streams_audio(client, context):
    response = client.post("/api/tts", json={"text": "Happy birthday"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "audio/mpeg"
    assert response.content == b"ID3fake-mp3"
    assert context.synthesizer.texts == ["Happy birthday"]


@pytest.mark.parametrize("body", [{}, {"text": ""}, {"text": None}, {"text": 42}])
def test_tts_requires_text_before_calling_upstream(client, context, body):
    response = client.post("/api/tts", json=body)

    assert response.status_code == 400
    assert response.json()["message"] == "text required"
    assert context.synthesizer.texts == []


def test_tts_without_body(client, context):
    response = client.post("/api/tts")

    assert response.status_code == 400
    assert context.synthesizer.texts == []


def test_tts_key_missing(client, context):
    context.synthesizer = ElevenLabsHttpSynthesizer(api_key=None)

    response = client.post("/api/tts", json={"text": "Happy birthday"})

    assert response.status_code == 400
    assert response.json() == {"message": "TTS key missing"}


@pytest.mark.parametrize(
    "error",
    [
        UpstreamUnavailable("TTS error: 401", service="tts"),
        UpstreamTimeout("TTS service timed out", service="tts"),
        UpstreamBadResponse("TTS service returned no audio", service="tts"),
    ],
)
def test_tts_upstream_failure(client, context, error):
    context.synthesizer.error = error

    response = client.post("/api/tts", json={"text": "Happy birthday"})

    assert response.status_code == 500
    assert response.json() == {"message": "TTS failed", "code": error.code}


def test_http_synthesizer_request_shape():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.read())
        return httpx.Response(200, content=b"mp3-bytes", headers={"content-type": "audio/mpeg"})

    synthesizer = ElevenLabsHttpSynthesizer("xi-key", transport=httpx.MockTransport(handler))
    audio = asyncio.run(synthesizer.synthesize("Happy birthday"))

    assert audio == b"mp3-bytes"
    assert seen["url"] == "https://api.elevenlabs.io/v1/text-to-speech/JBFqnCBsd6RMkjVDRZzb"
    assert seen["headers"]["xi-api-key"] == "xi-key"
    assert seen["headers"]["accept"] == "audio/mpeg"
    assert seen["body"] == {
        "text": "Happy birthday",
        "model_id": "eleven_monolingual_v1",
        "voice_settings": {"stability": 0.5, "similarity_boost": 0.75},
    }


@pytest.mark.parametrize(
    "handler, error_cls",
    [
        (lambda request: httpx.Response(401, json={"detail": "bad key"}), UpstreamUnavailable),
        (lambda request: httpx.Response(200, content=b""), UpstreamBadResponse),
    ],
)
def test_http_synthesizer_failures(handler, error_cls):
    synthesizer = ElevenLabsHttpSynthesizer("xi-key", transport=httpx.MockTransport(handler))

    with pytest.raises(error_cls):
        asyncio.run(synthesizer.synthesize("Happy birthday"))


def test_http_synthesizer_timeout():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    synthesizer = ElevenLabsHttpSynthesizer("xi-key", transport=httpx.MockTransport(handler))

    with pytest.raises(UpstreamTimeout):
        asyncio.run(synthesizer.synthesize("Happy birthday"))


def test_http_synthesizer_connection_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    synthesizer = ElevenLabsHttpSynthesizer("xi-key", transport=httpx.MockTransport(handler))

    with pytest.raises(UpstreamUnavailable):
        asyncio.run(synthesizer.synthesize("Happy birthday"))


class _FakeTextToSpeech:
    def __init__(self, chunks):
        self.chunks = chunks
        self.calls = []

    def convert(self, **kwargs):
        self.calls.append(kwargs)
        return iter(self.chunks)


class _FakeElevenLabs:
    def __init__(self, chunks):
        self.text_to_speech = _FakeTextToSpeech(chunks)


def test_sdk_synthesizer_joins_chunks():
    fake = _FakeElevenLabs([b"ab", b"cd"])
    synthesizer = ElevenLabsSdkSynthesizer("xi-key", client=fake)

    audio = asyncio.run(synthesizer.synthesize("Happy birthday"))

    assert audio == b"abcd"
    assert fake.text_to_speech.calls == [
        {
            "voice_id": "JBFqnCBsd6RMkjVDRZzb",
            "text": "Happy birthday",
            "model_id": "eleven_multilingual_v2",
            "output_format": "mp3_44100_128",
        }
    ]


def test_sdk_synthesizer_empty_audio():
    synthesizer = ElevenLabsSdkSynthesizer("xi-key", client=_FakeElevenLabs([]))

    with pytest.raises(UpstreamBadResponse):
        asyncio.run(synthesizer.synthesize("Happy birthday"))


def test_sdk_synthesizer_requires_key():
    synthesizer = ElevenLabsSdkSynthesizer(None, client=_FakeElevenLabs([b"ab"]))

    with pytest.raises(TtsKeyMissing):
        asyncio.run(synthesizer.synthesize("Happy birthday"))


@pytest.mark.parametrize("provider, expected", [("http", ElevenLabsHttpSynthesizer), ("sdk", ElevenLabsSdkSynthesizer)])
def test_build_synthesizer(provider, expected):
    synthesizer = build_synthesizer(provider, "xi-key", timeout=5)

    assert isinstance(synthesizer, expected)
    assert synthesizer.timeout == 5


def test_build_synthesizer_rejects_unknown_provider():
    with pytest.raises(ValueError):
        build_synthesizer("browser", "xi-key")


@pytest.mark.parametrize("body", [["Happy birthday"], "Happy birthday", [{"text": "Happy birthday"}]])
def test_tts_non_object_body(client, context, body):
    response = client.post("/api/tts", json=body)

    assert response.status_code == 400
    assert response.json()["message"] == "text required"
    assert context.synthesizer.texts == []


class _FailingTextToSpeech:
    def __init__(self, error):
        self.error = error

    def convert(self, **kwargs):
        raise self.error


class _FailingElevenLabs:
    def __init__(self, error):
        self.text_to_speech = _FailingTextToSpeech(error)


_SDK_REQUEST = httpx.Request("POST", "https://api.elevenlabs.io/v1/text-to-speech/JBFqnCBsd6RMkjVDRZzb")


@pytest.mark.parametrize(
    "error, error_cls",
    [
        (httpx.ReadTimeout("too slow", request=_SDK_REQUEST), UpstreamTimeout),
        (httpx.ConnectError("refused", request=_SDK_REQUEST), UpstreamUnavailable),
        (ApiError(status_code=401, body={"detail": "invalid api key"}), UpstreamUnavailable),
    ],
)
def test_sdk_synthesizer_maps_failures(error, error_cls):
    synthesizer = ElevenLabsSdkSynthesizer("xi-key", client=_FailingElevenLabs(error))

    with pytest.raises(error_cls) as excinfo:
        asyncio.run(synthesizer.synthesize("Happy birthday"))

    assert excinfo.value.service == "tts"
    assert excinfo.value.code == error_cls.code
