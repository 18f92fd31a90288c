import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import Response

from birthday_api.context import AppContext, get_context
from birthday_api.services.upstream import TtsKeyMissing, UpstreamError
from birthday_api.utils.response import error_response, handle_exception

router = APIRouter(prefix="/api", tags=["TTS"])
logger = logging.getLogger(__name__)


@router.post("/tts")
async def text_to_speech(body: Any = Body(default=None), context: AppContext = Depends(get_context)):
    text = body.get("text") if isinstance(body, dict) else None
    if not isinstance(text, str) or not text:
        return error_response("text required", status.HTTP_400_BAD_REQUEST)

    try:
        audio = await context.synthesizer.synthesize(text)
    except TtsKeyMissing as exc:
        return error_response(exc.message, exc.status_code)
    except UpstreamError as exc:
        logger.warning("TTS via %s failed (%s): %s", context.synthesizer.name, exc.code, exc.message)
        return error_response("TTS failed", status.HTTP_500_INTERNAL_SERVER_ERROR, code=exc.code)
    except Exception as exc:
        return handle_exception(exc, fallback_message="TTS failed")

    logger.info("Synthesized %s bytes of audio for %s chars", len(audio), len(text))
    return Response(content=audio, media_type="audio/mpeg")
