import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from birthday_api.context import AppContext, get_context
from birthday_api.database import get_db
from birthday_api.models.user import User
from birthday_api.schemas.user import LyricsResponse, PreferencesRequest
from birthday_api.services.prompt_builder import build_prompt
from birthday_api.utils.response import handle_exception

router = APIRouter(prefix="/api", tags=["Lyrics"])
logger = logging.getLogger(__name__)


@router.post("/lyrics", response_model=LyricsResponse)
async def generate_lyrics(
    body: PreferencesRequest,
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
):
    try:
        prompt = build_prompt(body.receiver_name, body.genre, body.gender)
        lyrics = await context.lyrics_generator.generate(prompt)

        # Overwrite, last write wins; an unknown id updates nothing
        updated = (
            db.query(User)
            .filter(User.id == body.user_id)
            .update(
                {"gender": body.gender.value, "genre": body.genre, "lyrics": lyrics},
                synchronize_session=False,
            )
        )
        db.commit()
        if not updated:
            logger.warning("Lyrics generated for unknown user id=%s; nothing stored", body.user_id)
        else:
            logger.info("Stored lyrics for user id=%s (%s chars)", body.user_id, len(lyrics))

        return {"lyrics": lyrics}
    except Exception as exc:
        db.rollback()
        return handle_exception(exc)
