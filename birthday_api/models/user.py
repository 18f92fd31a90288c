import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text
from birthday_api.database import Base


def _uuid():
    return uuid.uuid4().hex


def _utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=_uuid)

    # Registration fields
    name = Column(String(60), nullable=False)
    phone = Column(String(10), nullable=False)
    email = Column(String, index=True, nullable=False)  # not unique, repeat registrations allowed

    # Dedication preferences, written again by /api/lyrics
    gender = Column(String, nullable=True)
    genre = Column(String(20), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    lyrics = Column(Text, nullable=True)
    tts_url = Column(String, nullable=True)
