from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.networks import validate_email

PHONE_PATTERN = r"^[6-9]\d{9}$"  # India 10-digit mobile


class GenderEnum(str, Enum):
    male = "male"
    female = "female"
    other = "other"


class RegisterRequest(BaseModel):
    name: str = Field(min_length=2, max_length=60)
    phone: str = Field(pattern=PHONE_PATTERN)
    email: str
    gender: GenderEnum | None = None
    genre: str | None = Field(default=None, min_length=3, max_length=20)

    @field_validator("email")
    @classmethod
    def validate_email_address(cls, value: str) -> str:
        # Stored as submitted so login can match it verbatim
        validate_email(value)
        return value


class PreferencesRequest(BaseModel):
    user_id: str = Field(alias="userId", min_length=1)
    gender: GenderEnum
    genre: str = Field(min_length=3, max_length=20)
    receiver_name: str = Field(alias="receiverName", min_length=2, max_length=60)

    model_config = ConfigDict(populate_by_name=True)


class LyricsResponse(BaseModel):
    lyrics: str


class UserResponse(BaseModel):
    id: str
    name: str
    phone: str
    email: str
    gender: GenderEnum | None
    genre: str | None
    created_at: datetime = Field(serialization_alias="createdAt")
    lyrics: str | None
    tts_url: str | None = Field(serialization_alias="ttsUrl")

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def serialize(cls, user) -> dict:
        return cls.model_validate(user).model_dump(mode="json", by_alias=True)

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive datetimes; they were written as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
