from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class ProfileUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    bio: str | None = None
    avatar_url: str | None = None


class ResponseProfile(BaseModel):
    """Public view of a user. The password hash is never part of it."""
    id: int
    username: str
    name: str
    bio: str | None = ""
    avatar_url: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ResponseAccount(ResponseProfile):
    email: str
