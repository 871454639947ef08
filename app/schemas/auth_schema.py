import re
from pydantic import BaseModel, Field, field_validator

_email_pattern = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: str
    password: str = Field(min_length=6)
    name: str = Field(min_length=1, max_length=100)
    bio: str | None = ""
    avatar_url: str | None = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        if not _email_pattern.match(value.strip()):
            raise ValueError("Invalid email address")
        return value.strip().lower()


class UserLogin(BaseModel):
    username: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
