import re
from datetime import datetime

from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


# --- Identity ---

class TokenPayload(BaseModel):
    """What a token asserts about its bearer."""

    subject_id: int
    email: str
    model_config = ConfigDict(frozen=True)


class TokenClaim(TokenPayload):
    """A verified payload together with its validity window."""

    issued_at: datetime
    expires_at: datetime

    @property
    def payload(self) -> TokenPayload:
        return TokenPayload(subject_id=self.subject_id, email=self.email)


# --- Auth ---

class UserRegister(BaseModel):
    # Passwords are hashed exactly as typed; only name and email are trimmed.
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
    email: EmailStr
    password: str = Field(min_length=6)

    @field_validator("email", mode="before")
    @classmethod
    def _normalise_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def _password_strength(cls, value: str) -> str:
        if not _PASSWORD_RE.match(value):
            raise ValueError(
                "Password must contain at least one uppercase letter, "
                "one lowercase letter, and one number"
            )
        return value


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def _normalise_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


# --- Post ---

class PostCreate(BaseModel):
    title: str = Field(min_length=3, max_length=255)
    content: str = Field(min_length=10)
    published: bool = False
    model_config = ConfigDict(str_strip_whitespace=True)


class PostUpdate(BaseModel):
    title: str | None = Field(None, min_length=3, max_length=255)
    content: str | None = Field(None, min_length=10)
    published: bool | None = None
    model_config = ConfigDict(str_strip_whitespace=True)


# --- Comment ---

class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=1000)
    model_config = ConfigDict(str_strip_whitespace=True)


class CommentUpdate(CommentCreate):
    pass


# --- Pagination ---

class PaginationMeta(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PostPage(BaseModel):
    posts: list[dict]
    pagination: PaginationMeta
