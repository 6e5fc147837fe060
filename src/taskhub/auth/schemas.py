from __future__ import annotations

from datetime import datetime
from uuid import UUID

from email_validator import EmailNotValidError, validate_email  # type: ignore[import-not-found]
from pydantic import BaseModel, Field, field_validator  # type: ignore[import-not-found]


class UserPublic(BaseModel):
    id: UUID
    email: str
    name: str | None = None
    avatar_url: str | None = None
    created_at: datetime
    updated_at: datetime


class SignupRequest(BaseModel):
    email: str = Field(min_length=1, max_length=320)
    name: str | None = Field(default=None, max_length=80)
    password: str = Field(min_length=1, max_length=256)

    @field_validator("email")
    @classmethod
    def _check_email_syntax(cls, value: str) -> str:
        # Syntax check only; the address is stored as typed (trimmed), never normalized.
        value = value.strip()
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as exc:
            raise ValueError(str(exc)) from exc
        return value


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=256)


class AuthResponse(BaseModel):
    user: UserPublic
    token: str


class MeResponse(BaseModel):
    user: UserPublic


class OkResponse(BaseModel):
    ok: bool = True


def to_user_public(user) -> UserPublic:  # type: ignore[no-untyped-def]
    return UserPublic(
        id=user.id,
        email=user.email,
        name=user.name,
        avatar_url=user.avatar_url,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )
