from __future__ import annotations

from pydantic import BaseModel, Field, field_validator  # type: ignore[import-not-found]


class _EmailRequest(BaseModel):
    email: str = Field(min_length=1, max_length=320)

    @field_validator("email")
    @classmethod
    def _require_email(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Email required")
        return value


class ForgotPasswordRequest(_EmailRequest):
    pass


class VerifyResetCodeRequest(_EmailRequest):
    otp: str = Field(min_length=1, max_length=16)


class ResetPasswordRequest(_EmailRequest):
    otp: str = Field(min_length=1, max_length=16)
    new_password: str = Field(min_length=1, max_length=256, alias="newPassword")

    model_config = {"populate_by_name": True}


class MessageResponse(BaseModel):
    message: str
