from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field  # type: ignore[import-not-found]


@dataclass(frozen=True)
class ProviderProfile:
    email: str
    name: str | None = None
    picture: str | None = None


class ProviderLoginRequest(BaseModel):
    access_token: str = Field(min_length=1, max_length=4096)
