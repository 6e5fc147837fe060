"""
Reset-code delivery.

The reset flow only needs "send this code to this address, tell me whether it
went out". `ResendNotifier` does that over the Resend HTTP API; an unset
RESEND_API_KEY means the notifier is unconfigured and every send reports False.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import httpx  # type: ignore[import-not-found]

from taskhub.commons.logging import logger
from taskhub.core.settings import settings


class ResetCodeNotifier(Protocol):
    @property
    def is_configured(self) -> bool: ...

    async def send_reset_code(self, *, email: str, code: str) -> bool: ...


def render_reset_email(code: str, ttl_minutes: int) -> tuple[str, str]:
    subject = "Your OTP for Taskhub password reset"
    html = (
        f"<p>Your 4-digit OTP for Taskhub password reset is: <strong>{code}</strong></p>"
        f"<p>Valid for {ttl_minutes} minutes. Do not share this code.</p>"
    )
    return subject, html


@dataclass
class ResendNotifier:
    api_key: str | None
    sender: str
    base_url: str
    timeout_s: float
    ttl_minutes: int
    transport: httpx.AsyncBaseTransport | None = None

    @classmethod
    def from_settings(cls) -> "ResendNotifier":
        return cls(
            api_key=settings.RESEND_API_KEY,
            sender=settings.RESEND_FROM,
            base_url=settings.RESEND_BASE_URL,
            timeout_s=float(settings.RESEND_TIMEOUT_S),
            ttl_minutes=int(settings.PASSWORD_RESET_CODE_TTL_MINUTES),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def send_reset_code(self, *, email: str, code: str) -> bool:
        if not self.is_configured:
            logger.warning("Reset email not sent: RESEND_API_KEY is not configured")
            return False

        subject, html = render_reset_email(code, self.ttl_minutes)
        payload = {"from": self.sender, "to": [email], "subject": subject, "html": html}
        timeout = httpx.Timeout(self.timeout_s, connect=min(2.0, self.timeout_s))
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=timeout, transport=self.transport
            ) as client:
                resp = await client.post(
                    "/emails",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Reset email delivery failed: %s", exc)
            return False
        return True
