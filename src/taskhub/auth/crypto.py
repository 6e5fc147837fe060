from __future__ import annotations

import base64
import hashlib
import hmac
import secrets

from taskhub.auth.exceptions import WeakPassword
from taskhub.core.settings import settings

_SCHEME = "pbkdf2_sha256"

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128
PASSWORD_SPECIAL_CHARS = "!@#$%^&*()_+-=[]{}|;:',.<>?/\\\"`~"

COMMON_PASSWORDS = frozenset(
    {
        "123456", "12345678", "123456789", "1234567890", "password", "password1",
        "password123", "qwerty", "abc123", "111111", "123123", "admin", "letmein",
        "welcome", "monkey", "dragon", "master", "login", "princess", "football",
        "iloveyou", "admin123", "root", "pass", "passw0rd", "passwort", "qwerty123",
        "admin@123", "welcome1", "changeme", "password2", "1234", "12345", "sunshine",
        "shadow", "ashley", "bailey", "access", "trustno1", "superman", "qazwsx",
    }
)


def _b64e(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def _b64d(s: str) -> bytes:
    pad = "=" * ((4 - (len(s) % 4)) % 4)
    return base64.urlsafe_b64decode((s + pad).encode("utf-8"))


def _derive(password: str, salt: bytes, iterations: int, dklen: int = 32) -> bytes:
    return hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, iterations, dklen=dklen
    )


def hash_password(password: str, *, iterations: int | None = None) -> str:
    """
    PBKDF2-SHA256 password hash:
      pbkdf2_sha256$<iterations>$<salt_b64>$<hash_b64>

    The iteration count is stored with the hash, so raising
    AUTH_PASSWORD_ITERATIONS later keeps old hashes verifiable.
    """
    if not password:
        raise ValueError("password must be non-empty")
    iters = int(iterations or settings.AUTH_PASSWORD_ITERATIONS)
    salt = secrets.token_bytes(16)
    dk = _derive(password, salt, iters)
    return f"{_SCHEME}${iters}${_b64e(salt)}${_b64e(dk)}"


def verify_password(password: str, encoded: str | None) -> bool:
    try:
        scheme, iters_s, salt_b64, hash_b64 = (encoded or "").split("$", 3)
        if scheme != _SCHEME:
            raise ValueError(f"unknown hash scheme: {scheme}")
        iters = int(iters_s)
        salt = _b64d(salt_b64)
        expected = _b64d(hash_b64)
    except (ValueError, TypeError):
        # Burn one derivation so an unusable hash costs the same as a miss.
        _derive(password, b"\x00" * 16, int(settings.AUTH_PASSWORD_ITERATIONS))
        return False
    dk = _derive(password, salt, iters, dklen=len(expected))
    return hmac.compare_digest(dk, expected)


def new_session_token() -> str:
    # Opaque bearer token: 32 random bytes, 64 hex chars.
    return secrets.token_hex(32)


def hash_session_token(token: str) -> str:
    # Store only a hash in DB to reduce blast radius if DB is copied.
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def new_reset_code() -> str:
    """4-digit numeric one-time passcode (1000-9999)."""
    return str(1000 + secrets.randbelow(9000))


def validate_password_strength(password: str) -> None:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise WeakPassword(
            "weak_password",
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
        )
    if len(password) > PASSWORD_MAX_LENGTH:
        raise WeakPassword(
            "weak_password",
            f"Password must be at most {PASSWORD_MAX_LENGTH} characters",
        )
    if not any(c.isupper() for c in password):
        raise WeakPassword(
            "weak_password", "Password must include at least one uppercase letter"
        )
    if not any(c.islower() for c in password):
        raise WeakPassword(
            "weak_password", "Password must include at least one lowercase letter"
        )
    if not any(c.isdigit() for c in password):
        raise WeakPassword("weak_password", "Password must include at least one number")
    if not any(c in PASSWORD_SPECIAL_CHARS for c in password):
        raise WeakPassword(
            "weak_password",
            "Password must include at least one special character (!@# etc.)",
        )
    if password.lower() in COMMON_PASSWORDS:
        raise WeakPassword(
            "weak_password", "This password is too common. Choose a stronger one."
        )
