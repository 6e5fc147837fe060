"""
Resilient query executor.

Every repository call goes through `QueryExecutor.run`. Transient connectivity
failures (pool exhaustion, refused connections, dropped connections) are retried
a bounded number of times with linear backoff; anything else propagates on the
first occurrence. Query semantics are never altered, only the transport is
retried.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from sqlalchemy import exc as sa_exc  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from taskhub.commons.exceptions import BaseCoreException
from taskhub.commons.logging import logger

T = TypeVar("T")

# Driver messages (psycopg / Postgres) that indicate the server could not hand
# out a connection right now.
_TRANSIENT_MARKERS = (
    "connection refused",
    "too many connections",
    "too many clients",
    "remaining connection slots are reserved",
    "could not connect to server",
    "server closed the connection unexpectedly",
)

_NEVER_TRANSIENT = (
    sa_exc.IntegrityError,
    sa_exc.ProgrammingError,
    sa_exc.DataError,
)


class TransientStoreFailure(BaseCoreException):
    pass


def is_transient(exc: BaseException) -> bool:
    if isinstance(exc, _NEVER_TRANSIENT):
        return False
    # QueuePool exhausted: no connection became available within pool_timeout.
    if isinstance(exc, sa_exc.TimeoutError):
        return True
    if isinstance(exc, ConnectionRefusedError):
        return True
    if isinstance(exc, sa_exc.DBAPIError):
        if exc.connection_invalidated:
            return True
        if isinstance(exc.orig, ConnectionRefusedError):
            return True
        if isinstance(exc, sa_exc.OperationalError):
            text = str(exc.orig or exc).lower()
            return any(marker in text for marker in _TRANSIENT_MARKERS)
    return False


@dataclass
class QueryExecutor:
    retries: int = 2
    base_delay_s: float = 1.0
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    async def run(
        self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        attempt = 0
        while True:
            try:
                return await fn(*args, **kwargs)
            except Exception as exc:
                if not is_transient(exc):
                    raise
                if attempt >= self.retries:
                    raise TransientStoreFailure(
                        "store_unavailable",
                        f"Storage still unavailable after {attempt + 1} attempts",
                    ) from exc
                attempt += 1
                delay = self.base_delay_s * attempt
                logger.warning(
                    "Transient storage error (attempt %d/%d), retrying in %.1fs: %s",
                    attempt,
                    self.retries,
                    delay,
                    exc,
                )
                await self.sleep(delay)

    async def execute(self, session: AsyncSession, stmt: Any) -> Any:
        return await self.run(session.execute, stmt)

    async def flush(self, session: AsyncSession) -> None:
        # A failed flush leaves the session needing a rollback, so it gets one attempt.
        try:
            await session.flush()
        except Exception as exc:
            if is_transient(exc):
                raise TransientStoreFailure(
                    "store_unavailable", "Storage unavailable during flush"
                ) from exc
            raise
