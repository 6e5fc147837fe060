"""
Database manager (async SQLAlchemy).

One manager per application process: it owns the engine, the sessionmaker and
the resilient query executor. `build_app` creates it, the FastAPI lifespan
opens and disposes it, and dependencies read it from `app.state.database`.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (  # type: ignore[import-not-found]
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskhub.commons.exceptions import BaseCoreException
from taskhub.commons.logging import logger
from taskhub.core.executor import QueryExecutor
from taskhub.core.settings import Settings, settings as default_settings


class DatabaseException(BaseCoreException):
    pass


def build_dsn(cfg: Settings) -> str:
    # psycopg async driver
    return (
        "postgresql+psycopg://"
        f"{cfg.TASKHUB_DB_USER}:{cfg.TASKHUB_DB_PASSWORD}"
        f"@{cfg.TASKHUB_DB_HOST}:{cfg.TASKHUB_DB_PORT}"
        f"/{cfg.TASKHUB_DB_NAME}"
    )


class DatabaseManager:
    def __init__(self, cfg: Settings | None = None) -> None:
        self.cfg = cfg or default_settings
        self.engine: AsyncEngine | None = None
        self.sessionmaker: async_sessionmaker[AsyncSession] | None = None
        self.executor = QueryExecutor(
            retries=int(self.cfg.DB_RETRY_ATTEMPTS),
            base_delay_s=float(self.cfg.DB_RETRY_BASE_DELAY_S),
        )

    async def initialize(self) -> None:
        if self.engine is not None:
            return
        try:
            self.engine = create_async_engine(
                build_dsn(self.cfg),
                echo=False,
                pool_size=int(self.cfg.DB_POOL_SIZE),
                pool_timeout=float(self.cfg.DB_POOL_TIMEOUT_S),
                pool_pre_ping=True,
            )
            self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)
            logger.info("Database initialized")
        except Exception as exc:
            raise DatabaseException("Failed to initialize database", str(exc)) from exc

    async def shutdown(self) -> None:
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self.sessionmaker = None
        logger.info("Database shut down")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        if self.sessionmaker is None:
            raise DatabaseException("Database is not initialized")
        async with self.sessionmaker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()
