from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Request  # type: ignore[import-not-found]
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore[import-not-found]

from taskhub.core.db import DatabaseManager
from taskhub.core.executor import QueryExecutor


def get_database_manager(request: Request) -> DatabaseManager:
    return request.app.state.database


def get_query_executor(request: Request) -> QueryExecutor:
    return get_database_manager(request).executor


async def database_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    manager = get_database_manager(request)
    # Lifespan normally opens the engine; this covers apps served without it.
    await manager.initialize()
    async with manager.session() as session:
        yield session
