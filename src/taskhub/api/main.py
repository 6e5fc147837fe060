from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware  # type: ignore[import-not-found]

from taskhub.api.exceptions import configure_global_exception_handlers
from taskhub.api.routers import configure_routers
from taskhub.core.db import DatabaseManager
from taskhub.core.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    manager: DatabaseManager = app.state.database
    await manager.initialize()
    try:
        yield
    finally:
        await manager.shutdown()


def _cors_origins(raw: str) -> list[str]:
    # Be forgiving about localhost vs 127.0.0.1, since devs commonly use either.
    origins: list[str] = []
    for o in (part.strip() for part in raw.split(",")):
        if not o:
            continue
        origins.append(o)
        if o.startswith("http://localhost:"):
            origins.append(o.replace("http://localhost:", "http://127.0.0.1:", 1))
        elif o.startswith("http://127.0.0.1:"):
            origins.append(o.replace("http://127.0.0.1:", "http://localhost:", 1))
    # De-dupe while preserving order.
    return list(dict.fromkeys(origins))


def build_app(database: DatabaseManager | None = None) -> FastAPI:
    app = FastAPI(title=settings.API_TITLE, version=settings.API_VERSION, lifespan=lifespan)
    app.state.database = database or DatabaseManager()
    origins = _cors_origins(str(settings.CORS_ORIGINS))
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    configure_routers(app)
    configure_global_exception_handlers(app)
    return app


app = build_app()
