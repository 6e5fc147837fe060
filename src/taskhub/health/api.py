from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from taskhub.commons.depends import get_database_manager
from taskhub.core.db import DatabaseManager
from taskhub.health import service
from taskhub.health.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    manager: Annotated[DatabaseManager, Depends(get_database_manager)],
) -> HealthResponse:
    return HealthResponse(**(await service.get_health_payload(manager)))
