from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status

from taskhub.commons.exceptions import (
    BaseServiceBadGatewayException,
    BaseServiceException,
    BaseServiceForbiddenException,
    BaseServiceNotFoundException,
    BaseServiceUnauthorizedException,
    BaseServiceUnavailableException,
    BaseServiceUnProcessableException,
)
from taskhub.core.executor import TransientStoreFailure

_STATUS_BY_BASE: tuple[tuple[type[BaseServiceException], int], ...] = (
    (BaseServiceNotFoundException, status.HTTP_404_NOT_FOUND),
    (BaseServiceUnauthorizedException, status.HTTP_401_UNAUTHORIZED),
    (BaseServiceForbiddenException, status.HTTP_403_FORBIDDEN),
    (BaseServiceUnProcessableException, status.HTTP_422_UNPROCESSABLE_CONTENT),
    (BaseServiceUnavailableException, status.HTTP_503_SERVICE_UNAVAILABLE),
    (BaseServiceBadGatewayException, status.HTTP_502_BAD_GATEWAY),
)


def status_for(exc: BaseServiceException) -> int:
    for base, code in _STATUS_BY_BASE:
        if isinstance(exc, base):
            return code
    return status.HTTP_400_BAD_REQUEST


def _error_response(
    request: Request, *, code: int, message: str, details: str | None
) -> JSONResponse:
    return JSONResponse(
        status_code=code,
        content={
            "exception": {
                "code": code,
                "message": message,
                "details": details,
                "path": request.url.path,
                "method": request.method,
            }
        },
    )


def configure_global_exception_handlers(app: FastAPI) -> FastAPI:
    @app.exception_handler(BaseServiceException)
    async def service_exception_handler(
        request: Request, exc: BaseServiceException
    ) -> JSONResponse:
        return _error_response(
            request, code=status_for(exc), message=exc.message, details=exc.details
        )

    @app.exception_handler(TransientStoreFailure)
    async def transient_store_failure_handler(
        request: Request, exc: TransientStoreFailure
    ) -> JSONResponse:
        return _error_response(
            request,
            code=status.HTTP_503_SERVICE_UNAVAILABLE,
            message=exc.message,
            details="Database connection limit reached. Please try again in a moment.",
        )

    return app
