from fastapi import FastAPI

from taskhub.auth.api import router as auth_router
from taskhub.health.api import router as health_router
from taskhub.identity.api import router as identity_router
from taskhub.password_reset.api import router as password_reset_router
from taskhub.permissions.api import router as permissions_router


def configure_routers(app: FastAPI) -> FastAPI:
    app.include_router(auth_router)
    app.include_router(health_router)
    app.include_router(identity_router)
    app.include_router(password_reset_router)
    app.include_router(permissions_router)
    return app
