from fastapi import FastAPI

from gameplan.auth.api import router as auth_router
from gameplan.core.settings import settings
from gameplan.health.api import router as health_router


def configure_routers(app: FastAPI) -> FastAPI:
    app.include_router(auth_router, prefix=settings.API_PREFIX)
    app.include_router(health_router)
    return app
