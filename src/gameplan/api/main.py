from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware  # type: ignore[import-not-found]

from gameplan.api.exceptions import configure_global_exception_handlers
from gameplan.api.routers import configure_routers
from gameplan.commons.logging import logger
from gameplan.core.db import database_manager
from gameplan.core.settings import DEV_JWT_SECRET, settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    await database_manager.shutdown()


def _cors_origins() -> list[str]:
    # Be forgiving about localhost vs 127.0.0.1, since devs commonly use either.
    raw_origins = [o.strip() for o in str(settings.CORS_ORIGINS).split(",") if o.strip()]
    origins: list[str] = []
    for o in raw_origins:
        origins.append(o)
        if o.startswith("http://localhost:"):
            origins.append(o.replace("http://localhost:", "http://127.0.0.1:", 1))
        elif o.startswith("http://127.0.0.1:"):
            origins.append(o.replace("http://127.0.0.1:", "http://localhost:", 1))
    # De-dupe while preserving order.
    seen: set[str] = set()
    return [o for o in origins if not (o in seen or seen.add(o))]


def build_app() -> FastAPI:
    settings.validate_for_environment()
    if settings.JWT_SECRET == DEV_JWT_SECRET:
        logger.warning("Using the development JWT secret. Set JWT_SECRET outside local dev!")

    app = FastAPI(
        title=settings.API_TITLE,
        version=settings.API_VERSION,
        description="Sports club management API",
        lifespan=lifespan,
    )
    origins = _cors_origins()
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
