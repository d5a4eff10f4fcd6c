from __future__ import annotations

import datetime as dt

from gameplan.core.settings import settings
from gameplan.health import repository


async def get_health_payload() -> dict:
    db_ok, db_detail = await repository.check_db()
    # The database is the only hard dependency of the API.
    status = "ok" if db_ok else "error"
    return {
        "status": status,
        "version": settings.API_VERSION,
        "environment": settings.APP_ENV,
        "timestamp": dt.datetime.now(dt.UTC),
        "database": {"ok": db_ok, "detail": db_detail},
    }
