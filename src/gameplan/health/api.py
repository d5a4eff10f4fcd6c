from __future__ import annotations

from fastapi import APIRouter

from gameplan.health import service
from gameplan.health.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(**(await service.get_health_payload()))
