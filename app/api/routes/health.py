"""Health check endpoints."""
from typing import Any

from fastapi import APIRouter

from app.core.config import settings

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Liveness plus the TED connector configuration. Does not call TED."""
    return {
        "status": "ok",
        "ted_mode": settings.ted_mode,
        "ted_base_url": settings.ted_search_base_url,
    }
