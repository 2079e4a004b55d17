"""Health check endpoint — public, no auth required."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from cadence.dependencies import AppSettings, EngineConfig

router = APIRouter(tags=["system"])


@router.get("/health")
async def health_check(settings: AppSettings, config: EngineConfig) -> dict:
    """Liveness probe. Returns 200 if the API process is up.

    Also reports which prediction config version is active.
    """
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "prediction_config": config.version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
