"""Health check router."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...config.config import Settings
from ...database.connection import DatabaseConnectionManager
from ..dependencies import get_app_settings, get_database

router = APIRouter()


@router.get("", response_model=Dict[str, Any])
async def health_check(settings: Settings = Depends(get_app_settings)) -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns:
        Dict containing health status information
    """
    return {
        "status": "healthy",
        "version": settings.app_version,
        "env": settings.app_env,
        "generator": {
            "model": settings.dspy_model,
            "api_key_configured": settings.llm_api_key is not None,
        },
    }


@router.get("/liveness", response_model=Dict[str, Any])
async def liveness_check() -> Dict[str, Any]:
    """Liveness probe endpoint."""
    return {"status": "alive"}


@router.get("/readiness", response_model=Dict[str, Any])
async def readiness_check(
    db: DatabaseConnectionManager = Depends(get_database),
) -> Dict[str, Any]:
    """
    Readiness probe endpoint. Fails with 500 when the store is unreachable.

    Returns:
        Dict containing readiness status
    """
    await db.check_connection()
    return {"status": "ready"}
