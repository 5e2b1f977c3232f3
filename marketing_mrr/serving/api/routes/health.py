"""
Health Check Endpoints

Provides health and readiness checks for orchestration systems.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from fastapi import APIRouter, Response
from pydantic import BaseModel

from marketing_mrr.config import get_settings
from marketing_mrr.ingestion.batch_loader import SourceLoader

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


def _missing_sources() -> list:
    settings = get_settings()
    loader = SourceLoader()
    lake = settings.data_lake
    names = [lake.campaigns_file, lake.users_file, lake.subscriptions_file]
    if lake.months_file:
        names.append(lake.months_file)
    return [str(loader.source_path(n)) for n in names if not Path(loader.source_path(n)).exists()]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Reports whether every configured source table exists in the raw zone.
    """
    settings = get_settings()
    missing = _missing_sources()
    checks = {
        "sources": {"status": "healthy"} if not missing else {"status": "unhealthy", "missing": missing},
    }

    return HealthResponse(
        status="healthy" if not missing else "degraded",
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.utcnow(),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """Returns 200 while the application is running."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(response: Response) -> Dict[str, str]:
    """Returns 200 once every source table is present."""
    if _missing_sources():
        response.status_code = 503
        return {"status": "not_ready", "reason": "sources_unavailable"}
    return {"status": "ready"}
