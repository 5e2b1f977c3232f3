"""
FastAPI Application

Serves the marketing performance & MRR dashboard.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware
import structlog

from marketing_mrr.config import get_settings
from marketing_mrr.serving.api.middleware import RequestLoggingMiddleware
from marketing_mrr.serving.api.routes import dashboard_router, health_router

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    from marketing_mrr.config.logging import configure_logging
    configure_logging()

    logger.info("Starting MRR Dashboard API", environment=settings.app_env)
    yield
    logger.info("Shutting down...")


app = FastAPI(
    title="Marketing Performance & MRR API",
    description="Campaign spend joined with signups and cohort MRR",
    version=settings.version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(health_router, prefix="/api/v1", tags=["Health"])
app.include_router(dashboard_router, prefix="/api/v1/dashboard", tags=["Dashboard"])


@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": "Marketing Performance & MRR API",
        "version": settings.version,
        "environment": settings.app_env,
        "reporting_year": settings.report.reporting_year,
        "documentation": "/docs",
    }
