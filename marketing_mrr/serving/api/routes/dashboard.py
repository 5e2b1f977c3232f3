"""
Dashboard API Endpoints

REST API exposing the marketing performance & MRR dashboard to BI tools.
"""

from datetime import date
from typing import List, Optional

import polars as pl
import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from marketing_mrr.ingestion.batch_loader import SourceLoader, SourceLoadError
from marketing_mrr.transformation.transformers import DashboardFrames, DashboardTransformer

router = APIRouter()
logger = structlog.get_logger(__name__)


class DashboardRow(BaseModel):
    """One campaign-day of the dashboard"""
    date: date
    campaign: str
    cost: Optional[float]
    clicks: Optional[int]
    impressions: Optional[int]
    signups: Optional[int] = None
    yearly_subscriptions_mrr: Optional[float] = None
    monthly_subscriptions_mrr: Optional[float] = None
    total_mrr: Optional[int] = None
    total_subscriptions: Optional[int] = None


class DashboardResponse(BaseModel):
    """Dashboard rows with totals"""
    rows: List[DashboardRow]
    row_count: int
    total_cost: float
    total_signups: int


class CohortSummary(BaseModel):
    """MRR of one acquisition cohort"""
    signup_date: date
    signup_campaign: str
    total_mrr: float
    yearly_subscriptions_mrr: float
    monthly_subscriptions_mrr: float
    total_subscriptions: int


def get_dashboard_frames() -> DashboardFrames:
    """Load sources from the raw zone and compute the dashboard"""
    try:
        sources = SourceLoader().load_sources()
    except SourceLoadError as e:
        logger.error("Dashboard sources unavailable", error=str(e))
        raise HTTPException(status_code=503, detail=str(e))

    result = DashboardTransformer(write_output=False).transform(sources)
    if result.errors:
        raise HTTPException(status_code=500, detail="; ".join(result.errors))
    return result.frames


def _filter_report(
    df: pl.DataFrame,
    key_date: str,
    key_campaign: str,
    start_date: Optional[date],
    end_date: Optional[date],
    campaign: Optional[str],
) -> pl.DataFrame:
    if start_date:
        df = df.filter(pl.col(key_date) >= start_date)
    if end_date:
        df = df.filter(pl.col(key_date) <= end_date)
    if campaign:
        df = df.filter(pl.col(key_campaign) == campaign)
    return df


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    campaign: Optional[str] = Query(None, description="Restrict to one campaign"),
    frames: DashboardFrames = Depends(get_dashboard_frames),
) -> DashboardResponse:
    """
    Dashboard rows ordered by date and campaign.

    Metrics without a matching cohort are returned as null.
    """
    df = _filter_report(frames.report, "date", "campaign", start_date, end_date, campaign)

    return DashboardResponse(
        rows=[DashboardRow(**row) for row in df.iter_rows(named=True)],
        row_count=len(df),
        total_cost=float(df["cost"].sum() or 0),
        total_signups=int(df["signups"].sum() or 0),
    )


@router.get("/cohorts", response_model=List[CohortSummary])
async def get_cohorts(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    campaign: Optional[str] = None,
    frames: DashboardFrames = Depends(get_dashboard_frames),
) -> List[CohortSummary]:
    """MRR per (signup_date, signup_campaign) cohort."""
    df = _filter_report(
        frames.cohort_summary, "signup_date", "signup_campaign", start_date, end_date, campaign
    ).sort(["signup_date", "signup_campaign"])

    return [CohortSummary(**row) for row in df.iter_rows(named=True)]
