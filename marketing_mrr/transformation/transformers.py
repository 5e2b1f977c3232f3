"""
Dashboard Transformer

Assembles the marketing performance & MRR dashboard and orchestrates a full
run: cleaning, validation, transformation and output.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import polars as pl
import structlog

from marketing_mrr.config import get_settings
from marketing_mrr.ingestion.batch_loader import SourceTables
from marketing_mrr.quality.validators import (
    DataQualityError,
    ValidationResult,
    ValidationStatus,
    create_campaigns_validator,
    create_subscriptions_validator,
    create_users_validator,
)
from .aggregators import COHORT_KEYS, aggregate_cohorts, aggregate_signups
from .cleaners import DataCleaner
from .enrichers import DataEnricher
from .extractors import extract_cost_data, extract_signups

logger = structlog.get_logger(__name__)

REPORT_KEYS = ["date", "campaign"]

DASHBOARD_COLUMNS = [
    "date",
    "campaign",
    "cost",
    "clicks",
    "impressions",
    "signups",
    "yearly_subscriptions_mrr",
    "monthly_subscriptions_mrr",
    "total_mrr",
    "total_subscriptions",
]


def round_half_away_from_zero(expr: pl.Expr) -> pl.Expr:
    """Round to the nearest integer, halves away from zero (warehouse ``::int``)."""
    return (expr.abs() + 0.5).floor() * expr.sign()


def assemble_report(
    cost: pl.DataFrame,
    signup_summary: pl.DataFrame,
    cohort_summary: pl.DataFrame,
) -> pl.DataFrame:
    """
    Attach signup and cohort metrics to each campaign-day.

    Both joins are left outer joins on (date, campaign): a campaign-day
    without signups or subscriptions keeps null metrics, never zero.

    Returns:
        Dashboard rows sorted by date, then campaign
    """
    report = (
        cost.join(signup_summary, left_on=REPORT_KEYS, right_on=COHORT_KEYS, how="left")
        .join(cohort_summary, left_on=REPORT_KEYS, right_on=COHORT_KEYS, how="left")
        .with_columns(
            round_half_away_from_zero(pl.col("total_mrr")).cast(pl.Int64).alias("total_mrr")
        )
    )
    return report.select(DASHBOARD_COLUMNS).sort(REPORT_KEYS, nulls_last=True)


@dataclass
class DashboardFrames:
    """Every intermediate result of one dashboard computation"""
    cost: pl.DataFrame
    signups: pl.DataFrame
    enriched_subscriptions: pl.DataFrame
    monthly_activity: pl.DataFrame
    cohort_summary: pl.DataFrame
    signup_summary: pl.DataFrame
    report: pl.DataFrame
    orphaned_subscriptions: int = 0


def compute_dashboard_frames(
    campaigns: pl.DataFrame,
    users: pl.DataFrame,
    subscriptions: pl.DataFrame,
    months: pl.DataFrame,
    enricher: Optional[DataEnricher] = None,
) -> DashboardFrames:
    """Run every stage over cleaned source tables, keeping intermediates."""
    enricher = enricher or DataEnricher()

    cost = extract_cost_data(campaigns)
    signups = extract_signups(users)
    enriched = enricher.enrich_subscriptions(subscriptions, signups)
    activity = enricher.expand_monthly_activity(enriched, months)
    cohort_summary = aggregate_cohorts(
        activity,
        monthly_type=enricher.monthly_type,
        yearly_type=enricher.yearly_type,
    )
    signup_summary = aggregate_signups(signups)
    report = assemble_report(cost, signup_summary, cohort_summary)

    return DashboardFrames(
        cost=cost,
        signups=signups,
        enriched_subscriptions=enriched,
        monthly_activity=activity,
        cohort_summary=cohort_summary,
        signup_summary=signup_summary,
        report=report,
        orphaned_subscriptions=enricher.orphaned_subscriptions,
    )


def build_dashboard(
    campaigns: pl.DataFrame,
    users: pl.DataFrame,
    subscriptions: pl.DataFrame,
    months: pl.DataFrame,
) -> pl.DataFrame:
    """
    Marketing performance & MRR dashboard from cleaned source tables.

    Deterministic and total: unmatched rows carry nulls, nothing raises.
    """
    return compute_dashboard_frames(campaigns, users, subscriptions, months).report


@dataclass
class TransformResult:
    """Result of a dashboard run"""
    input_rows: Dict[str, int]
    output_rows: int
    orphaned_subscriptions: int
    active_records: int
    started_at: datetime
    completed_at: datetime
    duration_seconds: float
    output_path: Optional[str] = None
    validation: Dict[str, ValidationResult] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    frames: Optional[DashboardFrames] = None

    @property
    def dashboard(self) -> Optional[pl.DataFrame]:
        return self.frames.report if self.frames is not None else None


class DashboardTransformer:
    """
    Dashboard pipeline orchestrator.

    Coordinates cleaning, validation, transformation and output of the
    marketing performance & MRR dashboard.

    Example:
        transformer = DashboardTransformer()
        result = transformer.transform(loader.load_sources())
    """

    def __init__(
        self,
        output_path: Optional[str] = None,
        enable_validation: Optional[bool] = None,
        fail_on_error: Optional[bool] = None,
        write_output: Optional[bool] = None,
        strict_mode: Optional[bool] = None,
    ):
        settings = get_settings()
        self.output_path = Path(output_path or settings.data_lake.curated_path)
        self.enable_validation = (
            settings.data_quality.enable_data_quality_checks
            if enable_validation is None else enable_validation
        )
        self.fail_on_error = (
            settings.data_quality.fail_on_error if fail_on_error is None else fail_on_error
        )
        self.strict_mode = settings.data_quality.strict_mode if strict_mode is None else strict_mode
        self.write_output = settings.report.write_output if write_output is None else write_output
        self.cleaner = DataCleaner()
        self.enricher = DataEnricher()

    def _write_output(self, df: pl.DataFrame, name: str) -> str:
        """Write the dashboard to the curated zone"""
        self.output_path.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")
        output_file = self.output_path / f"{name}_{timestamp}.parquet"

        df.write_parquet(output_file)
        logger.info(f"Written {len(df)} rows to {output_file}")

        return str(output_file)

    def clean(self, sources: SourceTables) -> SourceTables:
        """Normalize types of every source table"""
        return SourceTables(
            campaigns=self.cleaner.clean_campaigns(sources.campaigns),
            users=self.cleaner.clean_users(sources.users),
            subscriptions=self.cleaner.clean_subscriptions(sources.subscriptions),
            months=self.cleaner.clean_months(sources.months),
            results=sources.results,
        )

    def validate(self, sources: SourceTables) -> Dict[str, ValidationResult]:
        """
        Run the source validators.

        Raises:
            DataQualityError: if an ERROR check fails and fail_on_error is set.
                In strict mode failed WARNING checks count as failures too.
        """
        results = {
            "campaigns": create_campaigns_validator(self.strict_mode).validate(sources.campaigns),
            "users": create_users_validator(self.strict_mode).validate(sources.users),
            "subscriptions": create_subscriptions_validator(sources.users, self.strict_mode).validate(
                sources.subscriptions
            ),
        }

        failed = [name for name, r in results.items() if r.status == ValidationStatus.FAILED]
        if failed and self.fail_on_error:
            raise DataQualityError(f"Data quality checks failed for: {', '.join(failed)}")

        return results

    def transform(self, sources: SourceTables) -> TransformResult:
        """
        Build the dashboard.

        Pipeline:
        1. Clean source tables
        2. Validate (when enabled)
        3. Compute the dashboard
        4. Output to curated zone (when enabled)
        """
        started_at = datetime.utcnow()
        input_rows = {
            "campaigns": len(sources.campaigns),
            "users": len(sources.users),
            "subscriptions": len(sources.subscriptions),
            "months": len(sources.months),
        }
        errors = []
        validation = {}
        frames = None
        output_file = None
        orphaned = 0

        logger.info("Starting dashboard transformation", **input_rows)

        try:
            sources = self.clean(sources)

            if self.enable_validation:
                validation = self.validate(sources)

            frames = compute_dashboard_frames(
                sources.campaigns,
                sources.users,
                sources.subscriptions,
                sources.months,
                enricher=self.enricher,
            )
            orphaned = frames.orphaned_subscriptions

            if self.write_output:
                output_file = self._write_output(frames.report, "marketing_dashboard")

        except Exception as e:
            logger.error(f"Dashboard transformation failed: {e}")
            errors.append(str(e))
            frames = None

        completed_at = datetime.utcnow()

        result = TransformResult(
            input_rows=input_rows,
            output_rows=len(frames.report) if frames is not None else 0,
            orphaned_subscriptions=orphaned,
            active_records=len(frames.monthly_activity) if frames is not None else 0,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
            output_path=output_file,
            validation=validation,
            errors=errors,
            frames=frames,
        )

        logger.info(
            "Dashboard transformation complete",
            output_rows=result.output_rows,
            active_records=result.active_records,
            orphaned_subscriptions=result.orphaned_subscriptions,
            duration_seconds=round(result.duration_seconds, 3),
        )

        return result
