"""
Prefect Workflow Orchestration - Dashboard ETL

On-demand workflow that builds the marketing performance & MRR dashboard:
- Load source tables from the raw zone
- Clean, validate and transform
- Write the dashboard to the curated zone
- Log a run summary
"""

from typing import Optional

from prefect import flow, task, get_run_logger

from marketing_mrr.config import bind_run_context, clear_run_context, configure_logging, get_settings
from marketing_mrr.ingestion.batch_loader import SourceLoader, SourceTables, FileFormat
from marketing_mrr.transformation.transformers import DashboardTransformer

settings = get_settings()


# =============================================================================
# TASKS
# =============================================================================

@task(
    name="load_sources",
    description="Load campaign, user, subscription and month tables",
    retries=2,
    retry_delay_seconds=30,
)
def load_sources(
    source_dir: str,
    file_format: str,
    reporting_year: int,
) -> SourceTables:
    """Load all source tables"""
    logger = get_run_logger()

    loader = SourceLoader(raw_path=source_dir, file_format=FileFormat(file_format))
    sources = loader.load_sources(reporting_year=reporting_year)

    logger.info(
        f"Loaded sources: {len(sources.campaigns)} campaign-days, "
        f"{len(sources.users)} users, {len(sources.subscriptions)} subscriptions, "
        f"{len(sources.months)} months"
    )
    return sources


@task(
    name="build_dashboard",
    description="Clean, validate and transform sources into the dashboard",
)
def build_dashboard(
    sources: SourceTables,
    output_dir: str,
    fail_on_error: bool,
) -> dict:
    """Transform sources into the dashboard"""
    logger = get_run_logger()

    transformer = DashboardTransformer(output_path=output_dir, fail_on_error=fail_on_error)
    result = transformer.transform(sources)

    if result.errors:
        raise RuntimeError(f"Dashboard transformation failed: {'; '.join(result.errors)}")

    for name, validation in result.validation.items():
        logger.info(
            f"Validation {name} {validation.status.value}: "
            f"{validation.passed_checks}/{validation.total_checks} checks passed "
            f"({validation.success_rate:.1f}%)"
        )

    logger.info(
        f"Dashboard complete: {result.output_rows} rows, "
        f"{result.orphaned_subscriptions} orphaned subscriptions dropped"
    )

    return {
        "input_rows": result.input_rows,
        "output_rows": result.output_rows,
        "active_records": result.active_records,
        "orphaned_subscriptions": result.orphaned_subscriptions,
        "validation": {
            name: {"status": v.status.value, "success_rate": v.success_rate}
            for name, v in result.validation.items()
        },
        "duration_seconds": result.duration_seconds,
        "output_path": result.output_path,
    }


# =============================================================================
# FLOWS
# =============================================================================

@flow(
    name="marketing_dashboard_etl",
    description="Build the marketing performance & MRR dashboard",
)
def marketing_dashboard_etl(
    source_dir: Optional[str] = None,
    output_dir: Optional[str] = None,
    file_format: Optional[str] = None,
    reporting_year: Optional[int] = None,
) -> dict:
    """
    Dashboard ETL pipeline.

    Steps:
    1. Load source tables
    2. Clean, validate and transform
    3. Write output
    """
    logger = get_run_logger()

    source_dir = source_dir or settings.data_lake.raw_path
    output_dir = output_dir or settings.data_lake.curated_path
    file_format = file_format or settings.data_lake.default_format
    reporting_year = reporting_year or settings.report.reporting_year

    run_id = bind_run_context(reporting_year)
    logger.info(f"Starting dashboard ETL run {run_id} for {reporting_year} from {source_dir}")

    try:
        sources = load_sources(source_dir, file_format, reporting_year)
        summary = build_dashboard(sources, output_dir, settings.data_quality.fail_on_error)
    finally:
        clear_run_context()

    return {
        "run_id": run_id,
        "reporting_year": reporting_year,
        "status": "success",
        **summary,
    }


if __name__ == "__main__":
    configure_logging()
    marketing_dashboard_etl()
