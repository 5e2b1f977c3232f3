"""
Cohort Aggregation Module

Rolls monthly activity and signups up to (signup_date, signup_campaign).
"""

from typing import Optional

import polars as pl
import structlog

from marketing_mrr.config import get_settings

logger = structlog.get_logger(__name__)

COHORT_KEYS = ["signup_date", "signup_campaign"]


def aggregate_cohorts(
    activity: pl.DataFrame,
    monthly_type: Optional[str] = None,
    yearly_type: Optional[str] = None,
) -> pl.DataFrame:
    """
    Summarize MRR per acquisition cohort.

    Only records with a monthly price contribute, so ``total_subscriptions``
    counts exactly the subscriptions summed into ``total_mrr``. Cohorts with
    no priced record produce no row.

    Args:
        activity: Monthly activity records
        monthly_type: subscription_type of monthly plans
        yearly_type: subscription_type of yearly plans

    Returns:
        DataFrame with total_mrr, yearly_subscriptions_mrr,
        monthly_subscriptions_mrr and total_subscriptions per cohort
    """
    report = get_settings().report
    monthly_type = monthly_type or report.monthly_type
    yearly_type = yearly_type or report.yearly_type

    priced = activity.filter(pl.col("monthly_plan_price").is_not_null())
    unpriced = len(activity) - len(priced)
    if unpriced:
        logger.warning("Active records with unknown plan type", records=unpriced)

    price = pl.col("monthly_plan_price")
    cohorts = priced.group_by(COHORT_KEYS).agg([
        price.sum().alias("total_mrr"),
        pl.when(pl.col("subscription_type") == yearly_type)
        .then(price)
        .otherwise(0.0)
        .sum()
        .alias("yearly_subscriptions_mrr"),
        pl.when(pl.col("subscription_type") == monthly_type)
        .then(price)
        .otherwise(0.0)
        .sum()
        .alias("monthly_subscriptions_mrr"),
        pl.col("subscription_id").drop_nulls().n_unique().cast(pl.Int64).alias("total_subscriptions"),
    ])

    logger.debug("Aggregated cohorts", cohorts=len(cohorts))
    return cohorts


def aggregate_signups(signups: pl.DataFrame) -> pl.DataFrame:
    """Signup count per (signup_date, signup_campaign)."""
    return signups.group_by(COHORT_KEYS).agg(
        pl.col("user_id").count().cast(pl.Int64).alias("signups")
    )
