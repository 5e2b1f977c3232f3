"""
Subscription Enrichment Module

Attaches acquisition cohorts to subscriptions and expands them into
monthly activity records.
Includes:
- Cohort attribution (signup date and campaign) by user
- Month-end activity test for each (subscription, month) pair
- Normalization of plan prices to a monthly amount
"""

import calendar
from datetime import date
from typing import Optional

import polars as pl
import structlog

from marketing_mrr.config import get_settings

logger = structlog.get_logger(__name__)

ENRICHED_COLUMNS = [
    "user_id",
    "signup_campaign",
    "signup_date",
    "subscription_id",
    "subscription_type",
    "subscription_start_date",
    "subscription_end_date",
    "plan_price",
]


def last_day_of_month(d: date) -> date:
    """Last calendar day of the month containing ``d``."""
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


def is_active(start_date: date, end_date: Optional[date], month_start: date) -> bool:
    """
    Whether a subscription counts as active in a month.

    A subscription is active when it started on or before the month's last
    day and either has no end date or ends on or after that day.
    """
    month_end = last_day_of_month(month_start)
    return start_date <= month_end and (end_date is None or end_date >= month_end)


def is_active_expr(
    start_col: str = "subscription_start_date",
    end_col: str = "subscription_end_date",
    month_end_col: str = "month_end",
) -> pl.Expr:
    """Frame-level form of :func:`is_active` over a precomputed month end."""
    return (pl.col(start_col) <= pl.col(month_end_col)) & (
        pl.col(end_col).is_null() | (pl.col(end_col) >= pl.col(month_end_col))
    )


def monthly_plan_price(
    subscription_type: str,
    plan_price: float,
    months_per_year: int = 12,
    monthly_type: str = "Monthly",
    yearly_type: str = "Yearly",
) -> Optional[float]:
    """Monthly amount billed by an active plan; None for unknown plan types."""
    if subscription_type == monthly_type:
        return float(plan_price)
    if subscription_type == yearly_type:
        return float(plan_price) / months_per_year
    return None


class DataEnricher:
    """
    Enricher for subscription data.

    Joins subscriptions to their owning users' cohorts and expands each
    subscription over the month dimension.
    """

    def __init__(
        self,
        months_per_year: Optional[int] = None,
        monthly_type: Optional[str] = None,
        yearly_type: Optional[str] = None,
    ):
        report = get_settings().report
        self.months_per_year = months_per_year or report.months_per_year
        self.monthly_type = monthly_type or report.monthly_type
        self.yearly_type = yearly_type or report.yearly_type
        self.orphaned_subscriptions = 0

    def enrich_subscriptions(
        self,
        subscriptions: pl.DataFrame,
        signups: pl.DataFrame,
    ) -> pl.DataFrame:
        """
        Attach each subscription's signup date and campaign.

        Inner join semantics on user_id: subscriptions without a matching user
        are dropped from the result. Their count is kept on
        ``orphaned_subscriptions`` for the run summary.

        Args:
            subscriptions: Subscriptions table
            signups: Extracted signups (signup_date, user_id, signup_campaign)

        Returns:
            Enriched subscriptions
        """
        joined = subscriptions.join(
            signups.with_columns(pl.lit(True).alias("_matched")),
            on="user_id",
            how="left",
        )
        matched = pl.col("_matched").is_not_null()

        self.orphaned_subscriptions = joined.filter(~matched).height
        if self.orphaned_subscriptions:
            logger.warning(
                "Dropping subscriptions without a matching user",
                orphaned_subscriptions=self.orphaned_subscriptions,
            )

        enriched = joined.filter(matched).select(ENRICHED_COLUMNS)
        logger.debug("Enriched subscriptions", rows=len(enriched))
        return enriched

    def monthly_price_expr(self) -> pl.Expr:
        """Expression form of :func:`monthly_plan_price`"""
        price = pl.col("plan_price").cast(pl.Float64)
        return (
            pl.when(pl.col("subscription_type") == self.monthly_type)
            .then(price)
            .when(pl.col("subscription_type") == self.yearly_type)
            .then(price / self.months_per_year)
            .otherwise(None)
        )

    def expand_monthly_activity(
        self,
        enriched: pl.DataFrame,
        months: pl.DataFrame,
    ) -> pl.DataFrame:
        """
        Expand subscriptions into one record per active month.

        Every subscription is paired with every calendar month; only pairs
        passing the month-end activity test are kept, so an inactive month
        has no record at all.

        Args:
            enriched: Output of :meth:`enrich_subscriptions`
            months: Month dimension with a ``date_month`` column

        Returns:
            Activity records with ``date_month``, ``month_end`` and
            ``monthly_plan_price``
        """
        calendar_months = months.select(pl.col("date_month").cast(pl.Date)).with_columns(
            pl.col("date_month").dt.month_end().alias("month_end")
        )

        activity = (
            enriched.lazy()
            .join(calendar_months.lazy(), how="cross")
            .filter(is_active_expr())
            .with_columns(self.monthly_price_expr().alias("monthly_plan_price"))
            .collect()
        )

        logger.debug(
            "Expanded monthly activity",
            subscriptions=len(enriched),
            months=len(calendar_months),
            active_records=len(activity),
        )
        return activity


def enrich_subscriptions(subscriptions: pl.DataFrame, signups: pl.DataFrame) -> pl.DataFrame:
    """Convenience wrapper around :meth:`DataEnricher.enrich_subscriptions`"""
    return DataEnricher().enrich_subscriptions(subscriptions, signups)


def expand_monthly_activity(enriched: pl.DataFrame, months: pl.DataFrame) -> pl.DataFrame:
    """Convenience wrapper around :meth:`DataEnricher.expand_monthly_activity`"""
    return DataEnricher().expand_monthly_activity(enriched, months)
