"""
Source Extractors

Column projections over the campaign-metrics and user tables.
"""

import polars as pl

COST_COLUMNS = ["date", "campaign", "cost", "clicks", "impressions"]
SIGNUP_COLUMNS = ["signup_date", "user_id", "signup_campaign"]


def extract_cost_data(campaigns: pl.DataFrame) -> pl.DataFrame:
    """Daily spend and engagement per campaign, passed through unchanged."""
    return campaigns.select(COST_COLUMNS)


def extract_signups(users: pl.DataFrame) -> pl.DataFrame:
    """Signup date and acquisition campaign per user."""
    return users.select(SIGNUP_COLUMNS)
