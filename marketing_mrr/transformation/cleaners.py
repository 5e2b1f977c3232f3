"""
Data Cleaning Module

Type normalization for the dashboard source tables.
Handles:
- Whitespace trimming
- Date standardization to calendar dates
- Currency normalization for cost and plan price

Rows are never dropped or de-duplicated here; key uniqueness is assumed
upstream.
"""

from typing import List, Optional

import polars as pl
import structlog

logger = structlog.get_logger(__name__)

DATE_FORMATS = [
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d-%m-%Y",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
]


class DataCleaner:
    """
    Cleaner for campaign, user, subscription and month tables.

    Example:
        cleaner = DataCleaner()
        campaigns = cleaner.clean_campaigns(raw_campaigns)
    """

    def _trim_strings(self, df: pl.DataFrame, columns: Optional[List[str]] = None) -> pl.DataFrame:
        """Trim whitespace from string columns"""
        string_cols = columns or [
            col for col, dtype in zip(df.columns, df.dtypes)
            if dtype == pl.Utf8
        ]

        for col in string_cols:
            if col in df.columns:
                df = df.with_columns(
                    pl.col(col).str.strip_chars().alias(col)
                )

        return df

    def _to_date(self, series: pl.Series) -> pl.Series:
        """Convert a series of any supported type to pl.Date"""
        dtype = series.dtype
        if dtype == pl.Date:
            return series
        if dtype == pl.Datetime or dtype == pl.Null:
            return series.cast(pl.Date)
        if dtype == pl.Utf8:
            for fmt in DATE_FORMATS:
                target = pl.Datetime if "%H" in fmt else pl.Date
                parsed = series.str.strptime(target, fmt, strict=False)
                # Accept a format only if it parses every non-null value
                if parsed.null_count() == series.null_count():
                    return parsed.cast(pl.Date)
            raise ValueError(f"Column '{series.name}' has unparseable dates")
        return series.cast(pl.Date)

    def _standardize_dates(self, df: pl.DataFrame, date_columns: List[str]) -> pl.DataFrame:
        """Standardize date columns to pl.Date"""
        for col in date_columns:
            if col in df.columns:
                df = df.with_columns(self._to_date(df[col]).alias(col))
        return df

    def _normalize_currency(self, df: pl.DataFrame, amount_columns: List[str]) -> pl.DataFrame:
        """Normalize currency values (remove symbols, convert to float)"""
        for col in amount_columns:
            if col in df.columns:
                df = df.with_columns(
                    pl.col(col)
                    .cast(pl.Utf8)
                    .str.replace_all(r"[$€£¥,]", "")
                    .str.strip_chars()
                    .cast(pl.Float64)
                    .alias(col)
                )

        return df

    def _cast_counts(self, df: pl.DataFrame, count_columns: List[str]) -> pl.DataFrame:
        """Cast count columns to Int64"""
        return df.with_columns([
            pl.col(c).cast(pl.Int64) for c in count_columns if c in df.columns
        ])

    def clean_campaigns(self, df: pl.DataFrame) -> pl.DataFrame:
        """Apply campaign-metrics cleaning"""
        df = self._trim_strings(df)
        df = self._standardize_dates(df, ["date"])
        df = self._normalize_currency(df, ["cost"])
        return self._cast_counts(df, ["clicks", "impressions"])

    def clean_users(self, df: pl.DataFrame) -> pl.DataFrame:
        """Apply user cleaning"""
        df = self._trim_strings(df)
        return self._standardize_dates(df, ["signup_date"])

    def clean_subscriptions(self, df: pl.DataFrame) -> pl.DataFrame:
        """Apply subscription cleaning"""
        df = self._trim_strings(df)
        df = self._standardize_dates(df, ["subscription_start_date", "subscription_end_date"])
        return self._normalize_currency(df, ["plan_price"])

    def clean_months(self, df: pl.DataFrame) -> pl.DataFrame:
        """Apply month-dimension cleaning"""
        return self._standardize_dates(df, ["date_month"])


def clean_dataframe(df: pl.DataFrame, data_type: str) -> pl.DataFrame:
    """
    Convenience function to clean a source table.

    Args:
        df: Input DataFrame
        data_type: "campaigns", "users", "subscriptions" or "months"

    Returns:
        Cleaned DataFrame
    """
    cleaner = DataCleaner()

    if data_type == "campaigns":
        return cleaner.clean_campaigns(df)
    elif data_type == "users":
        return cleaner.clean_users(df)
    elif data_type == "subscriptions":
        return cleaner.clean_subscriptions(df)
    elif data_type == "months":
        return cleaner.clean_months(df)
    raise ValueError(f"Unknown data type: {data_type}")
