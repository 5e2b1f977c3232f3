"""
Data Transformation Module
"""
from .aggregators import aggregate_cohorts, aggregate_signups
from .cleaners import DataCleaner, clean_dataframe
from .enrichers import (
    DataEnricher,
    enrich_subscriptions,
    expand_monthly_activity,
    is_active,
    last_day_of_month,
    monthly_plan_price,
)
from .extractors import extract_cost_data, extract_signups
from .transformers import DashboardTransformer, assemble_report, build_dashboard

__all__ = [
    "aggregate_cohorts",
    "aggregate_signups",
    "DataCleaner",
    "clean_dataframe",
    "DataEnricher",
    "enrich_subscriptions",
    "expand_monthly_activity",
    "is_active",
    "last_day_of_month",
    "monthly_plan_price",
    "extract_cost_data",
    "extract_signups",
    "DashboardTransformer",
    "assemble_report",
    "build_dashboard",
]
