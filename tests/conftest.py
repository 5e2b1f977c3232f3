"""
Test Suite Configuration
"""
from datetime import date

import pytest
import polars as pl

from marketing_mrr.config import Settings
from marketing_mrr.ingestion.batch_loader import SourceTables, generate_calendar_months


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
def campaigns_df() -> pl.DataFrame:
    """Daily campaign metrics, deliberately out of order"""
    return pl.DataFrame({
        "date": [
            date(2024, 3, 1),
            date(2024, 1, 15),
            date(2024, 2, 10),
            date(2024, 3, 1),
            date(2024, 1, 15),
        ],
        "campaign": ["Newsletter", "Google_Brand", "Spring_Promo", "Google_Brand", "Facebook_Ads"],
        "cost": [0.0, 100.0, 60.0, 120.0, 80.0],
        "clicks": [0, 50, 30, 55, 40],
        "impressions": [500, 1000, 900, 1100, 1200],
    }, schema_overrides={"clicks": pl.Int64, "impressions": pl.Int64})


@pytest.fixture
def users_df() -> pl.DataFrame:
    """Users with signup cohort"""
    return pl.DataFrame({
        "signup_date": [
            date(2024, 1, 15),
            date(2024, 1, 15),
            date(2024, 1, 15),
            date(2024, 2, 10),
            date(2024, 3, 1),
        ],
        "user_id": ["u1", "u2", "u3", "u4", "u5"],
        "signup_campaign": ["Google_Brand", "Google_Brand", "Facebook_Ads", "Spring_Promo", "Google_Brand"],
    })


@pytest.fixture
def subscriptions_df() -> pl.DataFrame:
    """
    Subscriptions covering the main cases:

    s1 yearly, open-ended from 2024-01-15        -> 12 x 100
    s2 monthly, March only                       -> 1 x 50
    s3 monthly, 2024-01-20 to 2024-04-30         -> 4 x 30
    s4 yearly, cancelled 2024-06-15              -> 3 x 20 (Mar-May)
    s5 monthly, user u99 does not exist          -> dropped
    """
    return pl.DataFrame({
        "user_id": ["u1", "u2", "u3", "u5", "u99"],
        "subscription_id": ["s1", "s2", "s3", "s4", "s5"],
        "subscription_type": ["Yearly", "Monthly", "Monthly", "Yearly", "Monthly"],
        "subscription_start_date": [
            date(2024, 1, 15),
            date(2024, 3, 1),
            date(2024, 1, 20),
            date(2024, 3, 1),
            date(2024, 1, 1),
        ],
        "subscription_end_date": [
            None,
            date(2024, 3, 31),
            date(2024, 4, 30),
            date(2024, 6, 15),
            None,
        ],
        "plan_price": [1200.0, 50.0, 30.0, 240.0, 10.0],
    }, schema_overrides={"subscription_end_date": pl.Date})


@pytest.fixture
def months_df() -> pl.DataFrame:
    """Calendar months of 2024"""
    return generate_calendar_months(2024)


@pytest.fixture
def sources(campaigns_df, users_df, subscriptions_df, months_df) -> SourceTables:
    """All four inputs of a dashboard run"""
    return SourceTables(
        campaigns=campaigns_df,
        users=users_df,
        subscriptions=subscriptions_df,
        months=months_df,
    )
