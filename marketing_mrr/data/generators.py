"""
Synthetic Data Generator

Generates realistic marketing and subscription data for testing and development.
Includes:
- Daily campaign spend with clicks and impressions
- Users attributed to campaigns on their signup day
- Monthly and yearly subscriptions, some cancelled, some orphaned
"""

import random
import uuid
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import polars as pl
from faker import Faker

from marketing_mrr.config import get_settings


# =============================================================================
# CONFIGURATION
# =============================================================================

CAMPAIGN_THEMES = ["Spring_Promo", "Summer_Sale", "Back_To_School", "Black_Friday", "Holiday_Push"]
CHANNELS = ["Google", "Facebook", "LinkedIn", "TikTok"]

PLAN_PRICES = {
    "Monthly": [9.99, 19.99, 49.0],
    "Yearly": [99.0, 199.0, 480.0],
}


# =============================================================================
# GENERATORS
# =============================================================================

class CampaignGenerator:
    """Generate daily campaign metrics"""

    def __init__(self, seed: int = 42):
        self.rng = np.random.default_rng(seed)
        self.fake = Faker()
        self.fake.seed_instance(seed)

    def campaign_names(self, n: int) -> List[str]:
        """Distinct campaign names such as ``Google_Spring_Promo``"""
        names = [f"{c}_{t}" for t in CAMPAIGN_THEMES for c in CHANNELS]
        while len(names) < n:
            names.append(f"{self.fake.word().title()}_Campaign")
        return sorted(set(names))[:n]

    def generate(self, year: int, n_campaigns: int = 6) -> pl.DataFrame:
        """One row per (day of ``year``, campaign)"""
        days = pl.date_range(date(year, 1, 1), date(year, 12, 31), interval="1d", eager=True)
        names = self.campaign_names(n_campaigns)
        n = len(days) * len(names)

        impressions = self.rng.integers(1_000, 50_000, n)
        clicks = (impressions * self.rng.uniform(0.005, 0.05, n)).astype(np.int64)

        return pl.DataFrame({
            "date": [d for d in days.to_list() for _ in names],
            "campaign": names * len(days),
            "cost": np.round(clicks * self.rng.uniform(0.5, 3.0, n), 2),
            "clicks": clicks,
            "impressions": impressions,
        }, schema_overrides={"date": pl.Date})


class UserGenerator:
    """Generate users attributed to campaign-days"""

    def __init__(self, seed: int = 42):
        self.random = random.Random(seed)

    def generate(self, campaigns_df: pl.DataFrame, n: int = 1000) -> pl.DataFrame:
        """Sample signups from existing campaign-days"""
        campaign_days = campaigns_df.select(["date", "campaign"]).rows()
        users = []

        for _ in range(n):
            signup_date, campaign = self.random.choice(campaign_days)
            users.append({
                "user_id": str(uuid.UUID(int=self.random.getrandbits(128))),
                "signup_date": signup_date,
                "signup_campaign": campaign,
            })

        return pl.DataFrame(users, schema={
            "user_id": pl.Utf8,
            "signup_date": pl.Date,
            "signup_campaign": pl.Utf8,
        })


class SubscriptionGenerator:
    """Generate subscriptions for a share of users"""

    def __init__(
        self,
        seed: int = 42,
        conversion_rate: float = 0.4,
        churn_rate: float = 0.3,
        orphan_rate: float = 0.01,
    ):
        self.random = random.Random(seed)
        self.conversion_rate = conversion_rate
        self.churn_rate = churn_rate
        self.orphan_rate = orphan_rate

    def _end_date(self, start: date, subscription_type: str) -> Optional[date]:
        if self.random.random() >= self.churn_rate:
            return None
        if subscription_type == "Yearly":
            return start + timedelta(days=365)
        return start + timedelta(days=30 * self.random.randint(1, 6))

    def generate(self, users_df: pl.DataFrame) -> pl.DataFrame:
        """Subscriptions starting on or after each converting user's signup"""
        subscriptions = []

        for user_id, signup_date in users_df.select(["user_id", "signup_date"]).rows():
            if self.random.random() >= self.conversion_rate:
                continue

            subscription_type = self.random.choices(["Monthly", "Yearly"], weights=[0.7, 0.3])[0]
            start = signup_date + timedelta(days=self.random.randint(0, 14))

            subscriptions.append({
                "user_id": user_id,
                "subscription_id": str(uuid.UUID(int=self.random.getrandbits(128))),
                "subscription_type": subscription_type,
                "subscription_start_date": start,
                "subscription_end_date": self._end_date(start, subscription_type),
                "plan_price": self.random.choice(PLAN_PRICES[subscription_type]),
            })

        # A few subscriptions whose user is missing from the users table
        n_orphans = int(len(subscriptions) * self.orphan_rate)
        for sub in self.random.sample(subscriptions, n_orphans):
            sub["user_id"] = str(uuid.UUID(int=self.random.getrandbits(128)))

        return pl.DataFrame(subscriptions, schema={
            "user_id": pl.Utf8,
            "subscription_id": pl.Utf8,
            "subscription_type": pl.Utf8,
            "subscription_start_date": pl.Date,
            "subscription_end_date": pl.Date,
            "plan_price": pl.Float64,
        })


# =============================================================================
# MAIN GENERATOR
# =============================================================================

class DataGenerator:
    """Main data generator orchestrator"""

    def __init__(self, output_dir: Optional[str] = None, seed: int = 42):
        self.output_dir = Path(output_dir or get_settings().data_lake.raw_path)
        self.seed = seed

    def generate_all(
        self,
        year: Optional[int] = None,
        n_campaigns: int = 6,
        n_users: int = 1000,
        save: bool = True,
    ) -> Dict[str, pl.DataFrame]:
        """Generate campaigns, users and subscriptions for one year"""
        year = year or get_settings().report.reporting_year

        campaigns_df = CampaignGenerator(self.seed).generate(year, n_campaigns)
        users_df = UserGenerator(self.seed).generate(campaigns_df, n_users)
        subscriptions_df = SubscriptionGenerator(self.seed).generate(users_df)

        data = {
            "campaigns": campaigns_df,
            "users": users_df,
            "subscriptions": subscriptions_df,
        }

        if save:
            self._save_data(data)

        return data

    def _save_data(self, data: Dict[str, pl.DataFrame]) -> None:
        """Save generated data as Parquet and CSV"""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        for name, df in data.items():
            df.write_parquet(self.output_dir / f"{name}.parquet")
            df.write_csv(self.output_dir / f"{name}.csv")
