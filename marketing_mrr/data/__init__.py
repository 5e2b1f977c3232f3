"""
Data Generation Module
"""
from .generators import DataGenerator, CampaignGenerator, UserGenerator, SubscriptionGenerator

__all__ = [
    "DataGenerator",
    "CampaignGenerator",
    "UserGenerator",
    "SubscriptionGenerator",
]
