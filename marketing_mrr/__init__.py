"""
Marketing Performance & MRR Dashboard

Joins daily campaign spend with user signups and subscription MRR.
"""

__version__ = "1.0.0"
