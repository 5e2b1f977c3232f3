"""
Marketing Performance & MRR Dashboard
Configuration Module
"""
from .settings import Settings, get_settings
from .logging import bind_run_context, clear_run_context, configure_logging

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "bind_run_context",
    "clear_run_context",
]
