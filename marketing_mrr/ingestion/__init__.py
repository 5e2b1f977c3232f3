"""
Data Ingestion Module
"""
from .batch_loader import (
    SourceLoader,
    SourceFileConfig,
    SourceLoadError,
    SourceTable,
    SourceTables,
    generate_calendar_months,
)

__all__ = [
    "SourceLoader",
    "SourceFileConfig",
    "SourceLoadError",
    "SourceTable",
    "SourceTables",
    "generate_calendar_months",
]
