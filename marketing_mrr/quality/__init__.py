"""
Data Quality Module
"""
from .validators import DataQualityError, DataValidator, ValidationResult

__all__ = [
    "DataQualityError",
    "DataValidator",
    "ValidationResult",
]
