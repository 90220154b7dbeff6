"""
Cleaning stages, applied in order: validation, deduplication, status
imputation, life expectancy interpolation.
"""

from .deduplicator import Deduplicator
from .interpolator import LifeExpectancyInterpolator
from .status_imputer import StatusImputer
from .validation import RecordValidator, apply_validation, create_validation_udf

__all__ = [
    "Deduplicator",
    "LifeExpectancyInterpolator",
    "RecordValidator",
    "StatusImputer",
    "apply_validation",
    "create_validation_udf",
]
