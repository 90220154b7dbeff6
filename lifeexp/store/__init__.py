"""
Spark-backed dataset store and missing-value predicates.
"""

from .dataset_store import (
    DatasetStore,
    malformed_key,
    missing_life_expectancy,
    missing_status,
    missing_value,
)

__all__ = [
    "DatasetStore",
    "malformed_key",
    "missing_life_expectancy",
    "missing_status",
    "missing_value",
]
