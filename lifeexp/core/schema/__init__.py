"""
Dataset schema definition and header normalisation.
"""

from .dataset_schema import (
    ADULT_MORTALITY,
    BMI,
    COUNTRY,
    DATASET_COLUMNS,
    DATASET_SCHEMA,
    GDP,
    LIFE_EXPECTANCY,
    MUTABLE_COLUMNS,
    REQUIRED_COLUMNS,
    ROW_ID,
    STATUS,
    YEAR,
    assign_row_ids,
    conform_dataframe,
    normalize_column_name,
    require_unique_row_ids,
)

__all__ = [
    "ADULT_MORTALITY",
    "BMI",
    "COUNTRY",
    "DATASET_COLUMNS",
    "DATASET_SCHEMA",
    "GDP",
    "LIFE_EXPECTANCY",
    "MUTABLE_COLUMNS",
    "REQUIRED_COLUMNS",
    "ROW_ID",
    "STATUS",
    "YEAR",
    "assign_row_ids",
    "conform_dataframe",
    "normalize_column_name",
    "require_unique_row_ids",
]
