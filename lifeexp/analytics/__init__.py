"""
Read-only analytics over the cleaned dataset.
"""

from .engine import DEFAULT_GDP_THRESHOLD, AnalyticsEngine
from .result_tables import (
    BMI_CORRELATION,
    GDP_BUCKET,
    GDP_CORRELATION,
    MORTALITY_ROLLING_TOTAL,
    RESULT_SCHEMAS,
    RESULT_TABLES,
    STATUS_COMPARISON,
    TREND,
    YEARLY_AVERAGE,
    result_columns,
)

__all__ = [
    "AnalyticsEngine",
    "DEFAULT_GDP_THRESHOLD",
    "BMI_CORRELATION",
    "GDP_BUCKET",
    "GDP_CORRELATION",
    "MORTALITY_ROLLING_TOTAL",
    "RESULT_SCHEMAS",
    "RESULT_TABLES",
    "STATUS_COMPARISON",
    "TREND",
    "YEARLY_AVERAGE",
    "result_columns",
]
