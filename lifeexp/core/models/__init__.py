"""
Core data models for the life expectancy pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .audit_log import AuditLog
from .cleaning_report import CleaningReport
from .life_expectancy_record import (
    KNOWN_STATUSES,
    STATUS_DEVELOPED,
    STATUS_DEVELOPING,
    STATUS_UNKNOWN,
    LifeExpectancyRecord,
)
from .validation_result import ValidationResult

__all__ = [
    "AuditLog",
    "CleaningReport",
    "LifeExpectancyRecord",
    "ValidationResult",
    "KNOWN_STATUSES",
    "STATUS_DEVELOPED",
    "STATUS_DEVELOPING",
    "STATUS_UNKNOWN",
]
