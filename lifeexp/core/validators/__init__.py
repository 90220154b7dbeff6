"""
Validation rule implementations.

Provides validators for required fields, numeric ranges and regex patterns.
"""

from .base_validator import BaseValidator, ValidationError
from .range_validator import RangeValidator
from .regex_validator import RegexValidator
from .required_field_validator import RequiredFieldValidator

__all__ = [
    "BaseValidator",
    "ValidationError",
    "RequiredFieldValidator",
    "RangeValidator",
    "RegexValidator",
]
