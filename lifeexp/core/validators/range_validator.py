"""
Numeric bounds on the indicator columns.
"""

from typing import Any

from .base_validator import BaseValidator


class RangeValidator(BaseValidator):
    """
    Checks that a numeric field lies in [min, max].

    Absent values pass, and so does the field's missing sentinel when one
    is configured (life expectancy uses 0): filling those is the
    imputation stages' job, not validation's.

    Parameters:
    - min / max: inclusive bounds, at least one is required
    - missing_sentinel: value that stands for "missing" in this field
    """

    rule_type = "range"

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.min_value = self.parameters.get("min")
        self.max_value = self.parameters.get("max")
        self.missing_sentinel = self.parameters.get("missing_sentinel")

        if self.min_value is None and self.max_value is None:
            raise ValueError(f"Range rule on '{field_name}' needs min, max or both")
        if (
            self.min_value is not None
            and self.max_value is not None
            and self.min_value > self.max_value
        ):
            raise ValueError(f"Range rule on '{field_name}' has min {self.min_value} > max {self.max_value}")

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if self.is_null(value):
            return
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            self.fail(f"expected a number, got {type(value).__name__}", value)
        if self.missing_sentinel is not None and value == self.missing_sentinel:
            return

        if self.min_value is not None and value < self.min_value:
            self.fail(f"{value} is less than minimum {self.min_value}", value)
        if self.max_value is not None and value > self.max_value:
            self.fail(f"{value} exceeds maximum {self.max_value}", value)
