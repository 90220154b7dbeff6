"""
Presence rule for the business key columns.
"""

from typing import Any

from .base_validator import BaseValidator


class RequiredFieldValidator(BaseValidator):
    """
    Rejects a record whose field is absent, null or blank.

    Used for country and year: a record failing it cannot be matched to
    its duplicates or its neighbouring years.
    """

    rule_type = "required_field"

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.allow_blank = self.parameters.get("allow_blank", False)

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if self.field_name not in record:
            self.fail("field is missing from the record")
        if self.is_null(value):
            self.fail("value is null")
        if not self.allow_blank and isinstance(value, str) and not value.strip():
            self.fail("value is an empty string", value)
