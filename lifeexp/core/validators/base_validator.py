"""
Base class for the per-field rules the rule engine applies to each record.
"""

import math
from abc import ABC, abstractmethod
from typing import Any, NoReturn


class ValidationError(Exception):
    """A record value broke a rule."""

    def __init__(self, rule_name: str, field_name: str, message: str, value: Any = None):
        self.rule_name = rule_name
        self.field_name = field_name
        self.message = message
        self.value = value
        super().__init__(f"[{rule_name}] {field_name}: {message}")


class BaseValidator(ABC):
    """
    One rule type checked against one field of a record dict.

    Subclasses set rule_type and implement validate(); they call fail()
    to reject a value.
    """

    rule_type: str = ""

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        self.field_name = field_name
        self.parameters = dict(parameters or {})

    @abstractmethod
    def validate(self, value: Any, record: dict[str, Any]) -> None:
        """
        Check value, the content of field_name in record.

        Raises:
            ValidationError: If the value breaks the rule
        """

    def fail(self, message: str, value: Any = None) -> NoReturn:
        raise ValidationError(self.rule_type, self.field_name, message, value)

    @staticmethod
    def is_null(value: Any) -> bool:
        """None and NaN both mean the value is absent."""
        return value is None or (isinstance(value, float) and math.isnan(value))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.field_name!r}, {self.parameters!r})"
