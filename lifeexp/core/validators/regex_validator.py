"""
Pattern rules for text fields such as status.
"""

import re
from typing import Any

from .base_validator import BaseValidator


class RegexValidator(BaseValidator):
    """
    Checks that a text field fully matches a pattern.

    Parameters:
    - pattern: regular expression, anchored implicitly (full match)
    - case_sensitive: default True
    - strip: trim surrounding whitespace before matching, default True
    """

    rule_type = "regex"

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        pattern = self.parameters.get("pattern")
        if not isinstance(pattern, str):
            raise ValueError(f"Regex rule on '{field_name}' needs a string 'pattern'")

        self.strip = self.parameters.get("strip", True)
        flags = 0 if self.parameters.get("case_sensitive", True) else re.IGNORECASE
        try:
            self.pattern = re.compile(pattern, flags)
        except re.error as e:
            raise ValueError(f"Regex rule on '{field_name}' has an invalid pattern: {e}") from e

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if self.is_null(value):
            return

        text = str(value)
        if self.strip:
            text = text.strip()
        if self.pattern.fullmatch(text) is None:
            self.fail(f"'{text}' does not match '{self.pattern.pattern}'", value)
