"""
ValidationResult model: the rule engine's verdict on one record.
"""

from typing import List

from pydantic import BaseModel, Field, model_validator


class ValidationResult(BaseModel):
    """
    Rules a record passed, failed (severity "error") and warned on.

    The record passes when no error rule failed; warnings never fail it.
    """

    row_id: int | None = None
    passed: bool
    passed_rules: List[str] = Field(default_factory=list)
    failed_rules: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_verdict(self):
        if self.passed and self.failed_rules:
            raise ValueError("passed=True but failed_rules is not empty")
        if not self.passed and not self.failed_rules:
            raise ValueError("passed=False needs at least one failed rule")
        return self

    def as_row(self) -> dict[str, List[str]]:
        """Fields carried back to Spark by the validation UDF."""
        return {"failed_rules": self.failed_rules, "warnings": self.warnings}

    class Config:
        json_schema_extra = {
            "example": {
                "row_id": 17,
                "passed": True,
                "passed_rules": ["country_required", "year_required"],
                "failed_rules": [],
                "warnings": ["gdp_non_negative"],
            }
        }
