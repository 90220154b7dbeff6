"""
Rule engine applying the configured validators to dataset records.
"""

from collections import Counter
from typing import Any, NamedTuple

from lifeexp.core.models import ValidationResult
from lifeexp.core.validators import (
    BaseValidator,
    RangeValidator,
    RegexValidator,
    RequiredFieldValidator,
    ValidationError,
)


class BoundRule(NamedTuple):
    name: str
    severity: str
    validator: BaseValidator


class RuleEngine:
    """
    Applies a rule list to record dicts.

    A failed "error" rule fails the record; a failed "warning" rule is
    only listed in the result's warnings.
    """

    VALIDATOR_REGISTRY: dict[str, type[BaseValidator]] = {
        RequiredFieldValidator.rule_type: RequiredFieldValidator,
        RangeValidator.rule_type: RangeValidator,
        RegexValidator.rule_type: RegexValidator,
    }

    def __init__(self, rules: list[dict[str, Any]]):
        """
        Args:
            rules: Rule dicts as produced by RuleConfigLoader or
                RuleConfigBuilder (rule_name, rule_type, field_name,
                parameters, severity, enabled)

        Raises:
            ValueError: For an unknown rule type or invalid rule parameters
        """
        self.rules = rules
        self.validators: list[BoundRule] = [
            self._bind(rule) for rule in rules if rule.get("enabled", True)
        ]

    def _bind(self, rule: dict[str, Any]) -> BoundRule:
        name = rule["rule_name"]
        validator_class = self.VALIDATOR_REGISTRY.get(rule["rule_type"])
        if validator_class is None:
            raise ValueError(f"Unknown rule type: {rule['rule_type']} (rule '{name}')")

        try:
            validator = validator_class(rule["field_name"], rule.get("parameters"))
        except ValueError as e:
            raise ValueError(f"Rule '{name}' is misconfigured: {e}") from e
        return BoundRule(name, rule.get("severity", "error"), validator)

    @property
    def fields(self) -> list[str]:
        """Fields referenced by enabled rules."""
        return sorted({rule.validator.field_name for rule in self.validators})

    def validate_record(self, payload: dict[str, Any], row_id: int | None = None) -> ValidationResult:
        """
        Run every enabled rule against one record.

        Args:
            payload: Record as a field -> value dict
            row_id: Surrogate id of the record, carried into the result
        """
        passed, failed, warnings = [], [], []
        for rule in self.validators:
            try:
                rule.validator.validate(payload.get(rule.validator.field_name), payload)
            except ValidationError:
                (failed if rule.severity == "error" else warnings).append(rule.name)
            else:
                passed.append(rule.name)

        return ValidationResult(
            row_id=row_id,
            passed=not failed,
            passed_rules=passed,
            failed_rules=failed,
            warnings=warnings,
        )

    def get_rule_summary(self) -> dict[str, Any]:
        """Rule counts by type and by severity, for logging at startup."""
        return {
            "total_rules": len(self.validators),
            "rules_by_type": dict(Counter(rule.validator.rule_type for rule in self.validators)),
            "rules_by_severity": dict(Counter(rule.severity for rule in self.validators)),
        }
