"""
Validation rule definitions.

Rules come from a YAML file (config/validation_rules.yaml) or are assembled
in code with RuleConfigBuilder. Either way each rule is checked against
RuleDefinition and handed to the RuleEngine as a plain dict.
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from lifeexp.core.models import KNOWN_STATUSES
from lifeexp.core.schema import DATASET_COLUMNS

Severity = Literal["error", "warning"]


class RuleDefinition(BaseModel):
    """One configured rule: which check runs on which field, and how hard it fails."""

    rule_name: str = Field(..., min_length=1)
    rule_type: str = Field(..., min_length=1)
    field_name: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    severity: str = "error"
    enabled: bool = True

    @field_validator("severity")
    @classmethod
    def severity_known(cls, v: str) -> str:
        if v not in ("error", "warning"):
            raise ValueError(f"Invalid severity '{v}', expected 'error' or 'warning'")
        return v

    @field_validator("field_name")
    @classmethod
    def field_in_dataset(cls, v: str) -> str:
        if v not in DATASET_COLUMNS:
            raise ValueError(f"Unknown field '{v}', expected one of {list(DATASET_COLUMNS)}")
        return v


class RuleConfigLoader:
    """
    Reads rules from YAML, grouped by field:

    ```yaml
    rules:
      life_expectancy:
        - type: range
          name: life_expectancy_range
          severity: warning
          params: {min: 20, max: 120, missing_sentinel: 0}
    ```

    Unnamed rules are called <field>_<type>_<position>. Severity defaults
    to "error".
    """

    def __init__(self, config_path: str | Path):
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Rule file not found: {config_path}")

    def load_rules(self) -> list[dict[str, Any]]:
        """
        Parse the file into rule dicts for RuleEngine.

        Raises:
            ValueError: If the YAML has no rules section or a rule is invalid
        """
        with self.config_path.open() as f:
            document = yaml.safe_load(f) or {}

        by_field = document.get("rules") if isinstance(document, dict) else None
        if not isinstance(by_field, dict):
            raise ValueError(f"{self.config_path} has no 'rules' mapping")

        rules = []
        for field_name, entries in by_field.items():
            if not isinstance(entries, list):
                raise ValueError(f"Rules for field '{field_name}' must be a list")
            rules.extend(
                self._to_rule(field_name, position, entry)
                for position, entry in enumerate(entries)
            )
        return rules

    def _to_rule(self, field_name: str, position: int, entry: Any) -> dict[str, Any]:
        if not isinstance(entry, dict) or "type" not in entry:
            raise ValueError(f"Rule {position} for field '{field_name}' has no 'type'")

        try:
            definition = RuleDefinition(
                rule_name=entry.get("name") or f"{field_name}_{entry['type']}_{position}",
                rule_type=entry["type"],
                field_name=field_name,
                parameters=entry.get("params") or {},
                severity=entry.get("severity", "error"),
                enabled=entry.get("enabled", True),
            )
        except ValidationError as e:
            raise ValueError(f"Invalid rule {position} for field '{field_name}': {e}") from e
        return definition.model_dump()


class RuleConfigBuilder:
    """Assembles a rule list in code; used for the built-in defaults and in tests."""

    def __init__(self):
        self._rules: list[RuleDefinition] = []

    def _add(self, field_name: str, rule_type: str, suffix: str, parameters: dict[str, Any],
             severity: Severity) -> "RuleConfigBuilder":
        self._rules.append(RuleDefinition(
            rule_name=f"{field_name}_{suffix}",
            rule_type=rule_type,
            field_name=field_name,
            parameters=parameters,
            severity=severity,
        ))
        return self

    def add_required_field(self, field_name: str, severity: Severity = "error") -> "RuleConfigBuilder":
        return self._add(field_name, "required_field", "required", {"allow_blank": False}, severity)

    def add_range(
        self,
        field_name: str,
        min_value: float | None = None,
        max_value: float | None = None,
        severity: Severity = "warning",
        missing_sentinel: float | None = None,
    ) -> "RuleConfigBuilder":
        bounds = {"min": min_value, "max": max_value, "missing_sentinel": missing_sentinel}
        parameters = {key: value for key, value in bounds.items() if value is not None}
        return self._add(field_name, "range", "range", parameters, severity)

    def add_regex(self, field_name: str, pattern: str, severity: Severity = "warning") -> "RuleConfigBuilder":
        return self._add(field_name, "regex", "regex", {"pattern": pattern}, severity)

    def build(self) -> list[dict[str, Any]]:
        return [rule.model_dump() for rule in self._rules]


def default_rules() -> list[dict[str, Any]]:
    """
    Rules applied when no rule file is configured.

    The key fields are errors; everything else only warns.
    """
    builder = RuleConfigBuilder() \
        .add_required_field("country") \
        .add_required_field("year") \
        .add_regex("status", "(" + "|".join(KNOWN_STATUSES) + ")?")
    for field_name in ("life_expectancy", "adult_mortality", "gdp", "bmi"):
        builder.add_range(field_name, min_value=0)
    return builder.build()
