"""
Pipeline configuration.

Settings are read from a YAML file shaped like:

```yaml
pipeline:
  dataset_id: world_life_expectancy
  gdp_threshold: 1500
  interpolation_max_passes: 1
  merge_duplicates: true
  ambiguous_status_policy: flag
  validation_rules_path: config/validation_rules.yaml
```

and may be overridden field by field (the CLI passes its flags through
PipelineConfig.with_overrides).
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError


class PipelineConfig(BaseModel):
    """
    Settings controlling the cleaning stages and analytics.

    Attributes:
        dataset_id: Name used in logs, metrics and lineage
        gdp_threshold: GDP value splitting the high and low buckets (inclusive on both sides)
        interpolation_max_passes: Interpolation passes to run; 1 is single-hop,
            more passes iterate until nothing changes
        merge_duplicates: Fill a surviving duplicate's missing fields from removed duplicates
        ambiguous_status_policy: "flag" leaves conflicting countries untouched, "raise" aborts
        validation_rules_path: YAML rule file; None uses the built-in rules
    """

    dataset_id: str = Field("world_life_expectancy", min_length=1)
    gdp_threshold: float = Field(1500.0, ge=0.0)
    interpolation_max_passes: int = Field(1, ge=1, le=100)
    merge_duplicates: bool = True
    ambiguous_status_policy: Literal["flag", "raise"] = "flag"
    validation_rules_path: str | None = None

    def with_overrides(self, **overrides: Any) -> "PipelineConfig":
        """
        Return a copy with the non-None overrides applied and re-validated.
        """
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return PipelineConfig(**values)


class PipelineConfigLoader:
    """
    Loads PipelineConfig from a YAML file.
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the config loader.

        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Pipeline configuration file not found: {config_path}")

    def load(self) -> PipelineConfig:
        """
        Load and validate the configuration.

        Returns:
            PipelineConfig instance

        Raises:
            ValueError: If the YAML is malformed or a setting is invalid
        """
        with open(self.config_path) as f:
            try:
                config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not config or "pipeline" not in config:
            raise ValueError("Configuration file must contain 'pipeline' section")

        settings = config["pipeline"] or {}
        if not isinstance(settings, dict):
            raise ValueError("'pipeline' section must be a mapping")

        try:
            return PipelineConfig(**settings)
        except ValidationError as e:
            raise ValueError(f"Invalid pipeline configuration in {self.config_path}: {e}") from e


def load_pipeline_config(config_path: str | Path | None = None) -> PipelineConfig:
    """
    Load configuration from a file, or return defaults when no path is given.
    """
    if config_path is None:
        return PipelineConfig()
    return PipelineConfigLoader(config_path).load()
