"""
CleaningReport model summarising one run of the cleaning stages.
"""

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, Field


class CleaningReport(BaseModel):
    """
    Summary of what cleaning changed and what it could not resolve.

    Unresolved counts are data quality diagnostics, not failures: boundary
    years and countries without any status evidence are expected to stay
    missing.

    Attributes:
        dataset_id: Dataset identifier
        total_records: Records read before cleaning
        cleaned_records: Records left after cleaning
        validation_warnings: Rule name -> number of records that raised a warning
        duplicates_removed: Records deleted by deduplication
        duplicate_fields_merged: Survivor fields filled from removed duplicates
        statuses_imputed: Status values filled in
        life_expectancy_imputed: Life expectancy values interpolated
        interpolation_passes: Interpolation passes actually run
        ambiguous_status_countries: Countries with conflicting statuses
        unresolved_status: Records still missing status
        unresolved_life_expectancy: Records still missing life expectancy
        started_at: When the run started
        duration_seconds: Wall clock time of the cleaning stages
    """

    dataset_id: str
    total_records: int = Field(0, ge=0)
    cleaned_records: int = Field(0, ge=0)
    validation_warnings: dict[str, int] = Field(default_factory=dict)
    duplicates_removed: int = Field(0, ge=0)
    duplicate_fields_merged: int = Field(0, ge=0)
    statuses_imputed: int = Field(0, ge=0)
    life_expectancy_imputed: int = Field(0, ge=0)
    interpolation_passes: int = Field(0, ge=0)
    ambiguous_status_countries: List[str] = Field(default_factory=list)
    unresolved_status: int = Field(0, ge=0)
    unresolved_life_expectancy: int = Field(0, ge=0)
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    duration_seconds: float = Field(0.0, ge=0.0)

    @property
    def has_unresolved_values(self) -> bool:
        return self.unresolved_status > 0 or self.unresolved_life_expectancy > 0

    class Config:
        json_schema_extra = {
            "example": {
                "dataset_id": "world_life_expectancy",
                "total_records": 2941,
                "cleaned_records": 2938,
                "validation_warnings": {},
                "duplicates_removed": 3,
                "duplicate_fields_merged": 0,
                "statuses_imputed": 8,
                "life_expectancy_imputed": 2,
                "interpolation_passes": 1,
                "ambiguous_status_countries": [],
                "unresolved_status": 0,
                "unresolved_life_expectancy": 0,
                "duration_seconds": 4.2,
            }
        }
