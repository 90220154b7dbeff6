"""
AuditLog model representing one lineage entry for a cleaning change.
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field


TransformationType = Literal[
    "deduplication",
    "duplicate_merge",
    "status_imputation",
    "life_expectancy_interpolation",
]


class AuditLog(BaseModel):
    """
    Lineage entry tracking a single change made by a cleaning stage.

    Attributes:
        row_id: Which record was changed or removed
        country: Country of the record
        year: Year of the record
        dataset_id: Dataset the record belongs to
        transformation_type: Which cleaning stage made the change
        field_name: Which field was affected (None for removals)
        old_value: Value before the change (as string)
        new_value: Value after the change (as string)
        rule_applied: Which rule produced the new value
        created_at: When the change was recorded
    """

    row_id: int
    country: str
    year: int
    dataset_id: str
    transformation_type: TransformationType
    field_name: str | None = None
    old_value: str | None = None
    new_value: str | None = None
    rule_applied: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        json_schema_extra = {
            "example": {
                "row_id": 1462,
                "country": "Ireland",
                "year": 2022,
                "dataset_id": "world_life_expectancy",
                "transformation_type": "life_expectancy_interpolation",
                "field_name": "life_expectancy",
                "old_value": None,
                "new_value": "81.6",
                "rule_applied": "neighbour_year_mean",
            }
        }
