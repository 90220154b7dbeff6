"""
Dataset store backed by a Spark DataFrame.

The store is the only owner of the record collection during a run.
DataFrames are immutable, so every mutation (update, delete) returns a
new DatasetStore; pipeline stages receive a store and hand back the one
they produced.
"""

from collections import Counter
from typing import Any, Iterable

from pyspark.sql import Column, DataFrame, SparkSession
from pyspark.sql import functions as F
from pydantic import ValidationError as PydanticValidationError

from lifeexp.core.errors import MalformedRecordError
from lifeexp.core.models import LifeExpectancyRecord
from lifeexp.core.schema import (
    COUNTRY,
    DATASET_COLUMNS,
    DATASET_SCHEMA,
    LIFE_EXPECTANCY,
    MUTABLE_COLUMNS,
    ROW_ID,
    STATUS,
    YEAR,
    conform_dataframe,
)


def missing_value(column: str) -> Column:
    """Numeric fields (life_expectancy, gdp, bmi) are missing when null or the 0 sentinel."""
    return F.col(column).isNull() | (F.col(column) == 0)


def missing_life_expectancy(column: str = LIFE_EXPECTANCY) -> Column:
    return missing_value(column)


def missing_status(column: str = STATUS) -> Column:
    return F.col(column).isNull() | (F.trim(F.col(column)) == "")


def malformed_key() -> Column:
    """A record is malformed when country is null/blank or year is null."""
    return F.col(COUNTRY).isNull() | (F.trim(F.col(COUNTRY)) == "") | F.col(YEAR).isNull()


class DatasetStore:
    """
    Mutable-by-replacement collection of life expectancy records.

    Supports scan, filtered scan, grouped aggregation, counting,
    field update by row_id and deletion by row_id.
    """

    def __init__(self, df: DataFrame):
        """
        Wrap a DataFrame that already has exactly DATASET_COLUMNS.

        Use from_dataframe() or from_records() for raw input.
        """
        if list(df.columns) != DATASET_COLUMNS:
            raise ValueError(
                f"DatasetStore expects columns {DATASET_COLUMNS}, got {df.columns}"
            )
        self._df = df

    @classmethod
    def from_dataframe(cls, df: DataFrame) -> "DatasetStore":
        """
        Build a store from a raw DataFrame with any header spelling.

        Raises:
            MalformedRecordError: If a required column is missing, or a
                supplied row_id is blank or repeated
        """
        return cls(conform_dataframe(df))

    @classmethod
    def from_records(
        cls,
        spark: SparkSession,
        records: Iterable[LifeExpectancyRecord | dict[str, Any]],
    ) -> "DatasetStore":
        """
        Build a store from in-process records.

        Records without a row_id get the next free id in list order.

        Raises:
            MalformedRecordError: If a record fails model validation
        """
        models: list[LifeExpectancyRecord] = []
        for idx, record in enumerate(records):
            if isinstance(record, LifeExpectancyRecord):
                models.append(record)
                continue
            try:
                models.append(LifeExpectancyRecord(**record))
            except PydanticValidationError as e:
                raise MalformedRecordError(
                    f"Record {idx} is not a valid life expectancy record",
                    row_ids=[record.get(ROW_ID)] if record.get(ROW_ID) is not None else None,
                    context={"errors": e.errors(include_url=False)},
                ) from e

        next_id = max((m.row_id for m in models if m.row_id is not None), default=0) + 1
        rows = []
        for model in models:
            row = model.model_dump()
            if row[ROW_ID] is None:
                row[ROW_ID] = next_id
                next_id += 1
            rows.append(tuple(row[name] for name in DATASET_COLUMNS))

        repeated = sorted(row_id for row_id, n in Counter(row[0] for row in rows).items() if n > 1)
        if repeated:
            raise MalformedRecordError("row_id values must be unique", row_ids=repeated)

        return cls(spark.createDataFrame(rows, schema=DATASET_SCHEMA))

    @property
    def frame(self) -> DataFrame:
        return self._df

    @property
    def spark(self) -> SparkSession:
        return self._df.sparkSession

    def scan(self) -> DataFrame:
        """All records."""
        return self._df

    def filter(self, condition: Column) -> DataFrame:
        """Records matching a condition."""
        return self._df.filter(condition)

    def aggregate(self, group_by: list[str], *aggregations: Column) -> DataFrame:
        """Grouped aggregation over all records."""
        return self._df.groupBy(*group_by).agg(*aggregations)

    def count(self, condition: Column | None = None) -> int:
        if condition is None:
            return self._df.count()
        return self._df.filter(condition).count()

    def malformed_row_ids(self) -> list[int]:
        return [row[ROW_ID] for row in self._df.filter(malformed_key()).select(ROW_ID).collect()]

    def require_well_formed(self) -> None:
        """
        Raises:
            MalformedRecordError: If any record lacks country or year
        """
        row_ids = self.malformed_row_ids()
        if row_ids:
            raise MalformedRecordError(
                f"{len(row_ids)} records are missing country or year",
                row_ids=row_ids,
            )

    def update(self, field_name: str, updates: DataFrame) -> "DatasetStore":
        """
        Set field_name for the records listed in updates.

        Args:
            field_name: Field to change, one of MUTABLE_COLUMNS
            updates: DataFrame with columns (row_id, value); row_ids not in
                the store are ignored and a row_id must appear at most once

        Returns:
            New store with the updated values
        """
        if field_name not in MUTABLE_COLUMNS:
            raise ValueError(
                f"Field '{field_name}' cannot be updated; mutable fields are {list(MUTABLE_COLUMNS)}"
            )

        changes = updates.select(
            F.col(ROW_ID).alias("_update_row_id"),
            F.col("value").alias("_update_value"),
        )
        joined = self._df.join(changes, self._df[ROW_ID] == changes["_update_row_id"], "left")
        updated = joined.select(*[
            F.when(F.col("_update_row_id").isNotNull(), F.col("_update_value"))
            .otherwise(F.col(name))
            .cast(self._df.schema[name].dataType)
            .alias(name)
            if name == field_name else F.col(name)
            for name in DATASET_COLUMNS
        ])
        return DatasetStore(updated.localCheckpoint())

    def delete(self, row_ids: DataFrame) -> "DatasetStore":
        """
        Remove the records whose row_id appears in row_ids.

        Args:
            row_ids: DataFrame with a row_id column

        Returns:
            New store without those records
        """
        remaining = self._df.join(row_ids.select(ROW_ID).distinct(), on=ROW_ID, how="left_anti")
        return DatasetStore(remaining.select(*DATASET_COLUMNS).localCheckpoint())

    def to_records(self) -> list[LifeExpectancyRecord]:
        """Collect the store as models, ordered by country, year, row_id."""
        rows = self._df.orderBy(COUNTRY, YEAR, ROW_ID).collect()
        return [LifeExpectancyRecord(**row.asDict()) for row in rows]

    def __repr__(self) -> str:
        return f"DatasetStore(columns={DATASET_COLUMNS})"
