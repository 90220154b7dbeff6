"""
Deduplication of records sharing the (country, year) business key.
"""

from typing import Any, Tuple

from pyspark.sql import Column, DataFrame, Window
from pyspark.sql import functions as F

from lifeexp.core.schema import COUNTRY, MUTABLE_COLUMNS, ROW_ID, STATUS, YEAR
from lifeexp.observability.lineage import LineageTracker
from lifeexp.observability.logger import get_logger
from lifeexp.store import DatasetStore, missing_status, missing_value

logger = get_logger(__name__)


def _missing(field_name: str) -> Column:
    if field_name == STATUS:
        return missing_status(field_name)
    return missing_value(field_name)


class Deduplicator:
    """
    Keeps exactly one record per (country, year).

    Survivor rule: within a duplicate group the record with the lowest
    row_id is kept and every other record is removed. With merge_fields
    enabled, a survivor missing status or life_expectancy first takes the
    value of the lowest-row_id removed duplicate that has one, so removal
    never throws away the only observation of a field.
    """

    def __init__(
        self,
        merge_fields: bool = True,
        lineage_tracker: LineageTracker | None = None
    ):
        """
        Args:
            merge_fields: Fill survivor gaps from the removed duplicates
            lineage_tracker: Optional tracker receiving one entry per change
        """
        self.merge_fields = merge_fields
        self.lineage_tracker = lineage_tracker

    def run(self, store: DatasetStore) -> Tuple[DatasetStore, dict[str, Any]]:
        """
        Remove duplicate records.

        Args:
            store: Store to deduplicate

        Returns:
            Tuple of (deduplicated store, stats) where stats holds
            duplicates_removed and fields_merged

        Raises:
            MalformedRecordError: If a record is missing country or year
        """
        store.require_well_formed()

        ranked = self._rank(store.scan())
        duplicates = ranked.filter(F.col("_rank") > 1).localCheckpoint()

        duplicate_rows = duplicates.select(ROW_ID, COUNTRY, YEAR, "_survivor_row_id").collect()
        if not duplicate_rows:
            logger.info("No duplicate (country, year) records found")
            return store, {"duplicates_removed": 0, "fields_merged": 0}

        fields_merged = 0
        if self.merge_fields:
            for field_name in MUTABLE_COLUMNS:
                store, merged = self._merge_field(store, ranked, duplicates, field_name)
                fields_merged += merged

        store = store.delete(duplicates.select(ROW_ID))

        if self.lineage_tracker:
            for row in duplicate_rows:
                self.lineage_tracker.track_removal(
                    row_id=row[ROW_ID],
                    country=row[COUNTRY],
                    year=row[YEAR],
                    survivor_row_id=row["_survivor_row_id"],
                )

        logger.info(
            f"Removed {len(duplicate_rows)} duplicate records",
            extra={"duplicates_removed": len(duplicate_rows), "fields_merged": fields_merged}
        )
        return store, {"duplicates_removed": len(duplicate_rows), "fields_merged": fields_merged}

    def find_duplicates(self, store: DatasetStore) -> DataFrame:
        """
        Business keys occurring more than once, with their counts.

        Returns:
            DataFrame (country, year, duplicate_count)
        """
        return (
            store.aggregate([COUNTRY, YEAR], F.count(F.lit(1)).alias("duplicate_count"))
            .filter(F.col("duplicate_count") > 1)
            .orderBy(COUNTRY, YEAR)
        )

    def _rank(self, df: DataFrame) -> DataFrame:
        window = Window.partitionBy(COUNTRY, YEAR).orderBy(ROW_ID)
        return (
            df
            .withColumn("_rank", F.row_number().over(window))
            .withColumn("_survivor_row_id", F.first(ROW_ID).over(window))
        )

    def _merge_field(
        self,
        store: DatasetStore,
        ranked: DataFrame,
        duplicates: DataFrame,
        field_name: str
    ) -> Tuple[DatasetStore, int]:
        """Copy field_name into survivors that lack it from their first donor duplicate."""
        donor_window = Window.partitionBy("_survivor_row_id").orderBy(ROW_ID)
        donors = (
            duplicates
            .filter(~_missing(field_name))
            .withColumn("_donor_rank", F.row_number().over(donor_window))
            .filter(F.col("_donor_rank") == 1)
            .select(
                F.col("_survivor_row_id").alias(ROW_ID),
                F.col(field_name).alias("value"),
                F.col(ROW_ID).alias("_source_row_id"),
            )
        )
        survivors = (
            ranked
            .filter((F.col("_rank") == 1) & _missing(field_name))
            .select(ROW_ID, COUNTRY, YEAR, F.col(field_name).alias("_old_value"))
        )
        merges = survivors.join(donors, on=ROW_ID, how="inner").collect()
        if not merges:
            return store, 0

        if self.lineage_tracker:
            for row in merges:
                self.lineage_tracker.track_merge(
                    row_id=row[ROW_ID],
                    country=row[COUNTRY],
                    year=row[YEAR],
                    field_name=field_name,
                    old_value=row["_old_value"],
                    new_value=row["value"],
                    source_row_id=row["_source_row_id"],
                )

        updates = store.spark.createDataFrame(
            [(row[ROW_ID], row["value"]) for row in merges],
            schema=f"{ROW_ID} long, value {'string' if field_name == STATUS else 'double'}",
        )
        logger.debug(f"Merged {len(merges)} {field_name} values from removed duplicates")
        return store.update(field_name, updates), len(merges)
