"""
Interpolation of missing life expectancy from the neighbouring years.
"""

from typing import Any, Tuple

from pyspark.sql import DataFrame
from pyspark.sql import functions as F

from lifeexp.core.schema import COUNTRY, LIFE_EXPECTANCY, ROW_ID, YEAR
from lifeexp.observability.lineage import LineageTracker
from lifeexp.observability.logger import get_logger
from lifeexp.store import DatasetStore, missing_life_expectancy

logger = get_logger(__name__)


class LifeExpectancyInterpolator:
    """
    Fills a missing life expectancy with the mean of the year before and after.

    For a record of year Y the records of the same country at Y-1 and Y+1
    must both exist and both carry a value; the result is rounded to one
    decimal. A pass only reads values present when it started, so a value
    filled in a pass never feeds another record in that pass. Boundary
    years and runs of two or more missing years stay missing.

    max_passes > 1 repeats the pass until one fills nothing. With exact
    adjacency that is always the second pass.
    """

    def __init__(self, max_passes: int = 1, lineage_tracker: LineageTracker | None = None):
        if max_passes < 1:
            raise ValueError("max_passes must be at least 1")
        self.max_passes = max_passes
        self.lineage_tracker = lineage_tracker

    def run(self, store: DatasetStore) -> Tuple[DatasetStore, dict[str, Any]]:
        """
        Interpolate missing life expectancy values.

        Returns:
            Tuple of (store, stats) where stats holds life_expectancy_imputed
            and passes

        Raises:
            MalformedRecordError: If a record is missing country or year
        """
        store.require_well_formed()

        total_imputed = 0
        passes = 0
        for pass_number in range(1, self.max_passes + 1):
            passes = pass_number
            candidates = self.find_candidates(store.scan()).localCheckpoint()

            if self.lineage_tracker:
                rows = candidates.collect()
                for row in rows:
                    self.lineage_tracker.track_interpolation(
                        row_id=row[ROW_ID],
                        country=row[COUNTRY],
                        year=row[YEAR],
                        old_value=row["_old_value"],
                        new_value=row["value"],
                        pass_number=pass_number,
                    )
                imputed = len(rows)
            else:
                imputed = candidates.count()

            logger.debug(f"Interpolation pass {pass_number} filled {imputed} values")
            if imputed == 0:
                break

            store = store.update(LIFE_EXPECTANCY, candidates.select(ROW_ID, "value"))
            total_imputed += imputed

        logger.info(
            f"Interpolated {total_imputed} missing life expectancy values in {passes} passes",
            extra={"life_expectancy_imputed": total_imputed, "passes": passes}
        )
        return store, {"life_expectancy_imputed": total_imputed, "passes": passes}

    def find_candidates(self, df: DataFrame) -> DataFrame:
        """
        Records that one interpolation pass would fill.

        Args:
            df: Dataset snapshot

        Returns:
            DataFrame (row_id, country, year, _old_value, previous_value,
            next_value, value)
        """
        known = df.filter(~missing_life_expectancy()).select(COUNTRY, YEAR, LIFE_EXPECTANCY)

        # A known record at year Y is the "previous" neighbour of year Y+1
        previous = known.select(
            F.col(COUNTRY).alias("_prev_country"),
            (F.col(YEAR) + 1).alias("_prev_year"),
            F.col(LIFE_EXPECTANCY).alias("previous_value"),
        )
        following = known.select(
            F.col(COUNTRY).alias("_next_country"),
            (F.col(YEAR) - 1).alias("_next_year"),
            F.col(LIFE_EXPECTANCY).alias("next_value"),
        )

        gaps = df.filter(missing_life_expectancy()).select(
            ROW_ID, COUNTRY, YEAR, F.col(LIFE_EXPECTANCY).alias("_old_value")
        )

        return (
            gaps
            .join(
                previous,
                (F.col(COUNTRY) == F.col("_prev_country")) & (F.col(YEAR) == F.col("_prev_year")),
                "inner",
            )
            .join(
                following,
                (F.col(COUNTRY) == F.col("_next_country")) & (F.col(YEAR) == F.col("_next_year")),
                "inner",
            )
            .select(
                ROW_ID,
                COUNTRY,
                YEAR,
                "_old_value",
                "previous_value",
                "next_value",
                F.round((F.col("previous_value") + F.col("next_value")) / 2, 1).alias("value"),
            )
        )
