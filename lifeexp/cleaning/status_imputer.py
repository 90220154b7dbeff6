"""
Back-fill of missing status values from same-country evidence.
"""

from typing import Any, Literal, Tuple

from pyspark.sql import functions as F

from lifeexp.core.errors import AmbiguousStatusError
from lifeexp.core.models import KNOWN_STATUSES
from lifeexp.core.schema import COUNTRY, ROW_ID, STATUS, YEAR
from lifeexp.observability.lineage import LineageTracker
from lifeexp.observability.logger import get_logger
from lifeexp.store import DatasetStore, missing_status

logger = get_logger(__name__)


class StatusImputer:
    """
    Fills a missing status with the status the same country reports elsewhere.

    Per country the distinct known statuses (Developing, Developed) are
    collected in one pass; any other status text is ignored.
    A single value is copied to every record of the country missing one.
    Countries reporting both values are ambiguous: under the "flag" policy
    their records are left alone and the countries are reported, under
    "raise" the stage fails with AmbiguousStatusError.
    """

    def __init__(
        self,
        ambiguous_policy: Literal["flag", "raise"] = "flag",
        lineage_tracker: LineageTracker | None = None
    ):
        if ambiguous_policy not in ("flag", "raise"):
            raise ValueError(f"Unknown ambiguous status policy: {ambiguous_policy}")
        self.ambiguous_policy = ambiguous_policy
        self.lineage_tracker = lineage_tracker

    def run(self, store: DatasetStore) -> Tuple[DatasetStore, dict[str, Any]]:
        """
        Impute missing statuses.

        Returns:
            Tuple of (store, stats) where stats holds statuses_imputed and
            ambiguous_countries

        Raises:
            MalformedRecordError: If a record is missing country or year
            AmbiguousStatusError: If policy is "raise" and a country has both statuses
        """
        store.require_well_formed()

        known = store.filter(F.col(STATUS).isin(*KNOWN_STATUSES)).groupBy(COUNTRY).agg(
            F.array_sort(F.collect_set(F.col(STATUS))).alias("_statuses")
        )

        ambiguous = sorted(
            row[COUNTRY] for row in known.filter(F.size("_statuses") > 1).select(COUNTRY).collect()
        )
        if ambiguous:
            if self.ambiguous_policy == "raise":
                raise AmbiguousStatusError(ambiguous)
            logger.warning(
                f"{len(ambiguous)} countries report both statuses; their missing statuses are left unresolved",
                extra={"countries": ambiguous[:20]}
            )

        resolvable = known.filter(F.size("_statuses") == 1).select(
            COUNTRY, F.col("_statuses").getItem(0).alias("value")
        )
        targets = (
            store.filter(missing_status())
            .select(ROW_ID, COUNTRY, YEAR)
            .join(resolvable, on=COUNTRY, how="inner")
            .localCheckpoint()
        )

        if self.lineage_tracker:
            rows = targets.collect()
            for row in rows:
                self.lineage_tracker.track_status_imputation(
                    row_id=row[ROW_ID], country=row[COUNTRY], year=row[YEAR], new_value=row["value"]
                )
            imputed = len(rows)
        else:
            imputed = targets.count()

        if imputed:
            store = store.update(STATUS, targets.select(ROW_ID, "value"))

        logger.info(
            f"Imputed {imputed} missing statuses",
            extra={"statuses_imputed": imputed, "ambiguous_countries": len(ambiguous)}
        )
        return store, {"statuses_imputed": imputed, "ambiguous_countries": ambiguous}
