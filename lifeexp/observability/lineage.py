"""
Data lineage tracking for cleaning changes.

LineageTracker records an AuditLog entry for every record removed or
field filled in by a cleaning stage, so an imputed value can always be
traced back to the rule and neighbours that produced it.
"""

from pathlib import Path
from typing import Any

from lifeexp.core.models.audit_log import AuditLog, TransformationType
from lifeexp.observability.logger import get_logger

logger = get_logger(__name__)


class LineageTracker:
    """
    Buffers audit log entries and flushes them as JSON lines.

    Usage:
        tracker = LineageTracker(dataset_id="wle", sink_path="out/lineage.jsonl")
        tracker.track_interpolation(row_id=7, country="Iraq", year=2016,
                                    old_value=None, new_value=68.4)
        tracker.flush()
    """

    def __init__(
        self,
        dataset_id: str = "world_life_expectancy",
        sink_path: str | Path | None = None,
        batch_size: int = 1000
    ):
        """
        Initialize lineage tracker.

        Args:
            dataset_id: Dataset the tracked records belong to
            sink_path: JSON lines file for the entries, replaced by the first
                flush of this tracker (None keeps them in memory)
            batch_size: Number of entries to buffer before auto-flush
        """
        self.dataset_id = dataset_id
        self.sink_path = Path(sink_path) if sink_path else None
        self.batch_size = batch_size
        self._pending_logs: list[AuditLog] = []
        self._history: list[AuditLog] = []
        self._sink_started = False

    @property
    def entries(self) -> list[AuditLog]:
        """All entries tracked so far, flushed or not."""
        return list(self._history)

    def count(self, transformation_type: TransformationType | None = None) -> int:
        if transformation_type is None:
            return len(self._history)
        return sum(1 for e in self._history if e.transformation_type == transformation_type)

    def track_transformation(
        self,
        row_id: int,
        country: str,
        year: int,
        transformation_type: TransformationType,
        field_name: str | None = None,
        old_value: Any = None,
        new_value: Any = None,
        rule_applied: str | None = None
    ) -> AuditLog:
        """
        Track a single cleaning change.

        Returns:
            AuditLog model instance
        """
        audit_log = AuditLog(
            row_id=row_id,
            country=country,
            year=year,
            dataset_id=self.dataset_id,
            transformation_type=transformation_type,
            field_name=field_name,
            old_value=str(old_value) if old_value is not None else None,
            new_value=str(new_value) if new_value is not None else None,
            rule_applied=rule_applied,
        )

        self._pending_logs.append(audit_log)
        self._history.append(audit_log)

        if len(self._pending_logs) >= self.batch_size:
            self.flush()

        return audit_log

    def track_removal(self, row_id: int, country: str, year: int, survivor_row_id: int) -> AuditLog:
        """Track a duplicate record removed in favour of survivor_row_id."""
        return self.track_transformation(
            row_id=row_id,
            country=country,
            year=year,
            transformation_type="deduplication",
            new_value=f"kept_row_id={survivor_row_id}",
            rule_applied="lowest_row_id_wins",
        )

    def track_merge(
        self,
        row_id: int,
        country: str,
        year: int,
        field_name: str,
        old_value: Any,
        new_value: Any,
        source_row_id: int
    ) -> AuditLog:
        """Track a survivor field filled from a removed duplicate."""
        return self.track_transformation(
            row_id=row_id,
            country=country,
            year=year,
            transformation_type="duplicate_merge",
            field_name=field_name,
            old_value=old_value,
            new_value=new_value,
            rule_applied=f"merged_from_row_id={source_row_id}",
        )

    def track_status_imputation(self, row_id: int, country: str, year: int, new_value: str) -> AuditLog:
        """Track a status copied from another record of the same country."""
        return self.track_transformation(
            row_id=row_id,
            country=country,
            year=year,
            transformation_type="status_imputation",
            field_name="status",
            old_value="",
            new_value=new_value,
            rule_applied="same_country_status",
        )

    def track_interpolation(
        self,
        row_id: int,
        country: str,
        year: int,
        old_value: Any,
        new_value: float,
        pass_number: int = 1
    ) -> AuditLog:
        """Track a life expectancy interpolated from the neighbouring years."""
        return self.track_transformation(
            row_id=row_id,
            country=country,
            year=year,
            transformation_type="life_expectancy_interpolation",
            field_name="life_expectancy",
            old_value=old_value,
            new_value=new_value,
            rule_applied=f"neighbour_year_mean(pass={pass_number})",
        )

    def flush(self) -> int:
        """
        Write pending entries to the sink.

        The first flush truncates the sink, even with nothing pending, so
        the file only ever holds this tracker's entries.

        Returns:
            Number of entries flushed
        """
        count = len(self._pending_logs)
        if count == 0 and (self.sink_path is None or self._sink_started):
            return 0

        if self.sink_path is None:
            logger.debug(f"No lineage sink configured, keeping {count} entries in memory")
            self._pending_logs.clear()
            return count

        mode = "a" if self._sink_started else "w"
        self.sink_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.sink_path, mode, encoding="utf-8") as f:
            for entry in self._pending_logs:
                f.write(entry.model_dump_json() + "\n")
        self._sink_started = True

        logger.info(f"Flushed {count} lineage entries to {self.sink_path}")
        self._pending_logs.clear()
        return count

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Auto-flush pending entries."""
        if self._pending_logs:
            self.flush()
        return False
