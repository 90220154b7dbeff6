"""
Batch cleaning and analytics pipeline orchestration.

Coordinates the flow: read → validate → deduplicate → impute status →
interpolate life expectancy → analytics → write
"""

import time
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pyspark.sql import DataFrame, SparkSession

from lifeexp.analytics import AnalyticsEngine
from lifeexp.batch.readers import FileReader
from lifeexp.batch.writers import ResultWriter
from lifeexp.cleaning import (
    Deduplicator,
    LifeExpectancyInterpolator,
    RecordValidator,
    StatusImputer,
)
from lifeexp.core.config import PipelineConfig
from lifeexp.core.errors import PipelineError
from lifeexp.core.models import CleaningReport
from lifeexp.core.rules import RuleConfigLoader, RuleEngine, default_rules
from lifeexp.observability import metrics
from lifeexp.observability.lineage import LineageTracker
from lifeexp.observability.logger import get_logger, log_operation
from lifeexp.store import DatasetStore, missing_life_expectancy, missing_status

logger = get_logger(__name__)


class LifeExpectancyPipeline:
    """
    Orchestrates the cleaning stages and the analytics queries.

    Flow:
    1. Read the raw file and conform it to the dataset schema
    2. Validate records (key field failures abort the run)
    3. Remove duplicate (country, year) records
    4. Impute missing statuses
    5. Interpolate missing life expectancy
    6. Report what is still unresolved
    7. Compute the analytics result tables
    8. Write the cleaned dataset, result tables and report

    Each stage receives the store produced by the previous one; the
    stage order is fixed.
    """

    def __init__(
        self,
        spark: SparkSession,
        config: Optional[PipelineConfig] = None,
        lineage_tracker: Optional[LineageTracker] = None
    ):
        """
        Initialize the pipeline.

        Args:
            spark: Active Spark session
            config: Pipeline settings (defaults when None)
            lineage_tracker: Optional tracker for per-record audit entries
        """
        self.spark = spark
        self.config = config or PipelineConfig()
        self.lineage_tracker = lineage_tracker
        self.dataset_id = self.config.dataset_id

        self.file_reader = FileReader(spark)
        self.validator = RecordValidator(self._load_rule_engine())
        self.deduplicator = Deduplicator(
            merge_fields=self.config.merge_duplicates,
            lineage_tracker=lineage_tracker,
        )
        self.status_imputer = StatusImputer(
            ambiguous_policy=self.config.ambiguous_status_policy,
            lineage_tracker=lineage_tracker,
        )
        self.interpolator = LifeExpectancyInterpolator(
            max_passes=self.config.interpolation_max_passes,
            lineage_tracker=lineage_tracker,
        )
        self.analytics = AnalyticsEngine(gdp_threshold=self.config.gdp_threshold)

    def _load_rule_engine(self) -> RuleEngine:
        rules_path = self.config.validation_rules_path
        if rules_path is None:
            rules = default_rules()
        elif not Path(rules_path).exists():
            logger.warning(f"Validation rules file not found: {rules_path}, using built-in rules")
            rules = default_rules()
        else:
            rules = RuleConfigLoader(rules_path).load_rules()

        engine = RuleEngine(rules)
        logger.info("Validation rules loaded", extra={"rules_path": rules_path, **engine.get_rule_summary()})
        return engine

    def load(self, file_path: str, file_format: str = "csv", **read_options) -> DatasetStore:
        """
        Read a raw file into a DatasetStore.

        Raises:
            MalformedRecordError: If a required column is missing, or a
                Row_ID is blank or repeated
        """
        logger.info(f"Reading {file_format} file: {file_path}")
        df = self.file_reader.read(file_path, file_format=file_format, **read_options)
        return DatasetStore.from_dataframe(df)

    def clean(self, store: DatasetStore) -> Tuple[DatasetStore, CleaningReport]:
        """
        Run the cleaning stages in order.

        Args:
            store: Raw dataset

        Returns:
            Tuple of (cleaned store, cleaning report)

        Raises:
            MalformedRecordError: If records lack key fields or fail "error" rules
            AmbiguousStatusError: If the ambiguous status policy is "raise"
        """
        start = time.time()
        report = CleaningReport(dataset_id=self.dataset_id)
        report.total_records = store.count()

        try:
            with log_operation("validate", logger=logger, dataset_id=self.dataset_id):
                report.validation_warnings = self.validator.run(store)
            for rule_name, count in report.validation_warnings.items():
                metrics.record_validation_failure(self.dataset_id, rule_name, "warning", count)

            with log_operation("deduplicate", logger=logger, dataset_id=self.dataset_id) as op, \
                    metrics.track_duration(metrics.stage_duration_seconds, dataset_id=self.dataset_id, stage="deduplicate"):
                input_count = store.count()
                store, stats = self.deduplicator.run(store)
                op.annotate(**stats)
            report.duplicates_removed = stats["duplicates_removed"]
            report.duplicate_fields_merged = stats["fields_merged"]
            metrics.record_stage(
                self.dataset_id, "deduplicate", input_count,
                removed_records=stats["duplicates_removed"],
            )

            with log_operation("impute_status", logger=logger, dataset_id=self.dataset_id) as op, \
                    metrics.track_duration(metrics.stage_duration_seconds, dataset_id=self.dataset_id, stage="impute_status"):
                input_count = store.count()
                store, stats = self.status_imputer.run(store)
                op.annotate(**stats)
            report.statuses_imputed = stats["statuses_imputed"]
            report.ambiguous_status_countries = stats["ambiguous_countries"]
            metrics.record_stage(
                self.dataset_id, "impute_status", input_count,
                imputed={"status": stats["statuses_imputed"]},
            )

            with log_operation("interpolate_life_expectancy", logger=logger, dataset_id=self.dataset_id) as op, \
                    metrics.track_duration(metrics.stage_duration_seconds, dataset_id=self.dataset_id, stage="interpolate_life_expectancy"):
                input_count = store.count()
                store, stats = self.interpolator.run(store)
                op.annotate(**stats)
            report.life_expectancy_imputed = stats["life_expectancy_imputed"]
            report.interpolation_passes = stats["passes"]
            metrics.record_stage(
                self.dataset_id, "interpolate_life_expectancy", input_count,
                imputed={"life_expectancy": stats["life_expectancy_imputed"]},
            )

        except PipelineError as e:
            metrics.record_error(self.dataset_id, type(e).__name__, "cleaning")
            raise

        report.cleaned_records = store.count()
        report.unresolved_status = store.count(missing_status())
        report.unresolved_life_expectancy = store.count(missing_life_expectancy())
        report.duration_seconds = round(time.time() - start, 3)

        metrics.record_data_quality(
            self.dataset_id,
            unresolved_status=report.unresolved_status,
            unresolved_life_expectancy=report.unresolved_life_expectancy,
            ambiguous_countries=len(report.ambiguous_status_countries),
        )

        if report.has_unresolved_values:
            logger.warning(
                "Records with unresolved missing values remain after cleaning",
                extra={
                    "unresolved_status": report.unresolved_status,
                    "unresolved_life_expectancy": report.unresolved_life_expectancy,
                }
            )

        if self.lineage_tracker:
            self.lineage_tracker.flush()

        return store, report

    def analyze(self, store: DatasetStore) -> Dict[str, DataFrame]:
        """
        Compute the analytics result tables over a cleaned store.

        Returns:
            Table name -> DataFrame
        """
        with log_operation("analytics", logger=logger, dataset_id=self.dataset_id):
            return self.analytics.run_all(store)

    def process_file(
        self,
        file_path: str,
        output_dir: Optional[str] = None,
        file_format: str = "csv",
        output_format: str = "csv",
        run_analytics: bool = True,
        **read_options
    ) -> Dict[str, Any]:
        """
        Process a file through the complete pipeline.

        Args:
            file_path: Path to input file
            output_dir: Directory for outputs (nothing is written when None)
            file_format: Input format (csv, json, parquet)
            output_format: Output format (csv, parquet)
            run_analytics: Whether to compute the result tables
            **read_options: Additional read options

        Returns:
            Dictionary with processing results:
            - report: CleaningReport
            - store: cleaned DatasetStore
            - tables: table name -> DataFrame (empty when run_analytics is False)
            - table_rows: table name -> row count
            - outputs: written name -> path
        """
        logger.info(f"Starting pipeline for file: {file_path}")

        store = self.load(file_path, file_format=file_format, **read_options)
        store, report = self.clean(store)

        tables: Dict[str, DataFrame] = {}
        table_rows: Dict[str, int] = {}
        if run_analytics:
            tables = self.analyze(store)
            for name, df in tables.items():
                table_rows[name] = df.count()
                metrics.set_gauge(metrics.analytics_rows, table_rows[name], dataset_id=self.dataset_id, table=name)

        outputs: Dict[str, str] = {}
        if output_dir:
            writer = ResultWriter(output_dir, output_format=output_format)
            outputs["cleaned"] = writer.write_store(store)
            outputs.update(writer.write_tables(tables))
            outputs["report"] = writer.write_report(report)

        logger.info("Pipeline complete", extra={"dataset_id": self.dataset_id, **report.model_dump(mode="json")})

        return {
            "report": report,
            "store": store,
            "tables": tables,
            "table_rows": table_rows,
            "outputs": outputs,
        }
