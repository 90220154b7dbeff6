"""
Record validation before cleaning.

Applies the RuleEngine to every record through a Spark UDF. Failures of
"error" rules abort the run with MalformedRecordError; failures of
"warning" rules are counted and reported.
"""

from typing import Any

from pyspark.sql import DataFrame
from pyspark.sql import functions as F
from pyspark.sql.types import ArrayType, StringType, StructField, StructType

from lifeexp.core.errors import MalformedRecordError
from lifeexp.core.rules import RuleEngine
from lifeexp.core.schema import DATASET_COLUMNS, ROW_ID
from lifeexp.observability.logger import get_logger
from lifeexp.store import DatasetStore

logger = get_logger(__name__)

VALIDATION_SCHEMA = StructType([
    StructField("failed_rules", ArrayType(StringType()), False),
    StructField("warnings", ArrayType(StringType()), False),
])


def create_validation_udf(rule_engine: RuleEngine):
    """
    Create a Spark UDF that applies validation rules to a record struct.

    Args:
        rule_engine: Configured RuleEngine

    Returns:
        UDF returning a struct of (failed_rules, warnings)
    """

    def validate_row(record) -> dict[str, Any]:
        payload = record.asDict() if record is not None else {}
        result = rule_engine.validate_record(payload, row_id=payload.get(ROW_ID))
        return result.as_row()

    return F.udf(validate_row, VALIDATION_SCHEMA)


def apply_validation(df: DataFrame, rule_engine: RuleEngine) -> DataFrame:
    """
    Add failed_rules and warnings columns to a dataset DataFrame.
    """
    validation_udf = create_validation_udf(rule_engine)
    validated = df.withColumn("_validation", validation_udf(F.struct(*DATASET_COLUMNS)))
    return (
        validated
        .withColumn("failed_rules", F.col("_validation.failed_rules"))
        .withColumn("warnings", F.col("_validation.warnings"))
        .drop("_validation")
    )


class RecordValidator:
    """
    Validates a store against a rule engine without changing it.
    """

    def __init__(self, rule_engine: RuleEngine):
        self.rule_engine = rule_engine

    def run(self, store: DatasetStore) -> dict[str, int]:
        """
        Validate every record.

        Returns:
            Rule name -> number of records that triggered the warning

        Raises:
            MalformedRecordError: If any record fails an "error" rule
        """
        if not self.rule_engine.validators:
            return {}

        validated = apply_validation(store.scan(), self.rule_engine).localCheckpoint()

        invalid = validated.filter(F.size("failed_rules") > 0).select(ROW_ID, "failed_rules").collect()
        if invalid:
            failed_counts: dict[str, int] = {}
            for row in invalid:
                for rule_name in row["failed_rules"]:
                    failed_counts[rule_name] = failed_counts.get(rule_name, 0) + 1
            raise MalformedRecordError(
                f"{len(invalid)} records failed validation",
                row_ids=sorted(row[ROW_ID] for row in invalid),
                context={"failed_rules": failed_counts},
            )

        warning_counts = {
            row["rule_name"]: row["count"]
            for row in validated
            .select(F.explode("warnings").alias("rule_name"))
            .groupBy("rule_name")
            .count()
            .collect()
        }
        if warning_counts:
            logger.warning(
                f"{sum(warning_counts.values())} validation warnings",
                extra={"validation_warnings": warning_counts}
            )
        return warning_counts
