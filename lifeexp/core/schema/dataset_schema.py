"""
Fixed Spark schema of the life expectancy dataset.

Raw headers are matched case-insensitively ignoring punctuation, so the
original export (Country, Year, Status, Lifeexpectancy, AdultMortality,
BMI, GDP, Row_ID, plus unrelated indicator columns) conforms to the
canonical snake_case columns below. Unknown columns are dropped.
"""

import re

from pyspark.sql import DataFrame, Window
from pyspark.sql import functions as F
from pyspark.sql.types import (
    DoubleType,
    IntegerType,
    LongType,
    StringType,
    StructField,
    StructType,
)

from lifeexp.core.errors import MalformedRecordError
from lifeexp.core.models import KNOWN_STATUSES
from lifeexp.observability.logger import get_logger

logger = get_logger(__name__)


ROW_ID = "row_id"
COUNTRY = "country"
YEAR = "year"
STATUS = "status"
LIFE_EXPECTANCY = "life_expectancy"
ADULT_MORTALITY = "adult_mortality"
GDP = "gdp"
BMI = "bmi"

DATASET_SCHEMA = StructType([
    StructField(ROW_ID, LongType(), False),
    StructField(COUNTRY, StringType(), True),
    StructField(YEAR, IntegerType(), True),
    StructField(STATUS, StringType(), False),
    StructField(LIFE_EXPECTANCY, DoubleType(), True),
    StructField(ADULT_MORTALITY, DoubleType(), True),
    StructField(GDP, DoubleType(), True),
    StructField(BMI, DoubleType(), True),
])

DATASET_COLUMNS = [field.name for field in DATASET_SCHEMA.fields]

# Only these fields may be changed by cleaning stages
MUTABLE_COLUMNS = (STATUS, LIFE_EXPECTANCY)

# Columns a raw input must provide; row_id is generated when absent
REQUIRED_COLUMNS = [name for name in DATASET_COLUMNS if name != ROW_ID]

# Normalised header -> canonical column
COLUMN_ALIASES = {
    "rowid": ROW_ID,
    "id": ROW_ID,
    "country": COUNTRY,
    "year": YEAR,
    "status": STATUS,
    "lifeexpectancy": LIFE_EXPECTANCY,
    "adultmortality": ADULT_MORTALITY,
    "gdp": GDP,
    "bmi": BMI,
}


def normalize_column_name(name: str) -> str | None:
    """
    Map a raw header onto its canonical column name.

    Args:
        name: Raw header, e.g. "Lifeexpectancy " or "Adult Mortality"

    Returns:
        Canonical column name, or None for columns outside the schema
    """
    key = re.sub(r"[^a-z0-9]", "", name.lower())
    return COLUMN_ALIASES.get(key)


def conform_dataframe(df: DataFrame) -> DataFrame:
    """
    Rename, cast and trim a raw DataFrame to DATASET_SCHEMA.

    Status is trimmed, null is normalised to "" and known statuses are
    matched case-insensitively ("developing" becomes "Developing").
    Empty numeric strings become null. A row_id column is generated in
    input order when the input has none; a supplied one must be unique
    and non-blank since updates and deletes join on it.

    Args:
        df: Raw DataFrame with any header spelling

    Returns:
        DataFrame with exactly DATASET_COLUMNS

    Raises:
        MalformedRecordError: If a required column is missing, or a supplied
            row_id is blank or repeated
    """
    renamed: dict[str, str] = {}
    for raw_name in df.columns:
        canonical = normalize_column_name(raw_name)
        if canonical is None:
            continue
        if canonical in renamed.values():
            logger.warning(f"Ignoring duplicate column '{raw_name}' for '{canonical}'")
            continue
        renamed[raw_name] = canonical

    missing = [name for name in REQUIRED_COLUMNS if name not in renamed.values()]
    if missing:
        raise MalformedRecordError(
            "Input is missing required columns",
            context={"missing_columns": missing, "columns": df.columns},
        )

    dropped = [name for name in df.columns if name not in renamed]
    if dropped:
        logger.debug(f"Dropping {len(dropped)} columns outside the dataset schema", extra={"columns": dropped})

    projected = df.select([F.col(f"`{raw}`").alias(canonical) for raw, canonical in renamed.items()])

    supplied_ids = ROW_ID in projected.columns
    if not supplied_ids:
        projected = assign_row_ids(projected)

    conformed = projected.select(
        _try_cast(ROW_ID, "double").cast(LongType()).alias(ROW_ID),
        F.trim(F.col(COUNTRY).cast(StringType())).alias(COUNTRY),
        _try_cast(YEAR, "double").cast(IntegerType()).alias(YEAR),
        _canonical_status(F.coalesce(F.trim(F.col(STATUS).cast(StringType())), F.lit(""))).alias(STATUS),
        *[
            _try_cast(name, "double").alias(name)
            for name in (LIFE_EXPECTANCY, ADULT_MORTALITY, GDP, BMI)
        ],
    )

    if supplied_ids:
        require_unique_row_ids(conformed)
    return conformed


def _try_cast(name: str, type_name: str):
    # Unparseable text becomes null instead of failing under ANSI mode
    return F.expr(f"try_cast(trim(cast(`{name}` AS string)) AS {type_name})")


def _canonical_status(status):
    # Unrecognised text is kept as-is for the status rule to report
    for known in KNOWN_STATUSES:
        status = F.when(F.lower(status) == known.lower(), F.lit(known)).otherwise(status)
    return status


def require_unique_row_ids(df: DataFrame) -> None:
    """
    Check that every record carries its own row_id.

    Raises:
        MalformedRecordError: Listing the repeated ids; blank or
            unparseable ids are counted in context["blank_row_ids"]
    """
    problems = (
        df.groupBy(ROW_ID)
        .agg(F.count(F.lit(1)).alias("_records"))
        .filter(F.col(ROW_ID).isNull() | (F.col("_records") > 1))
        .collect()
    )
    if not problems:
        return

    repeated = sorted(row[ROW_ID] for row in problems if row[ROW_ID] is not None)
    blank = sum(row["_records"] for row in problems if row[ROW_ID] is None)
    raise MalformedRecordError(
        f"Input row_id column has {len(repeated)} repeated and {blank} blank ids",
        row_ids=repeated,
        context={"blank_row_ids": blank},
    )


def assign_row_ids(df: DataFrame) -> DataFrame:
    """
    Assign row ids 1..n following the input order of the DataFrame.

    The result is checkpointed so the ids stay stable across actions.
    """
    ordered = df.withColumn("_input_order", F.monotonically_increasing_id())
    window = Window.orderBy("_input_order")
    return (
        ordered
        .withColumn(ROW_ID, F.row_number().over(window).cast(LongType()))
        .drop("_input_order")
        .localCheckpoint()
    )
