"""
Names and column layouts of the analytics result tables.
"""

from pyspark.sql.types import (
    DoubleType,
    IntegerType,
    LongType,
    StringType,
    StructField,
    StructType,
)

TREND = "Trend"
YEARLY_AVERAGE = "YearlyAverage"
GDP_CORRELATION = "GDPCorrelation"
GDP_BUCKET = "GDPBucket"
STATUS_COMPARISON = "StatusComparison"
BMI_CORRELATION = "BMICorrelation"
MORTALITY_ROLLING_TOTAL = "MortalityRollingTotal"

RESULT_SCHEMAS = {
    TREND: StructType([
        StructField("country", StringType()),
        StructField("min_life_expectancy", DoubleType()),
        StructField("max_life_expectancy", DoubleType()),
        StructField("life_increase", DoubleType()),
    ]),
    YEARLY_AVERAGE: StructType([
        StructField("year", IntegerType()),
        StructField("avg_life_expectancy", DoubleType()),
    ]),
    GDP_CORRELATION: StructType([
        StructField("country", StringType()),
        StructField("avg_life_expectancy", DoubleType()),
        StructField("avg_gdp", DoubleType()),
    ]),
    GDP_BUCKET: StructType([
        StructField("high_count", LongType()),
        StructField("high_avg_life_expectancy", DoubleType()),
        StructField("low_count", LongType()),
        StructField("low_avg_life_expectancy", DoubleType()),
    ]),
    STATUS_COMPARISON: StructType([
        StructField("status", StringType()),
        StructField("distinct_country_count", LongType()),
        StructField("avg_life_expectancy", DoubleType()),
    ]),
    BMI_CORRELATION: StructType([
        StructField("country", StringType()),
        StructField("avg_life_expectancy", DoubleType()),
        StructField("avg_bmi", DoubleType()),
    ]),
    MORTALITY_ROLLING_TOTAL: StructType([
        StructField("country", StringType()),
        StructField("year", IntegerType()),
        StructField("life_expectancy", DoubleType()),
        StructField("adult_mortality", DoubleType()),
        StructField("rolling_total", DoubleType()),
    ]),
}

RESULT_TABLES = list(RESULT_SCHEMAS)


def result_columns(table_name: str) -> list[str]:
    """Column names of a result table, in order."""
    if table_name not in RESULT_SCHEMAS:
        raise ValueError(f"Unknown result table: {table_name}")
    return RESULT_SCHEMAS[table_name].fieldNames()
