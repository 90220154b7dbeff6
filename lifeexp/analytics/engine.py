"""
Exploratory analytics over the cleaned dataset.

Every query is read-only and independent of the others. Missing values
(null or the 0 sentinel) are excluded from the metric they would distort.
"""

from pyspark.sql import DataFrame, Window
from pyspark.sql import functions as F

from lifeexp.analytics.result_tables import (
    BMI_CORRELATION,
    GDP_BUCKET,
    GDP_CORRELATION,
    MORTALITY_ROLLING_TOTAL,
    RESULT_SCHEMAS,
    STATUS_COMPARISON,
    TREND,
    YEARLY_AVERAGE,
)
from lifeexp.core.schema import ADULT_MORTALITY, BMI, COUNTRY, GDP, LIFE_EXPECTANCY, STATUS, YEAR
from lifeexp.observability.logger import get_logger
from lifeexp.store import DatasetStore, missing_value

logger = get_logger(__name__)

DEFAULT_GDP_THRESHOLD = 1500.0


def _conform(df: DataFrame, table_name: str) -> DataFrame:
    schema = RESULT_SCHEMAS[table_name]
    return df.select(*[F.col(f.name).cast(f.dataType).alias(f.name) for f in schema.fields])


class AnalyticsEngine:
    """
    Computes the seven result tables.

    Usage:
        engine = AnalyticsEngine(gdp_threshold=1500)
        tables = engine.run_all(store)
        tables["Trend"].show()
    """

    def __init__(self, gdp_threshold: float = DEFAULT_GDP_THRESHOLD):
        """
        Args:
            gdp_threshold: GDP splitting the high and low buckets; a row exactly
                at the threshold belongs to both
        """
        self.gdp_threshold = gdp_threshold

    def run_all(self, store: DatasetStore) -> dict[str, DataFrame]:
        """
        Compute every result table.

        Returns:
            Table name -> DataFrame, in RESULT_TABLES order
        """
        return {
            TREND: self.life_expectancy_trend(store),
            YEARLY_AVERAGE: self.yearly_average(store),
            GDP_CORRELATION: self.gdp_correlation(store),
            GDP_BUCKET: self.gdp_buckets(store),
            STATUS_COMPARISON: self.status_comparison(store),
            BMI_CORRELATION: self.bmi_correlation(store),
            MORTALITY_ROLLING_TOTAL: self.mortality_rolling_total(store),
        }

    def life_expectancy_trend(self, store: DatasetStore) -> DataFrame:
        """
        Per-country change between the lowest and highest life expectancy.

        Missing values count as the 0 sentinel, so a country with any
        missing year has a 0 extreme and is left out.
        """
        value = F.coalesce(F.col(LIFE_EXPECTANCY), F.lit(0.0))
        trend = (
            store.aggregate(
                [COUNTRY],
                F.min(value).alias("min_life_expectancy"),
                F.max(value).alias("max_life_expectancy"),
            )
            .filter((F.col("min_life_expectancy") != 0) & (F.col("max_life_expectancy") != 0))
            .withColumn(
                "life_increase",
                F.round(F.col("max_life_expectancy") - F.col("min_life_expectancy"), 1),
            )
            .orderBy(F.desc("life_increase"), F.asc(COUNTRY))
        )
        return _conform(trend, TREND)

    def yearly_average(self, store: DatasetStore) -> DataFrame:
        """Average life expectancy across countries for each year."""
        yearly = (
            store.filter(~missing_value(LIFE_EXPECTANCY))
            .groupBy(YEAR)
            .agg(F.round(F.avg(LIFE_EXPECTANCY), 2).alias("avg_life_expectancy"))
            .orderBy(YEAR)
        )
        return _conform(yearly, YEARLY_AVERAGE)

    def gdp_correlation(self, store: DatasetStore) -> DataFrame:
        """Per-country average life expectancy next to average GDP, lowest GDP first."""
        correlation = (
            store.filter(~missing_value(LIFE_EXPECTANCY) & ~missing_value(GDP))
            .groupBy(COUNTRY)
            .agg(
                F.round(F.avg(LIFE_EXPECTANCY), 1).alias("avg_life_expectancy"),
                F.round(F.avg(GDP), 1).alias("avg_gdp"),
            )
            .orderBy(F.asc("avg_gdp"), F.asc(COUNTRY))
        )
        return _conform(correlation, GDP_CORRELATION)

    def gdp_buckets(self, store: DatasetStore) -> DataFrame:
        """
        Count and average life expectancy of high and low GDP rows.

        high: gdp >= threshold, low: gdp <= threshold. Both comparisons are
        inclusive, so rows exactly at the threshold are counted twice.
        Always returns a single row.
        """
        high = F.col(GDP) >= F.lit(self.gdp_threshold)
        low = F.col(GDP) <= F.lit(self.gdp_threshold)
        buckets = (
            store.filter(~missing_value(LIFE_EXPECTANCY) & ~missing_value(GDP))
            .agg(
                F.coalesce(F.sum(F.when(high, 1).otherwise(0)), F.lit(0)).alias("high_count"),
                F.avg(F.when(high, F.col(LIFE_EXPECTANCY))).alias("high_avg_life_expectancy"),
                F.coalesce(F.sum(F.when(low, 1).otherwise(0)), F.lit(0)).alias("low_count"),
                F.avg(F.when(low, F.col(LIFE_EXPECTANCY))).alias("low_avg_life_expectancy"),
            )
        )
        return _conform(buckets, GDP_BUCKET)

    def status_comparison(self, store: DatasetStore) -> DataFrame:
        """
        Distinct country count and average life expectancy per status.

        Records whose status is still unknown form their own "" group.
        """
        comparison = (
            store.aggregate(
                [STATUS],
                F.countDistinct(COUNTRY).alias("distinct_country_count"),
                F.round(
                    F.avg(F.when(~missing_value(LIFE_EXPECTANCY), F.col(LIFE_EXPECTANCY))), 1
                ).alias("avg_life_expectancy"),
            )
            .orderBy(STATUS)
        )
        return _conform(comparison, STATUS_COMPARISON)

    def bmi_correlation(self, store: DatasetStore) -> DataFrame:
        """Per-country average life expectancy next to average BMI, highest BMI first."""
        correlation = (
            store.filter(~missing_value(LIFE_EXPECTANCY) & ~missing_value(BMI))
            .groupBy(COUNTRY)
            .agg(
                F.round(F.avg(LIFE_EXPECTANCY), 1).alias("avg_life_expectancy"),
                F.round(F.avg(BMI), 1).alias("avg_bmi"),
            )
            .orderBy(F.desc("avg_bmi"), F.asc(COUNTRY))
        )
        return _conform(correlation, BMI_CORRELATION)

    def mortality_rolling_total(self, store: DatasetStore) -> DataFrame:
        """
        Running total of adult mortality per country, in year order.

        Null mortality adds nothing to the total.
        """
        window = (
            Window.partitionBy(COUNTRY)
            .orderBy(YEAR)
            .rowsBetween(Window.unboundedPreceding, Window.currentRow)
        )
        rolling = (
            store.scan()
            .withColumn(
                "rolling_total",
                F.sum(F.coalesce(F.col(ADULT_MORTALITY), F.lit(0.0))).over(window),
            )
            .orderBy(COUNTRY, YEAR)
        )
        return _conform(rolling, MORTALITY_ROLLING_TOTAL)
