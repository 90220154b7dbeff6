"""
Unit tests for header normalisation and schema conformance.
"""

import pytest

from lifeexp.core.errors import MalformedRecordError
from lifeexp.core.schema import (
    DATASET_COLUMNS,
    assign_row_ids,
    conform_dataframe,
    normalize_column_name,
)


@pytest.mark.unit
class TestNormalizeColumnName:
    """Tests for header matching"""

    @pytest.mark.parametrize("raw, expected", [
        ("Country", "country"),
        ("Year", "year"),
        ("Status", "status"),
        ("Lifeexpectancy", "life_expectancy"),
        ("Life expectancy ", "life_expectancy"),
        ("AdultMortality", "adult_mortality"),
        ("Adult_Mortality", "adult_mortality"),
        ("BMI", "bmi"),
        (" BMI ", "bmi"),
        ("GDP", "gdp"),
        ("Row_ID", "row_id"),
    ])
    def test_original_headers(self, raw, expected):
        """Test original export headers map to canonical names"""
        assert normalize_column_name(raw) == expected

    def test_unknown_column(self):
        """Test columns outside the schema map to None"""
        assert normalize_column_name("infant deaths") is None


@pytest.mark.unit
class TestConformDataframe:
    """Tests for conform_dataframe"""

    def test_renames_casts_and_drops(self, spark_test_session):
        """Test raw string columns are conformed to the dataset schema"""
        raw = spark_test_session.createDataFrame(
            [("7", " Albania ", "2010", " Developed ", "76.2", "91", "4094.0", "56.0", "1")],
            ["Row_ID", "Country", "Year", "Status", "Lifeexpectancy", "AdultMortality", "GDP", "BMI",
             "infantdeaths"],
        )

        df = conform_dataframe(raw)
        row = df.collect()[0]

        assert df.columns == DATASET_COLUMNS
        assert row["row_id"] == 7
        assert row["country"] == "Albania"
        assert row["year"] == 2010
        assert row["status"] == "Developed"
        assert row["life_expectancy"] == 76.2

    def test_null_status_and_bad_numbers(self, spark_test_session):
        """Test null status becomes "" and unparseable numbers become null"""
        raw = spark_test_session.createDataFrame(
            [("A", "2010.0", None, "n/a", "", "1000", "20")],
            "Country string, Year string, Status string, Lifeexpectancy string, "
            "AdultMortality string, GDP string, BMI string",
        )

        row = conform_dataframe(raw).collect()[0]

        assert row["year"] == 2010
        assert row["status"] == ""
        assert row["life_expectancy"] is None
        assert row["adult_mortality"] is None

    def test_generates_row_ids(self, spark_test_session):
        """Test row ids 1..n are assigned when the input has none"""
        raw = spark_test_session.createDataFrame(
            [("A", 2010, "", 1.0, 1.0, 1.0, 1.0), ("A", 2011, "", 2.0, 2.0, 2.0, 2.0)],
            ["country", "year", "status", "life_expectancy", "adult_mortality", "gdp", "bmi"],
        )

        ids = sorted(row["row_id"] for row in conform_dataframe(raw).collect())

        assert ids == [1, 2]

    def test_missing_required_column_raises(self, spark_test_session):
        """Test a missing column is a malformed input"""
        raw = spark_test_session.createDataFrame([("A", 2010)], ["Country", "Year"])

        with pytest.raises(MalformedRecordError) as exc_info:
            conform_dataframe(raw)

        assert "status" in exc_info.value.context["missing_columns"]

    def test_status_case_is_normalised(self, spark_test_session):
        """Test known statuses are matched regardless of case"""
        raw = spark_test_session.createDataFrame(
            [("A", "2010", " developing "), ("A", "2011", "DEVELOPED"), ("A", "2012", "Emerging")],
            "Country string, Year string, Status string",
        ).selectExpr("*", "'70' AS Lifeexpectancy", "'1' AS AdultMortality", "'1' AS GDP", "'1' AS BMI")

        statuses = {row["year"]: row["status"] for row in conform_dataframe(raw).collect()}

        assert statuses == {2010: "Developing", 2011: "Developed", 2012: "Emerging"}

    def test_supplied_row_ids_must_be_unique(self, spark_test_session):
        """Test ids that collapse to the same integer are reported"""
        raw = spark_test_session.createDataFrame(
            [("A", "2010", "5"), ("A", "2011", "5.0"), ("B", "2010", "7")],
            "Country string, Year string, Row_ID string",
        ).selectExpr("*", "'' AS Status", "'70' AS Lifeexpectancy", "'1' AS AdultMortality", "'1' AS GDP",
                     "'1' AS BMI")

        with pytest.raises(MalformedRecordError, match="repeated") as exc_info:
            conform_dataframe(raw)

        assert exc_info.value.row_ids == [5]

    def test_assign_row_ids_is_stable(self, spark_test_session):
        """Test assigned ids do not change between actions"""
        df = assign_row_ids(spark_test_session.range(5).toDF("n"))

        first = sorted((r["n"], r["row_id"]) for r in df.collect())
        second = sorted((r["n"], r["row_id"]) for r in df.collect())

        assert first == second
        assert sorted(r for _, r in first) == [1, 2, 3, 4, 5]
