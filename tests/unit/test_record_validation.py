"""
Unit tests for rule-engine validation applied through Spark.
"""

import pytest

from lifeexp.cleaning import RecordValidator, apply_validation
from lifeexp.core.errors import MalformedRecordError
from lifeexp.core.rules import RuleConfigBuilder, RuleEngine, default_rules
from lifeexp.store import DatasetStore


@pytest.mark.unit
class TestRecordValidator:
    """Tests for RecordValidator and the validation UDF"""

    def test_clean_records_have_no_warnings(self, make_store):
        """Test valid records produce no warnings"""
        store = make_store([
            {"country": "A", "year": 2010, "status": "Developing", "life_expectancy": 60.0, "gdp": 500.0},
            {"country": "A", "year": 2011, "status": "", "life_expectancy": None},
        ])

        assert RecordValidator(RuleEngine(default_rules())).run(store) == {}

    def test_warnings_are_counted(self, make_store):
        """Test warning rules are counted per rule"""
        rules = RuleConfigBuilder() \
            .add_required_field("country") \
            .add_range("life_expectancy", min_value=0, max_value=100) \
            .build()
        store = make_store([
            {"country": "A", "year": 2010, "life_expectancy": 60.0},
            {"country": "A", "year": 2011, "life_expectancy": 101.0},
            {"country": "A", "year": 2012, "life_expectancy": 130.0},
        ])

        warnings = RecordValidator(RuleEngine(rules)).run(store)

        assert warnings == {"life_expectancy_range": 2}

    def test_error_rule_aborts(self, spark_test_session):
        """Test records failing an error rule raise with their row ids"""
        raw = spark_test_session.createDataFrame(
            [("A", "2010", "Developing", "60"), (None, "2011", "", "61"), ("B", None, "", "70")],
            "Country string, Year string, Status string, Lifeexpectancy string",
        ).selectExpr("*", "'1' AS AdultMortality", "'1' AS GDP", "'1' AS BMI")
        store = DatasetStore.from_dataframe(raw)

        with pytest.raises(MalformedRecordError) as exc_info:
            RecordValidator(RuleEngine(default_rules())).run(store)

        assert len(exc_info.value.row_ids) == 2
        assert exc_info.value.context["failed_rules"] == {"country_required": 1, "year_required": 1}

    def test_apply_validation_adds_columns(self, make_store):
        """Test the UDF adds failed_rules and warnings arrays"""
        rules = RuleConfigBuilder().add_range("gdp", min_value=0, max_value=1000).build()
        store = make_store([
            {"row_id": 1, "country": "A", "year": 2010, "gdp": 500.0},
            {"row_id": 2, "country": "A", "year": 2011, "gdp": 5000.0},
        ])

        result = {
            r["row_id"]: (r["failed_rules"], r["warnings"])
            for r in apply_validation(store.scan(), RuleEngine(rules)).collect()
        }

        assert result[1] == ([], [])
        assert result[2] == ([], ["gdp_range"])

    def test_no_rules_skips_validation(self, make_store):
        """Test an empty rule set validates nothing"""
        store = make_store([{"country": "A", "year": 2010}])
        assert RecordValidator(RuleEngine([])).run(store) == {}
