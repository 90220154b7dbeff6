"""
Unit tests for Pydantic models and pipeline exceptions.
"""

import pytest
from pydantic import ValidationError

from lifeexp.core.errors import AmbiguousStatusError, MalformedRecordError, PipelineError
from lifeexp.core.models import (
    AuditLog,
    CleaningReport,
    LifeExpectancyRecord,
    STATUS_UNKNOWN,
    ValidationResult,
)


@pytest.mark.unit
class TestLifeExpectancyRecord:
    """Tests for LifeExpectancyRecord model"""

    def test_valid_record(self):
        """Test creating a complete record"""
        record = LifeExpectancyRecord(
            row_id=1,
            country="Afghanistan",
            year=2010,
            status="Developing",
            life_expectancy=58.8,
            adult_mortality=271.0,
            gdp=553.0,
            bmi=17.6,
        )

        assert record.country == "Afghanistan"
        assert record.has_life_expectancy is True
        assert record.has_status is True

    def test_status_none_becomes_unknown(self):
        """Test null status is normalised to the empty string"""
        record = LifeExpectancyRecord(country="A", year=2010, status=None)

        assert record.status == STATUS_UNKNOWN
        assert record.has_status is False

    def test_status_is_trimmed(self):
        """Test surrounding whitespace is removed from status"""
        record = LifeExpectancyRecord(country="A", year=2010, status=" Developed ")
        assert record.status == "Developed"

    def test_unknown_status_text_rejected(self):
        """Test status outside the known values fails validation"""
        with pytest.raises(ValidationError):
            LifeExpectancyRecord(country="A", year=2010, status="Emerging")

    def test_zero_life_expectancy_counts_as_missing(self):
        """Test the 0 sentinel is treated as missing"""
        record = LifeExpectancyRecord(country="A", year=2010, life_expectancy=0.0)
        assert record.has_life_expectancy is False

    def test_blank_country_rejected(self):
        """Test whitespace-only country fails validation"""
        with pytest.raises(ValidationError) as exc_info:
            LifeExpectancyRecord(country="   ", year=2010)

        assert "blank" in str(exc_info.value)

    def test_missing_year_rejected(self):
        """Test year is required"""
        with pytest.raises(ValidationError):
            LifeExpectancyRecord(country="A")

    def test_negative_gdp_rejected(self):
        """Test numeric fields must be non-negative"""
        with pytest.raises(ValidationError):
            LifeExpectancyRecord(country="A", year=2010, gdp=-1.0)


@pytest.mark.unit
class TestValidationResult:
    """Tests for ValidationResult model"""

    def test_passed_with_warnings(self):
        """Test warnings do not make a record fail"""
        result = ValidationResult(row_id=1, passed=True, warnings=["gdp_non_negative"])

        assert result.passed is True
        assert result.warnings == ["gdp_non_negative"]

    def test_passed_with_failed_rules_rejected(self):
        """Test passed=True with failed rules is inconsistent"""
        with pytest.raises(ValidationError) as exc_info:
            ValidationResult(row_id=1, passed=True, failed_rules=["country_required"])

        assert "failed_rules is not empty" in str(exc_info.value)

    def test_failed_without_rules_rejected(self):
        """Test passed=False must name the failed rule"""
        with pytest.raises(ValidationError, match="at least one failed rule"):
            ValidationResult(row_id=1, passed=False)

    def test_as_row(self):
        """Test the fields returned to Spark"""
        result = ValidationResult(
            passed=False, passed_rules=["year_required"], failed_rules=["country_required"], warnings=["gdp_range"]
        )

        assert result.as_row() == {"failed_rules": ["country_required"], "warnings": ["gdp_range"]}


@pytest.mark.unit
class TestAuditLog:
    """Tests for AuditLog model"""

    def test_interpolation_entry(self):
        """Test creating a lineage entry for an interpolated value"""
        log = AuditLog(
            row_id=6,
            country="Albania",
            year=2011,
            dataset_id="world_life_expectancy",
            transformation_type="life_expectancy_interpolation",
            field_name="life_expectancy",
            new_value="76.6",
            rule_applied="neighbour_year_mean(pass=1)",
        )

        assert log.old_value is None
        assert log.created_at is not None

    def test_unknown_transformation_type_rejected(self):
        """Test only cleaning transformation types are accepted"""
        with pytest.raises(ValidationError):
            AuditLog(
                row_id=1,
                country="A",
                year=2010,
                dataset_id="wle",
                transformation_type="outlier_removal",
            )


@pytest.mark.unit
class TestCleaningReport:
    """Tests for CleaningReport model"""

    def test_defaults(self):
        """Test a fresh report has nothing unresolved"""
        report = CleaningReport(dataset_id="wle")

        assert report.total_records == 0
        assert report.ambiguous_status_countries == []
        assert report.has_unresolved_values is False

    def test_unresolved_values(self):
        """Test unresolved counts are surfaced"""
        report = CleaningReport(dataset_id="wle", unresolved_life_expectancy=2)
        assert report.has_unresolved_values is True

    def test_json_serialisation(self):
        """Test the report serialises to JSON for the writer"""
        report = CleaningReport(dataset_id="wle", duplicates_removed=3)
        assert '"duplicates_removed":3' in report.model_dump_json()


@pytest.mark.unit
class TestPipelineErrors:
    """Tests for the exception hierarchy"""

    def test_malformed_record_error_carries_row_ids(self):
        """Test offending row ids are kept and summarised in the context"""
        error = MalformedRecordError("2 records are missing country or year", row_ids=[4, 9])

        assert isinstance(error, PipelineError)
        assert error.row_ids == [4, 9]
        assert error.context["malformed_count"] == 2
        assert "row_ids=[4, 9]" in str(error)

    def test_malformed_record_error_without_row_ids(self):
        """Test a missing column error has no row ids"""
        error = MalformedRecordError("Input is missing required columns", context={"missing_columns": ["year"]})

        assert error.row_ids == []
        assert error.to_dict()["context"] == {"missing_columns": ["year"]}

    def test_ambiguous_status_error_sorts_countries(self):
        """Test conflicting countries are reported in sorted order"""
        error = AmbiguousStatusError(["Chile", "Bolivia"])

        assert error.countries == ["Bolivia", "Chile"]
        assert error.to_dict()["error_type"] == "AmbiguousStatusError"
        assert "2 countries" in error.message
