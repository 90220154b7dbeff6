"""
Unit tests for status imputation.
"""

import pytest

from lifeexp.cleaning import StatusImputer
from lifeexp.core.errors import AmbiguousStatusError
from lifeexp.observability.lineage import LineageTracker
from lifeexp.store import DatasetStore


def statuses(store):
    return {(r.country, r.year): r.status for r in store.to_records()}


@pytest.mark.unit
class TestStatusImputer:
    """Tests for StatusImputer"""

    def test_propagates_single_country_status(self, make_store):
        """Test every missing status of a country takes its only known value"""
        store = make_store([
            {"country": "A", "year": 2010, "status": ""},
            {"country": "A", "year": 2011, "status": "Developing"},
            {"country": "A", "year": 2012, "status": ""},
            {"country": "B", "year": 2010, "status": ""},
            {"country": "B", "year": 2011, "status": "Developed"},
        ])

        result, stats = StatusImputer().run(store)

        assert statuses(result) == {
            ("A", 2010): "Developing",
            ("A", 2011): "Developing",
            ("A", 2012): "Developing",
            ("B", 2010): "Developed",
            ("B", 2011): "Developed",
        }
        assert stats == {"statuses_imputed": 3, "ambiguous_countries": []}

    def test_country_without_evidence_stays_unknown(self, make_store):
        """Test countries with no known status are left alone"""
        store = make_store([
            {"country": "Z", "year": 2010, "status": ""},
            {"country": "Z", "year": 2011, "status": ""},
        ])

        result, stats = StatusImputer().run(store)

        assert set(statuses(result).values()) == {""}
        assert stats["statuses_imputed"] == 0

    def test_ambiguous_country_is_flagged(self, make_store):
        """Test a country with both statuses is reported and not overwritten"""
        store = make_store([
            {"country": "C", "year": 2010, "status": "Developing"},
            {"country": "C", "year": 2011, "status": "Developed"},
            {"country": "C", "year": 2012, "status": ""},
            {"country": "D", "year": 2010, "status": ""},
            {"country": "D", "year": 2011, "status": "Developing"},
        ])

        result, stats = StatusImputer(ambiguous_policy="flag").run(store)

        assert statuses(result)[("C", 2012)] == ""
        assert statuses(result)[("C", 2010)] == "Developing"
        assert statuses(result)[("C", 2011)] == "Developed"
        assert statuses(result)[("D", 2010)] == "Developing"
        assert stats["ambiguous_countries"] == ["C"]
        assert stats["statuses_imputed"] == 1

    def test_ambiguous_country_raises_under_raise_policy(self, make_store):
        """Test the raise policy aborts on conflicting statuses"""
        store = make_store([
            {"country": "C", "year": 2010, "status": "Developing"},
            {"country": "C", "year": 2011, "status": "Developed"},
        ])

        with pytest.raises(AmbiguousStatusError) as exc_info:
            StatusImputer(ambiguous_policy="raise").run(store)

        assert exc_info.value.countries == ["C"]

    def test_unknown_policy_rejected(self):
        """Test only flag and raise are valid policies"""
        with pytest.raises(ValueError):
            StatusImputer(ambiguous_policy="overwrite")

    def test_lineage_entries(self, make_store):
        """Test each filled status is tracked"""
        tracker = LineageTracker()
        store = make_store([
            {"row_id": 1, "country": "A", "year": 2010, "status": ""},
            {"row_id": 2, "country": "A", "year": 2011, "status": "Developing"},
        ])

        StatusImputer(lineage_tracker=tracker).run(store)

        entries = tracker.entries
        assert len(entries) == 1
        assert entries[0].row_id == 1
        assert entries[0].new_value == "Developing"

    def test_running_twice_changes_nothing(self, make_store):
        """Test imputation is idempotent"""
        store = make_store([
            {"country": "A", "year": 2010, "status": ""},
            {"country": "A", "year": 2011, "status": "Developing"},
        ])

        once, _ = StatusImputer().run(store)
        twice, stats = StatusImputer().run(once)

        assert statuses(twice) == statuses(once)
        assert stats["statuses_imputed"] == 0

    def test_unrecognised_status_is_not_evidence(self, spark_test_session):
        """Test status text outside Developing/Developed is neither copied nor a conflict"""
        raw = spark_test_session.createDataFrame(
            [(1, "A", 2010, "Emerging"), (2, "A", 2011, "Developing"), (3, "A", 2012, ""),
             (4, "B", 2010, "Emerging"), (5, "B", 2011, "")],
            "row_id long, country string, year int, status string",
        ).selectExpr(
            "*", "CAST(NULL AS double) AS life_expectancy", "CAST(NULL AS double) AS adult_mortality",
            "CAST(NULL AS double) AS gdp", "CAST(NULL AS double) AS bmi",
        )

        result, stats = StatusImputer().run(DatasetStore(raw))

        values = {row["row_id"]: row["status"] for row in result.scan().collect()}
        assert values == {1: "Emerging", 2: "Developing", 3: "Developing", 4: "Emerging", 5: ""}
        assert stats == {"statuses_imputed": 1, "ambiguous_countries": []}
