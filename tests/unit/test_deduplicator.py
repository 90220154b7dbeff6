"""
Unit tests for duplicate removal.

Includes property-based testing with hypothesis for idempotence.
"""

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from lifeexp.cleaning import Deduplicator
from lifeexp.core.errors import MalformedRecordError
from lifeexp.observability.lineage import LineageTracker
from lifeexp.store import DatasetStore


def keys(store):
    return [(r.country, r.year) for r in store.to_records()]


@pytest.mark.unit
class TestDeduplicator:
    """Tests for Deduplicator"""

    def test_lowest_row_id_survives(self, make_store):
        """Test the duplicate with the lowest row_id is kept"""
        store = make_store([
            {"row_id": 7, "country": "A", "year": 2010, "status": "Developing", "life_expectancy": 70.0},
            {"row_id": 3, "country": "A", "year": 2010, "status": "Developing", "life_expectancy": 69.0},
            {"row_id": 9, "country": "A", "year": 2010, "status": "Developing", "life_expectancy": 71.0},
            {"row_id": 4, "country": "A", "year": 2011, "status": "Developing", "life_expectancy": 72.0},
        ])

        result, stats = Deduplicator().run(store)

        records = result.to_records()
        assert [r.row_id for r in records] == [3, 4]
        assert records[0].life_expectancy == 69.0
        assert stats == {"duplicates_removed": 2, "fields_merged": 0}

    def test_no_duplicates_returns_same_store(self, make_store):
        """Test a clean dataset is returned unchanged"""
        store = make_store([
            {"row_id": 1, "country": "A", "year": 2010},
            {"row_id": 2, "country": "B", "year": 2010},
        ])

        result, stats = Deduplicator().run(store)

        assert result is store
        assert stats["duplicates_removed"] == 0

    def test_merge_fills_survivor_gaps(self, make_store):
        """Test a survivor missing fields takes them from the removed duplicates"""
        store = make_store([
            {"row_id": 1, "country": "A", "year": 2010, "status": "", "life_expectancy": 0.0},
            {"row_id": 2, "country": "A", "year": 2010, "status": "Developed", "life_expectancy": None},
            {"row_id": 3, "country": "A", "year": 2010, "status": "Developing", "life_expectancy": 74.0},
        ])

        result, stats = Deduplicator(merge_fields=True).run(store)

        records = result.to_records()
        assert len(records) == 1
        assert records[0].row_id == 1
        assert records[0].status == "Developed"
        assert records[0].life_expectancy == 74.0
        assert stats == {"duplicates_removed": 2, "fields_merged": 2}

    def test_merge_disabled_discards_duplicate_values(self, make_store):
        """Test survivors keep their gaps without merging"""
        store = make_store([
            {"row_id": 1, "country": "A", "year": 2010, "status": ""},
            {"row_id": 2, "country": "A", "year": 2010, "status": "Developed"},
        ])

        result, stats = Deduplicator(merge_fields=False).run(store)

        assert result.to_records()[0].status == ""
        assert stats["fields_merged"] == 0

    def test_lineage_entries(self, make_store):
        """Test removals and merges are tracked"""
        tracker = LineageTracker()
        store = make_store([
            {"row_id": 1, "country": "A", "year": 2010, "status": ""},
            {"row_id": 2, "country": "A", "year": 2010, "status": "Developed"},
        ])

        Deduplicator(lineage_tracker=tracker).run(store)

        assert tracker.count("deduplication") == 1
        assert tracker.count("duplicate_merge") == 1
        removal = [e for e in tracker.entries if e.transformation_type == "deduplication"][0]
        assert removal.row_id == 2
        assert removal.new_value == "kept_row_id=1"

    def test_find_duplicates(self, make_store):
        """Test duplicate keys are listed with their counts"""
        store = make_store([
            {"row_id": 1, "country": "A", "year": 2010},
            {"row_id": 2, "country": "A", "year": 2010},
            {"row_id": 3, "country": "A", "year": 2011},
        ])

        rows = Deduplicator().find_duplicates(store).collect()

        assert [(r["country"], r["year"], r["duplicate_count"]) for r in rows] == [("A", 2010, 2)]

    def test_malformed_records_abort(self, spark_test_session):
        """Test a record without year cannot be deduplicated"""
        raw = spark_test_session.createDataFrame(
            [(1, "A", None, "")],
            "row_id long, country string, year int, status string",
        ).selectExpr(
            "*", "CAST(NULL AS double) AS life_expectancy", "CAST(NULL AS double) AS adult_mortality",
            "CAST(NULL AS double) AS gdp", "CAST(NULL AS double) AS bmi",
        )

        with pytest.raises(MalformedRecordError):
            Deduplicator().run(DatasetStore(raw))

    @settings(max_examples=10, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
    @given(st.lists(
        st.tuples(st.sampled_from(["A", "B", "C"]), st.integers(min_value=2000, max_value=2003)),
        min_size=1,
        max_size=12,
    ))
    def test_property_unique_keys_and_idempotent(self, make_store, key_list):
        """Property test: output keys are unique and a second run changes nothing"""
        store = make_store([{"country": country, "year": year} for country, year in key_list])

        once, stats = Deduplicator().run(store)
        twice, second_stats = Deduplicator().run(once)

        assert len(keys(once)) == len(set(key_list))
        assert stats["duplicates_removed"] == len(key_list) - len(set(key_list))
        assert second_stats["duplicates_removed"] == 0
        assert keys(twice) == keys(once)
