"""
Pytest configuration and fixtures for lifeexp tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import os
from pathlib import Path
from typing import Generator

import pytest
from pyspark.sql import SparkSession

from lifeexp.store import DatasetStore


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require a Spark pipeline run"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that run pipeline stages on Spark"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that test the full pipeline"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# SPARK FIXTURES
# =======================

@pytest.fixture(scope="session")
def spark_session() -> Generator[SparkSession, None, None]:
    """
    Create a Spark session for testing with local mode

    Yields:
        SparkSession configured for local testing
    """
    spark = (
        SparkSession.builder
        .appName("lifeexp-test")
        .master("local[2]")
        .config("spark.sql.shuffle.partitions", "2")
        .config("spark.sql.adaptive.enabled", "true")
        .config("spark.driver.memory", "1g")
        .config("spark.executor.memory", "1g")
        .config("spark.ui.enabled", "false")  # Disable UI for tests
        .config("spark.sql.warehouse.dir", "/tmp/spark-warehouse")
        .getOrCreate()
    )

    # Set log level to WARN to reduce test output noise
    spark.sparkContext.setLogLevel("WARN")

    yield spark

    spark.stop()


@pytest.fixture(scope="function")
def spark_test_session(spark_session) -> SparkSession:
    """
    Function-scoped Spark session that clears catalog between tests

    Args:
        spark_session: Session-scoped Spark session

    Returns:
        SparkSession for individual test
    """
    spark_session.catalog.clearCache()

    return spark_session


@pytest.fixture
def make_store(spark_test_session):
    """
    Factory building a DatasetStore from dicts

    Missing row_ids are numbered in list order.

    Usage:
        store = make_store([{"country": "A", "year": 2010, "life_expectancy": 70.0}])
    """
    def _make(records):
        return DatasetStore.from_records(spark_test_session, records)

    return _make


# =======================
# FILE FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_data_dir() -> str:
    """
    Get path to test data fixtures directory

    Returns:
        Path to tests/fixtures directory
    """
    return os.path.join(os.path.dirname(__file__), "fixtures")


@pytest.fixture(scope="session")
def sample_csv(test_data_dir) -> str:
    """Path to the sample life expectancy export"""
    return os.path.join(test_data_dir, "world_life_expectancy_sample.csv")


@pytest.fixture(scope="session")
def project_config_dir() -> Path:
    """Path to the repository config directory"""
    return Path(__file__).parent.parent / "config"

