"""
Prometheus metrics for the life expectancy pipeline

Tracks how much each cleaning stage changed the dataset, how much data
quality debt is left after cleaning, and how long the stages take.
"""
import os
from pathlib import Path
from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
    write_to_textfile,
)

# Pipeline metrics live outside the default registry so tests and the
# textfile export only see lifeexp series
REGISTRY = CollectorRegistry()


# =======================
# CLEANING METRICS
# =======================

records_processed_total = Counter(
    name="lifeexp_records_processed_total",
    documentation="Total number of records entering a pipeline stage",
    labelnames=["dataset_id", "stage"],
    registry=REGISTRY,
)

records_removed_total = Counter(
    name="lifeexp_records_removed_total",
    documentation="Total number of records removed by a pipeline stage",
    labelnames=["dataset_id", "stage"],
    registry=REGISTRY,
)

values_imputed_total = Counter(
    name="lifeexp_values_imputed_total",
    documentation="Total number of field values filled in by cleaning",
    labelnames=["dataset_id", "field_name", "stage"],
    registry=REGISTRY,
)

stage_duration_seconds = Histogram(
    name="lifeexp_stage_duration_seconds",
    documentation="Time spent in each pipeline stage in seconds",
    labelnames=["dataset_id", "stage"],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
    registry=REGISTRY,
)

# =======================
# DATA QUALITY METRICS
# =======================

unresolved_values = Gauge(
    name="lifeexp_unresolved_values",
    documentation="Records still missing a field after all imputation passes",
    labelnames=["dataset_id", "field_name"],
    registry=REGISTRY,
)

ambiguous_status_countries = Gauge(
    name="lifeexp_ambiguous_status_countries",
    documentation="Countries reporting both Developing and Developed statuses",
    labelnames=["dataset_id"],
    registry=REGISTRY,
)

validation_failures_total = Counter(
    name="lifeexp_validation_failures_total",
    documentation="Total number of validation rule failures",
    labelnames=["dataset_id", "rule_name", "severity"],
    registry=REGISTRY,
)

# =======================
# ANALYTICS METRICS
# =======================

analytics_rows = Gauge(
    name="lifeexp_analytics_rows",
    documentation="Number of rows in each analytics result table",
    labelnames=["dataset_id", "table"],
    registry=REGISTRY,
)

# =======================
# ERROR METRICS
# =======================

errors_total = Counter(
    name="lifeexp_errors_total",
    documentation="Total number of pipeline errors",
    labelnames=["dataset_id", "error_type", "component"],
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def start_metrics_server(port: Optional[int] = None) -> None:
    """
    Start HTTP server for Prometheus metrics

    Args:
        port: Port to listen on (defaults to env var METRICS_PORT or 8000)
    """
    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """Increment a counter metric"""
    counter.labels(**labels).inc(value)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    """Set a gauge metric value"""
    gauge.labels(**labels).set(value)


def track_duration(histogram: Histogram, **labels):
    """
    Time a block into histogram

    Usage:
        with track_duration(stage_duration_seconds, dataset_id="wle", stage="deduplicate"):
            store, stats = deduplicator.run(store)
    """
    return histogram.labels(**labels).time()


def write_metrics_file(path: str | Path) -> Path:
    """
    Write the current metric values in the Prometheus text format

    Batch runs end before a scraper can reach the HTTP endpoint, so the
    CLI can leave a snapshot for a node_exporter textfile collector.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    write_to_textfile(str(path), REGISTRY)
    return path


# =======================
# PIPELINE HELPERS
# =======================

def record_stage(
    dataset_id: str,
    stage: str,
    input_records: int,
    removed_records: int = 0,
    imputed: dict[str, int] | None = None,
) -> None:
    """
    Record what one cleaning stage did.

    Args:
        dataset_id: Dataset identifier
        stage: Stage name (deduplicate, impute_status, interpolate_life_expectancy)
        input_records: Records the stage received
        removed_records: Records the stage deleted
        imputed: Field name -> number of values filled in
    """
    increment_counter(records_processed_total, input_records, dataset_id=dataset_id, stage=stage)
    if removed_records > 0:
        increment_counter(records_removed_total, removed_records, dataset_id=dataset_id, stage=stage)
    for field_name, count in (imputed or {}).items():
        if count > 0:
            increment_counter(
                values_imputed_total, count, dataset_id=dataset_id, field_name=field_name, stage=stage
            )


def record_data_quality(
    dataset_id: str,
    unresolved_status: int,
    unresolved_life_expectancy: int,
    ambiguous_countries: int,
) -> None:
    """Publish post-cleaning data quality gauges."""
    set_gauge(unresolved_values, unresolved_status, dataset_id=dataset_id, field_name="status")
    set_gauge(
        unresolved_values,
        unresolved_life_expectancy,
        dataset_id=dataset_id,
        field_name="life_expectancy",
    )
    set_gauge(ambiguous_status_countries, ambiguous_countries, dataset_id=dataset_id)


def record_validation_failure(dataset_id: str, rule_name: str, severity: str, count: int = 1) -> None:
    """Record validation rule failures."""
    increment_counter(
        validation_failures_total, count, dataset_id=dataset_id, rule_name=rule_name, severity=severity
    )


def record_error(dataset_id: str, error_type: str, component: str) -> None:
    """Record a pipeline error."""
    increment_counter(errors_total, 1, dataset_id=dataset_id, error_type=error_type, component=component)
