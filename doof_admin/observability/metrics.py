"""
Prometheus metrics collection for the doof admin table engine

Counts row mutations, location lookups, validation failures and cleanup
decisions so the admin console's write path can be monitored.
"""
from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST,
)


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# MUTATION METRICS
# =======================

mutations_total = Counter(
    name="admin_mutations_total",
    documentation="Total number of row mutations dispatched",
    labelnames=["resource_type", "kind", "status"],  # status: success, busy, failed, ...
    registry=REGISTRY,
)

mutation_duration_seconds = Histogram(
    name="admin_mutation_duration_seconds",
    documentation="Time spent waiting on the admin API for a mutation",
    labelnames=["resource_type", "kind"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
    registry=REGISTRY,
)

rows_in_flight = Gauge(
    name="admin_rows_in_flight",
    documentation="Rows with a mutation currently in flight",
    labelnames=["resource_type"],
    registry=REGISTRY,
)

# =======================
# DATA QUALITY METRICS
# =======================

validation_failures_total = Counter(
    name="admin_validation_failures_total",
    documentation="Local validation failures that blocked a save",
    labelnames=["resource_type", "field_name"],
    registry=REGISTRY,
)

location_lookups_total = Counter(
    name="admin_location_lookups_total",
    documentation="Zipcode to neighborhood lookups",
    labelnames=["source", "result"],  # source: address, zipcode; result: resolved, failed, skipped
    registry=REGISTRY,
)

cleanup_decisions_total = Counter(
    name="admin_cleanup_decisions_total",
    documentation="Cleanup change decisions",
    labelnames=["entity_type", "decision"],
    registry=REGISTRY,
)

# =======================
# BULK METRICS
# =======================

bulk_save_size = Histogram(
    name="admin_bulk_save_size_rows",
    documentation="Number of rows in each bulk save",
    labelnames=["resource_type"],
    buckets=[1, 2, 5, 10, 25, 50, 100, 250],
    registry=REGISTRY,
)

bulk_saves_total = Counter(
    name="admin_bulk_saves_total",
    documentation="Bulk saves by result",
    labelnames=["resource_type", "result"],  # result: complete, partial
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus exposition format
    """
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    """
    Get content type for Prometheus metrics endpoint

    Returns:
        Content type string
    """
    return CONTENT_TYPE_LATEST


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment by
        **labels: Label values for the metric
    """
    counter.labels(**labels).inc(value)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    """
    Set a gauge metric value

    Args:
        gauge: Prometheus Gauge metric
        value: Value to set
        **labels: Label values for the metric
    """
    gauge.labels(**labels).set(value)


def observe_histogram(histogram: Histogram, value: float, **labels) -> None:
    """
    Observe a value in a histogram metric

    Args:
        histogram: Prometheus Histogram metric
        value: Value to observe
        **labels: Label values for the metric
    """
    histogram.labels(**labels).observe(value)


# =======================
# ENGINE HELPERS
# =======================

def record_mutation(resource_type: str, kind: str, status: str, duration_seconds: float = 0.0) -> None:
    """
    Record the outcome of one dispatched mutation.

    Args:
        resource_type: Resource the row belongs to
        kind: save, delete, approve or reject
        status: Outcome status value
        duration_seconds: Time spent in the API call (0 when no call was made)
    """
    increment_counter(mutations_total, 1, resource_type=resource_type, kind=kind, status=status)
    if duration_seconds > 0:
        observe_histogram(mutation_duration_seconds, duration_seconds, resource_type=resource_type, kind=kind)


def record_validation_failure(resource_type: str, field_name: str | None) -> None:
    """
    Record a local validation failure.

    Args:
        resource_type: Resource the row belongs to
        field_name: Field that failed validation ("-" when not field specific)
    """
    increment_counter(validation_failures_total, 1, resource_type=resource_type, field_name=field_name or "-")


def record_bulk_save(resource_type: str, row_count: int, failed_count: int) -> None:
    """
    Record a bulk save.

    Args:
        resource_type: Resource being bulk edited
        row_count: Rows that were part of the save
        failed_count: Rows that failed
    """
    observe_histogram(bulk_save_size, row_count, resource_type=resource_type)
    result = "complete" if failed_count == 0 else "partial"
    increment_counter(bulk_saves_total, 1, resource_type=resource_type, result=result)
