"""
Prometheus metrics collection for the silver pipeline

Counts rows read, written and dropped per entity kind, measure repairs on
sales lines, and load durations and failures.
"""
import os
from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# LOAD METRICS
# =======================

rows_read_total = Counter(
    name="silver_rows_read_total",
    documentation="Raw rows read from the raw store",
    labelnames=["kind"],
    registry=REGISTRY,
)

rows_written_total = Counter(
    name="silver_rows_written_total",
    documentation="Cleaned rows written by full replace",
    labelnames=["kind"],
    registry=REGISTRY,
)

rows_dropped_total = Counter(
    name="silver_rows_dropped_total",
    documentation="Raw rows excluded from the cleaned output",
    labelnames=["kind", "reason"],  # reason: missing_identity, superseded
    registry=REGISTRY,
)

load_duration_seconds = Histogram(
    name="silver_load_duration_seconds",
    documentation="Time spent loading one entity kind in seconds",
    labelnames=["kind"],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
    registry=REGISTRY,
)

loads_total = Counter(
    name="silver_loads_total",
    documentation="Entity kind loads attempted",
    labelnames=["kind", "status"],  # status: success, failed
    registry=REGISTRY,
)

table_rows = Gauge(
    name="silver_table_rows",
    documentation="Rows in the cleaned table after the latest successful load",
    labelnames=["kind"],
    registry=REGISTRY,
)

# =======================
# DATA QUALITY METRICS
# =======================

measures_repaired_total = Counter(
    name="silver_measures_repaired_total",
    documentation="Sales lines whose measure was rewritten by reconciliation",
    labelnames=["field"],  # field: unit_price, sales_amount
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    return CONTENT_TYPE_LATEST


def start_metrics_server(port: Optional[int] = None) -> None:
    """
    Start HTTP server for Prometheus metrics

    Args:
        port: Port to listen on (defaults to env var METRICS_PORT or 8000)
    """
    # Lazy import: only bind a port when the endpoint is requested
    from prometheus_client import start_http_server

    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    counter.labels(**labels).inc(value)


def observe_histogram(histogram: Histogram, value: float, **labels) -> None:
    histogram.labels(**labels).observe(value)


# =======================
# METRICS COLLECTOR CLASS
# =======================

class MetricsCollector:
    """
    Unified interface for recording silver load metrics.
    """

    def record_load(
        self,
        kind: str,
        rows_read: int,
        rows_written: int,
        rows_dropped: dict[str, int] | None = None,
        duration_seconds: float = 0.0,
    ) -> None:
        """
        Record a successful entity kind load.

        Args:
            kind: Entity kind value
            rows_read: Raw rows read
            rows_written: Cleaned rows written
            rows_dropped: Dropped row counts keyed by reason
            duration_seconds: Time taken by the load
        """
        increment_counter(loads_total, 1, kind=kind, status="success")
        increment_counter(rows_read_total, rows_read, kind=kind)
        increment_counter(rows_written_total, rows_written, kind=kind)
        for reason, count in (rows_dropped or {}).items():
            if count > 0:
                increment_counter(rows_dropped_total, count, kind=kind, reason=reason)
        table_rows.labels(kind=kind).set(rows_written)
        if duration_seconds > 0:
            observe_histogram(load_duration_seconds, duration_seconds, kind=kind)

    def record_failure(self, kind: str, duration_seconds: float = 0.0) -> None:
        """Record a failed entity kind load."""
        increment_counter(loads_total, 1, kind=kind, status="failed")
        if duration_seconds > 0:
            observe_histogram(load_duration_seconds, duration_seconds, kind=kind)

    def record_repairs(self, unit_price: int, sales_amount: int) -> None:
        """Record sales line measure repairs."""
        if unit_price > 0:
            increment_counter(measures_repaired_total, unit_price, field="unit_price")
        if sales_amount > 0:
            increment_counter(measures_repaired_total, sales_amount, field="sales_amount")
