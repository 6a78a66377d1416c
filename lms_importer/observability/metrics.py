"""
Prometheus metrics collection for lms-importer

Counts parsed rows, validation failures and commit outcomes per entity,
and times the commit phase.
"""
import os
from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# PARSE / VALIDATION METRICS
# =======================

rows_parsed_total = Counter(
    name="importer_rows_parsed_total",
    documentation="Total number of data rows read from uploaded files",
    labelnames=["entity"],
    registry=REGISTRY,
)

validation_failures_total = Counter(
    name="importer_validation_failures_total",
    documentation="Total number of per-row validation failures",
    labelnames=["entity", "rule_type", "field_name"],
    registry=REGISTRY,
)

# =======================
# COMMIT METRICS
# =======================

items_committed_total = Counter(
    name="importer_items_committed_total",
    documentation="Items processed during commit",
    labelnames=["entity", "status"],  # status: succeeded, failed, skipped_duplicate
    registry=REGISTRY,
)

duplicate_check_failures_total = Counter(
    name="importer_duplicate_check_failures_total",
    documentation="Duplicate checks that failed open because the store was unavailable",
    labelnames=["entity"],
    registry=REGISTRY,
)

commit_duration_seconds = Histogram(
    name="importer_commit_duration_seconds",
    documentation="Time spent committing one import batch",
    labelnames=["entity"],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
    registry=REGISTRY,
)


# =======================
# EXPOSITION
# =======================

def generate_metrics() -> bytes:
    """Current state of REGISTRY in the Prometheus text format."""
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    return CONTENT_TYPE_LATEST


def start_metrics_server(port: Optional[int] = None) -> None:
    """
    Serve REGISTRY on /metrics from a background thread.

    Args:
        port: Listen port; METRICS_PORT (or 8000) when omitted
    """
    from prometheus_client import start_http_server

    start_http_server(port or int(os.getenv("METRICS_PORT", "8000")), registry=REGISTRY)


# =======================
# RECORDING
# =======================

def track_duration(histogram: Histogram, **labels):
    """
    Time a block into one labelled series of ``histogram``.

    Usage:
        with track_duration(commit_duration_seconds, entity="question"):
            ...
    """
    return histogram.labels(**labels).time()


def record_validation_failure(entity: str, rule_type: str, field_name: str) -> None:
    validation_failures_total.labels(entity=entity, rule_type=rule_type, field_name=field_name).inc()


def record_commit_tally(entity: str, succeeded: int, failed: int, skipped_duplicates: int) -> None:
    """
    Add the outcome of one commit pass to ``items_committed_total``.

    Zero counts are not recorded, so a status label only appears once it
    has happened at least once.
    """
    outcomes = {
        "succeeded": succeeded,
        "failed": failed,
        "skipped_duplicate": skipped_duplicates,
    }
    for status, count in outcomes.items():
        if count:
            items_committed_total.labels(entity=entity, status=status).inc(count)
