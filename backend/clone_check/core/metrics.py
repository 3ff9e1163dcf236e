"""Prometheus metrics instrumentation."""

from __future__ import annotations

from fastapi import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    generate_latest,
)

REGISTRY = CollectorRegistry()

TASKS_TOTAL = Counter(
    "clonecheck_tasks_total",
    "Scheduled tasks executed",
    labelnames=("kind", "outcome"),
    registry=REGISTRY,
)

QUEUE_DEPTH = Gauge(
    "clonecheck_queue_depth",
    "Tasks waiting in the scheduler queue",
    registry=REGISTRY,
)

INDEXED_SEQUENCES = Gauge(
    "clonecheck_indexed_sequences",
    "Token sequences stored in the suffix index",
    registry=REGISTRY,
)

FILES_SKIPPED = Counter(
    "clonecheck_files_skipped_total",
    "Source files skipped because they failed to parse",
    labelnames=("language",),
    registry=REGISTRY,
)

CLONE_CLASSES = Counter(
    "clonecheck_clone_classes_total",
    "Clone classes written to reports",
    registry=REGISTRY,
)


def metrics_response() -> Response:
    """Return Prometheus metrics as an HTTP response."""
    payload = generate_latest(REGISTRY)
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "REGISTRY",
    "TASKS_TOTAL",
    "QUEUE_DEPTH",
    "INDEXED_SEQUENCES",
    "FILES_SKIPPED",
    "CLONE_CLASSES",
    "metrics_response",
]
