"""
Name: Prometheus Metrics

Responsibilities:
  - Define and expose Prometheus metrics
  - Record request latency/count, pipeline stage timings,
    collaborator failures and retries

Collaborators:
  - middleware.py: Records request metrics
  - application.pipeline: Records stage timings
  - application.guard: Records retries and failures

Constraints:
  - Low cardinality labels only (endpoint template, method, status bucket)

Notes:
  - Metrics live in a private CollectorRegistry so tests can import
    the module repeatedly without duplicate-registration errors
"""

import re

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

_registry = CollectorRegistry()

_requests_total = Counter(
    "ragline_requests_total",
    "Total HTTP requests",
    ["endpoint", "method", "status"],
    registry=_registry,
)

# Buckets: 10ms .. 10s
_request_latency = Histogram(
    "ragline_request_latency_seconds",
    "HTTP request latency in seconds",
    ["endpoint", "method"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=_registry,
)

_stage_latency = Histogram(
    "ragline_stage_latency_seconds",
    "Pipeline stage latency in seconds",
    ["stage"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
    registry=_registry,
)

_collaborator_retries = Counter(
    "ragline_collaborator_retries_total",
    "Collaborator calls retried after a transient failure",
    ["collaborator"],
    registry=_registry,
)

_collaborator_failures = Counter(
    "ragline_collaborator_failures_total",
    "Collaborator calls that failed after the allowed retry",
    ["collaborator", "kind"],
    registry=_registry,
)

_DOCUMENT_PATH = re.compile(r"^(/api/documents)/[^/]+$")


def record_request_metrics(
    endpoint: str,
    method: str,
    status_code: int,
    latency_seconds: float,
) -> None:
    """
    R: Record HTTP request metrics.

    Args:
        endpoint: Request path (e.g., "/api/query")
        method: HTTP method (e.g., "POST")
        status_code: Response status code
        latency_seconds: Request duration in seconds
    """
    normalized = _normalize_endpoint(endpoint)
    _requests_total.labels(
        endpoint=normalized,
        method=method,
        status=_status_bucket(status_code),
    ).inc()
    _request_latency.labels(endpoint=normalized, method=method).observe(
        latency_seconds
    )


def record_stage_metrics(**stage_seconds: float) -> None:
    """R: Record pipeline stage durations, e.g. record_stage_metrics(embed=0.04)."""
    for stage, seconds in stage_seconds.items():
        _stage_latency.labels(stage=stage).observe(seconds)


def record_collaborator_retry(collaborator: str) -> None:
    _collaborator_retries.labels(collaborator=collaborator).inc()


def record_collaborator_failure(collaborator: str, kind: str) -> None:
    _collaborator_failures.labels(collaborator=collaborator, kind=kind).inc()


def _normalize_endpoint(path: str) -> str:
    """R: /api/documents/abc -> /api/documents/{id}"""
    return _DOCUMENT_PATH.sub(r"\1/{id}", path)


def _status_bucket(code: int) -> str:
    """R: Bucket status code (2xx, 4xx, 5xx)."""
    if 200 <= code < 300:
        return "2xx"
    elif 400 <= code < 500:
        return "4xx"
    elif 500 <= code < 600:
        return "5xx"
    return "other"


def get_metrics_response() -> tuple[bytes, str]:
    """
    R: Generate Prometheus metrics response.

    Returns:
        Tuple of (body_bytes, content_type)
    """
    return generate_latest(_registry), CONTENT_TYPE_LATEST
