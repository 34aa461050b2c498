"""
Prometheus metrics for the outreach API.

This module provides:
- HTTP request counter (method, path, status)
- Request latency histogram (method, path)
- Patient registration outcome counter (result)
- Template operation counter (operation)
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST


http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    labelnames=["method", "path", "status"]
)

# result: created, duplicate, validation_error, error
patient_registrations_total = Counter(
    "patient_registrations_total",
    "Total patient registration outcomes",
    labelnames=["result"]
)

# operation: created, deleted, rejected
template_operations_total = Counter(
    "template_operations_total",
    "Total message template operations",
    labelnames=["operation"]
)

request_latency_seconds = Histogram(
    "request_latency_seconds",
    "Request latency in seconds",
    labelnames=["method", "path"]
)


# Routes whose last path segment is a patient id
ID_ROUTES = ("/increaseResponseCount", "/getPatient", "/getPatientOutcomes", "/getPatientMessages")


def normalize_path(path: str) -> str:
    path = path.split("?")[0]
    prefix, _, _ = path.rpartition("/")
    if prefix in ID_ROUTES:
        return prefix
    return path


def record_http_request(method: str, path: str, status: int, latency_seconds: float) -> None:
    """
    Record an HTTP request in metrics.

    Patient ids in the path are collapsed so that labels stay low-cardinality
    (e.g. /getPatient/abc123 -> /getPatient).
    """
    normalized_path = normalize_path(path)

    http_requests_total.labels(
        method=method,
        path=normalized_path,
        status=str(status)
    ).inc()

    request_latency_seconds.labels(
        method=method,
        path=normalized_path
    ).observe(latency_seconds)


def record_registration_outcome(result: str) -> None:
    patient_registrations_total.labels(result=result).inc()


def record_template_operation(operation: str) -> None:
    template_operations_total.labels(operation=operation).inc()


def get_metrics() -> bytes:
    """Generate Prometheus exposition format metrics."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
