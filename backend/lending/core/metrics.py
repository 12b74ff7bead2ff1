"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at the /metrics endpoint.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Booking lifecycle metrics
booking_operations = Counter(
    "booking_operations_total",
    "Booking lifecycle operations",
    ["operation", "result"],  # create/set_approval, success/invalid/denied/not_found/conflict
)

booking_transition_conflicts = Counter(
    "booking_transition_conflicts_total",
    "Approvals that lost a concurrent compare-and-set on booking status",
)

# Request metrics
request_latency = Histogram(
    "http_request_latency_seconds",
    "HTTP request latency",
    ["method", "status_code"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

# Cache metrics
cache_operations = Counter(
    "cache_operations_total",
    "Booking list cache operations",
    ["operation", "result"],  # get/set/invalidate, hit/miss/ok/error
)


def metrics_endpoint() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def record_booking_operation(operation: str, result: str) -> None:
    booking_operations.labels(operation=operation, result=result).inc()


def record_transition_conflict() -> None:
    booking_transition_conflicts.inc()


def record_request(method: str, status_code: int, seconds: float) -> None:
    request_latency.labels(method=method, status_code=str(status_code)).observe(seconds)


def record_cache_operation(operation: str, result: str) -> None:
    cache_operations.labels(operation=operation, result=result).inc()
