"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Registration metrics
registration_attempts = Counter(
    'registration_attempts_total',
    'Total event registration attempts',
    ['result']  # registered, waitlisted, full, duplicate, error
)

registration_latency = Histogram(
    'registration_latency_seconds',
    'Registration request latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Policy metrics
policy_violations = Counter(
    'policy_violations_total',
    'Writes or reads rejected by the row-level policy set',
    ['table', 'operation']
)

# Store metrics
store_operations = Counter(
    'store_operations_total',
    'Row-secure store operations',
    ['table', 'operation']  # select, count, insert, update, delete, lock
)

store_errors = Counter(
    'store_errors_total',
    'Store failures by category',
    ['category']  # constraint_violation, store_unavailable
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_registration_attempt(result: str):
    """Record registration attempt. Result: registered, waitlisted, full, duplicate, error"""
    registration_attempts.labels(result=result).inc()


def record_policy_violation(table: str, operation: str):
    policy_violations.labels(table=table, operation=operation).inc()


def record_store_operation(table: str, operation: str):
    store_operations.labels(table=table, operation=operation).inc()


def record_store_error(category: str):
    store_errors.labels(category=category).inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
