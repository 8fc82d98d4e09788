"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

booking_writes = Counter(
    'booking_writes_total',
    'Booking create/update attempts',
    ['operation', 'result']  # result: success, invalid, missing_event, dependency_error, conflict
)

db_connection_attempts = Counter(
    'db_connection_attempts_total',
    'Underlying database connection attempts',
    ['result']  # success, failure
)


def metrics_endpoint() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_write(operation: str, result: str):
    """Record a booking write. Operation: create, update"""
    booking_writes.labels(operation=operation, result=result).inc()


def record_connection_attempt(success: bool):
    db_connection_attempts.labels(result="success" if success else "failure").inc()
