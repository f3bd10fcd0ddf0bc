"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking creation attempts',
    ['status', 'channel']  # created, rejected / account, guest
)

pnr_collisions = Counter(
    'booking_pnr_collisions_total',
    'PNR generation retries caused by a uniqueness conflict'
)

# Payment metrics
payment_attempts = Counter(
    'payment_attempts_total',
    'Total payment attempts',
    ['method', 'status']  # card/paypal/stripe, completed/failed/conflict
)

payment_latency = Histogram(
    'payment_latency_seconds',
    'Payment provider round-trip latency',
    ['method'],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

refunds = Counter(
    'refunds_total',
    'Completed refunds'
)

# Side effects
tickets_generated = Counter(
    'tickets_generated_total',
    'Ticket PDF generation outcomes',
    ['status']  # success, error
)

emails_sent = Counter(
    'emails_sent_total',
    'Transactional email outcomes',
    ['template', 'status']  # sent, skipped, error
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


# Convenience functions for instrumentation
def record_booking_attempt(status: str, guest: bool = False):
    """Record booking attempt. Status: created, rejected"""
    booking_attempts.labels(status=status, channel="guest" if guest else "account").inc()


def record_payment_attempt(method: str, status: str):
    """Record payment attempt. Status: completed, failed, conflict"""
    payment_attempts.labels(method=method, status=status).inc()


def record_ticket(success: bool):
    tickets_generated.labels(status="success" if success else "error").inc()


def record_email(template: str, status: str):
    emails_sent.labels(template=template, status=status).inc()
