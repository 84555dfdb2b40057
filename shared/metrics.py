"""Prometheus metrics for sleep log observability.

Counters and histograms for writes, rejections and API latency.
Exposed via /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, make_asgi_app

# Domain counters
sleep_logs_created_total = Counter(
    "sleep_logs_created_total",
    "Total sleep logs persisted",
)

sleep_log_rejections_total = Counter(
    "sleep_log_rejections_total",
    "Total sleep log submissions rejected, by error kind",
    ["kind"],  # invalid_input, duplicate_resource, not_found, integrity_failure
)

# API counters
api_requests_total = Counter(
    "api_requests_total",
    "Total API requests",
    ["endpoint", "method", "status_code"],
)

# Histograms
stats_window_records = Histogram(
    "stats_window_records",
    "Number of sleep logs aggregated per stats query",
    buckets=(0, 1, 5, 10, 15, 20, 25, 30, 60),
)

api_response_duration_seconds = Histogram(
    "api_response_duration_seconds",
    "Duration of API responses",
    ["endpoint"],
)


def create_metrics_app():
    """Create ASGI app for /metrics endpoint."""
    return make_asgi_app()
