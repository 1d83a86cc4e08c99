"""
Prometheus metrics for the order service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Gauge, Histogram

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# Order metrics
orders_created_total = Counter(
    "orders_created_total",
    "Total orders created",
    ["license_type"],
)

orders_fulfilled_total = Counter(
    "orders_fulfilled_total",
    "Total orders moved to COMPLETED",
    ["license_type", "trigger"],
)

orders_deleted_total = Counter(
    "orders_deleted_total",
    "Total orders deleted by an administrator",
)

payment_reports_total = Counter(
    "payment_reports_total",
    "Total payment webhook calls by outcome",
    ["outcome"],
)

license_notifications_total = Counter(
    "license_notifications_total",
    "Total license key deliveries by result",
    ["result"],
)

fulfillment_duration_seconds = Histogram(
    "fulfillment_duration_seconds",
    "Time spent fulfilling an order, including notification",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# Store health
order_store_degraded = Gauge(
    "order_store_degraded",
    "1 when the order store could not be loaded",
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "endpoint"],
)
