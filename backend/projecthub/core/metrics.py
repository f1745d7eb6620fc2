"""Central Prometheus metrics registry.

All application metrics are defined here to avoid scattered metric definitions
and ensure consistent naming/labeling.
"""

from prometheus_client import Counter, Histogram, Info

# Application info
app_info = Info("projecthub_app", "ProjectHub application info")

# --- HTTP ---
http_requests_total = Counter(
    "projecthub_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
http_request_duration_seconds = Histogram(
    "projecthub_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)

# --- Enum validation ---
enum_validations_total = Counter(
    "projecthub_enum_validations_total",
    "Enum validation outcomes per table",
    ["table", "result"],
)

# --- Cache ---
cache_operations_total = Counter(
    "projecthub_cache_operations_total",
    "Total cache operations",
    ["cache_type", "operation", "status"],
)

# --- Records ---
record_mutations_total = Counter(
    "projecthub_record_mutations_total",
    "Record inserts, updates and deletes",
    ["table", "operation"],
)

# --- Proxy ---
proxy_upstream_requests_total = Counter(
    "projecthub_proxy_upstream_requests_total",
    "Requests forwarded to the backend origin",
    ["method", "status"],
)
proxy_upstream_duration_seconds = Histogram(
    "projecthub_proxy_upstream_duration_seconds",
    "Time spent waiting on the backend origin",
    ["method"],
)
