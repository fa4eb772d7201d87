from prometheus_client import Counter, Histogram

UPLOADS = Counter(
    "neopdf_uploads_total",
    "PDF uploads handled by the upload pipeline",
    ["outcome"],
)

ACTIVITY_EVENTS = Counter(
    "neopdf_activity_events_total",
    "Activity entries appended to the ledger",
    ["type"],
)

REQUEST_LATENCY = Histogram(
    "neopdf_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "route", "status"],
)
