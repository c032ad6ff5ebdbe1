"""Prometheus metric inventory.

Every metric the service exposes is defined here; the modules that own
the behavior import and increment them.  Counters only go up, so tests
assert on deltas rather than absolute values.

HTTP metrics are labelled by the ROUTE TEMPLATE
(``/v1/identities/{owner}/credentials``), never the concrete path.
Paths here embed addresses and 32-byte hashes; labelling by raw path
would create one time series per identity and blow up Prometheus.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Registry metrics (incremented by the registry service)
# ---------------------------------------------------------------------------

TYPES_REGISTERED = Counter(
    "registry_types_registered_total",
    "Credential types successfully registered",
)

CREDENTIALS_ASSIGNED = Counter(
    "registry_credentials_assigned_total",
    "Credential records successfully appended",
)

REGISTRY_REJECTIONS = Counter(
    "registry_rejections_total",
    "Registry operations rejected by validation",
    ["reason"],  # already_exists|invalid_recipient|unknown_type|invalid_name
)

EVENTS_PUBLISHED = Counter(
    "registry_events_published_total",
    "Notifications published after a committed write",
    ["event"],  # TypeRegistered|CredentialAssigned
)

QUEUE_DEPTH = Gauge(
    "task_queue_depth",
    "Number of tasks waiting in a queue",
    ["queue_name"],
)
