"""Prometheus metric inventory.

Every metric the service exposes is declared here; other modules import
the one they need and increment it where the event happens.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# --- HTTP (recorded by MetricsMiddleware) ---

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # Argon2 verification dominates a POST /authorize, so the upper
    # buckets matter more here than for a plain JSON API.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# --- Authorization endpoint ---

AUTHORIZE_OUTCOMES = Counter(
    "authorize_outcomes_total",
    "Authorization endpoint results by outcome",
    # rejected | form | redirected | auth_failed | internal_error
    ["outcome"],
)

USERS_REGISTERED = Counter(
    "users_registered_total",
    "Users created through the sign-up form",
)
