"""
Prometheus Metrics for the chat relay.

DATA FLOW:
    This file                  presentation/api/metrics.py
    ─────────                  ───────────────────────────
    Define metrics ──────────► /metrics endpoint ──────────► Prometheus scraper

METRIC TYPES:
    - Gauge: Value goes up/down (open sessions, registry size)
    - Counter: Value only goes up (messages broadcast, dropped events)
    - Histogram: Distribution (HTTP latency)
"""

from prometheus_client import (
    Gauge,
    Histogram,
    Counter,
    generate_latest,
    CONTENT_TYPE_LATEST,
)


# =============================================================================
# METRICS DEFINITIONS
# =============================================================================
ACTIVE_SESSIONS = Gauge(
    "chat_relay_active_sessions", "Number of relay sessions currently active"
)

CHANNELS = Gauge(
    "chat_relay_channels",
    "Number of conversation channels held by the registry (never evicted)",
)

REQUEST_LATENCY = Histogram(
    "http_server_request_duration_seconds",
    "Http request latency in seconds",
    ["method", "route", "http_status_code"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5],
)

MESSAGES_BROADCAST_TOTAL = Counter(
    "chat_relay_messages_broadcast_total",
    "Total number of messages published to conversation channels",
)

DROPPED_EVENTS_TOTAL = Counter(
    "chat_relay_dropped_events_total",
    "Events discarded from lagging subscribers' buffers (drop-oldest)",
)

PERSISTENCE_FAILURES_TOTAL = Counter(
    "chat_relay_persistence_failures_total",
    "Broadcast messages that could not be persisted",
)

ERRORS_TOTAL = Counter(
    "chat_relay_errors_total",
    "Total number of errors by type",
    ["error_type"],
)


# =============================================================================
# LABEL CONSTANTS
# =============================================================================
class MetricsErrorType:
    """Error type labels for chat_relay_errors_total metric."""

    MEMBERSHIP_LOOKUP = "membership_lookup"
    DATA_ACCESS = "data_access"
    SESSION = "session"
    CACHE = "cache"
    UNHANDLED = "unhandled"


# =============================================================================
# RECORDING FUNCTIONS
# =============================================================================
def increment_active_sessions():
    """Call when a session becomes ACTIVE. Integration point: relay/session.py run()"""
    ACTIVE_SESSIONS.inc()


def decrement_active_sessions():
    """Call when a session reaches CLOSED (in finally block). Integration point: relay/session.py run()"""
    ACTIVE_SESSIONS.dec()


def set_channel_count(count: int):
    """Integration point: relay/registry.py get_or_create()"""
    CHANNELS.set(count)


def increment_messages_broadcast():
    MESSAGES_BROADCAST_TOTAL.inc()


def increment_dropped_events(count: int = 1):
    """Integration point: relay/fanout.py publish() when a subscriber buffer overflows"""
    DROPPED_EVENTS_TOTAL.inc(count)


def increment_persistence_failures():
    PERSISTENCE_FAILURES_TOTAL.inc()


def observe_request_latency(method: str, route: str, status_code: int, duration: float):
    """Call to record request latency. Integration point: fastapi_app.py RequestLatencyMiddleware"""
    REQUEST_LATENCY.labels(
        method=method, route=route, http_status_code=str(status_code)
    ).observe(duration)


def increment_error(error_type: str):
    """
    Call to record an error occurrence.

    Integration points:
        - application/membership/authority.py: membership_lookup
        - application/relay/session.py: session
        - infrastructure/cache/cached_message_repository.py: cache
        - fastapi_app.py: data_access, unhandled

    Args:
        error_type: One of the MetricsErrorType labels
    """
    ERRORS_TOTAL.labels(error_type=error_type).inc()


# =============================================================================
# HELPER FOR /metrics ENDPOINT
# =============================================================================
def get_metrics_content():
    """
    Generate Prometheus metrics output.

    Called by: presentation/api/metrics.py

    Returns:
        Tuple of (content_bytes, content_type_string)
    """
    return generate_latest(), CONTENT_TYPE_LATEST
