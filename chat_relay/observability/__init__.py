"""Observability package for the chat relay."""

from chat_relay.observability.metrics import (
    increment_active_sessions,
    decrement_active_sessions,
    set_channel_count,
    increment_messages_broadcast,
    increment_dropped_events,
    increment_persistence_failures,
    observe_request_latency,
    increment_error,
    get_metrics_content,
    MetricsErrorType,
)

__all__ = [
    "increment_active_sessions",
    "decrement_active_sessions",
    "set_channel_count",
    "increment_messages_broadcast",
    "increment_dropped_events",
    "increment_persistence_failures",
    "observe_request_latency",
    "increment_error",
    "get_metrics_content",
    "MetricsErrorType",
]
