"""Conversation queries."""

from chat_relay.application.queries.conversations.list_conversations import (
    ListConversationsQuery,
    ListConversationsHandler,
)

__all__ = [
    "ListConversationsQuery",
    "ListConversationsHandler",
]
