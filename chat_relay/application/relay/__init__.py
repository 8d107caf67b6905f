"""Relay core: conversation registry, fan-out channels and connection sessions."""

from chat_relay.application.relay.fanout import (
    FanoutChannel,
    Subscription,
    SubscriptionClosed,
)
from chat_relay.application.relay.frames import (
    RawFrame,
    StructuredFrame,
    message_content,
    parse_inbound_frame,
)
from chat_relay.application.relay.registry import ConversationRegistry
from chat_relay.application.relay.session import ConnectionSession, SessionState
from chat_relay.application.relay.service import RelayService

__all__ = [
    "FanoutChannel",
    "Subscription",
    "SubscriptionClosed",
    "RawFrame",
    "StructuredFrame",
    "message_content",
    "parse_inbound_frame",
    "ConversationRegistry",
    "ConnectionSession",
    "SessionState",
    "RelayService",
]
