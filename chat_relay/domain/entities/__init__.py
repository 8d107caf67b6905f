"""
ENTITIES

- Message: a persisted chat message row
- ConversationMember: a (conversation, user) membership row
- OutgoingEvent: the immutable value broadcast to every subscriber
"""

from chat_relay.domain.entities.message import Message
from chat_relay.domain.entities.membership import ConversationMember
from chat_relay.domain.entities.outgoing_event import OutgoingEvent

__all__ = [
    "Message",
    "ConversationMember",
    "OutgoingEvent",
]
