"""
VALUE OBJECTS - Immutable domain types

Each value object:
- Is compared by value
- Is immutable (frozen dataclass)
- Validates itself on creation
"""

from chat_relay.domain.value_objects.conversation_id import ConversationId
from chat_relay.domain.value_objects.user_id import UserId

__all__ = [
    "ConversationId",
    "UserId",
]
