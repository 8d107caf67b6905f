"""
ConversationMember Entity - grants a user access to a conversation.
"""

from dataclasses import dataclass

from chat_relay.domain.value_objects.conversation_id import ConversationId
from chat_relay.domain.value_objects.user_id import UserId


@dataclass(frozen=True)
class ConversationMember:
    conversation_id: ConversationId
    user_id: UserId
    role: str = "member"

    def to_record(self) -> dict:
        return {
            "conversation_id": self.conversation_id.value,
            "user_id": self.user_id.value,
            "role": self.role,
        }
