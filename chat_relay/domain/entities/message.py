"""
Message Entity - A single persisted message in a conversation.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from chat_relay.domain.value_objects.conversation_id import ConversationId
from chat_relay.domain.value_objects.user_id import UserId


@dataclass
class Message:
    conversation_id: ConversationId
    sender_id: UserId
    content: str
    message_type: str = "text"
    id: Optional[int] = None  # assigned by the store (auto-increment)
    is_deleted: Optional[bool] = None
    created_at: Optional[str] = None  # assigned by the store

    def __post_init__(self):
        if not self.message_type:
            raise ValueError("Message type cannot be empty")

    @classmethod
    def create(
        cls, conversation_id: ConversationId, sender_id: UserId, content: str
    ) -> Message:
        """Factory for a new text message; id and created_at come from the store."""
        return cls(
            conversation_id=conversation_id,
            sender_id=sender_id,
            content=content,
        )

    @property
    def sort_key(self) -> str:
        return self.created_at or ""
