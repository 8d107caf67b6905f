"""Chat DTOs for API responses."""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel

from chat_relay.domain.entities.message import Message


class MessageDTO(BaseModel):
    """DTO for message data returned to frontend."""

    id: Optional[int] = None
    conversation_id: str
    sender_id: str
    content: str
    message_type: Optional[str] = None
    is_deleted: Optional[bool] = None
    created_at: Optional[str] = None

    @classmethod
    def from_entity(cls, message: Message) -> MessageDTO:
        return cls(
            id=message.id,
            conversation_id=message.conversation_id.value,
            sender_id=message.sender_id.value,
            content=message.content,
            message_type=message.message_type,
            is_deleted=message.is_deleted,
            created_at=message.created_at,
        )
