"""
Message Repository Port - Interface for message persistence.
Implementations:
    chat_relay/infrastructure/persistence/gateway_message_repository.py
    chat_relay/infrastructure/cache/cached_message_repository.py
"""

from abc import ABC, abstractmethod

from chat_relay.domain.entities.message import Message
from chat_relay.domain.value_objects.conversation_id import ConversationId


class MessageRepository(ABC):
    @abstractmethod
    async def get_by_conversation(
        self, conversation_id: ConversationId, limit: int = 200
    ) -> list[Message]:
        """Messages in chronological order (oldest first)."""
        ...

    @abstractmethod
    async def save(self, message: Message) -> None: ...
