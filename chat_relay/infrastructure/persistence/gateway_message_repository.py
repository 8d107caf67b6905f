"""
Gateway Message Repository Implementation.

Implements the MessageRepository port on top of the PersistenceGateway
"messages" collection.

Row shape (messages table):
    id              int (auto-increment, assigned by the store)
    conversation_id uuid string
    sender_id       uuid string
    content         text
    message_type    "text"
    is_deleted      bool
    created_at      timestamp (assigned by the store)

The client never sends "id" or "created_at"; both come back from the store.
"""

import logging
from typing import Any

from chat_relay.domain.entities.message import Message
from chat_relay.domain.ports import Collections, PersistenceGateway
from chat_relay.domain.ports.repositories import MessageRepository
from chat_relay.domain.value_objects import ConversationId, UserId

logger = logging.getLogger(__name__)


class GatewayMessageRepository(MessageRepository):
    def __init__(self, gateway: PersistenceGateway):
        self._gateway = gateway

    def _to_entity(self, row: dict[str, Any]) -> Message:
        return Message(
            id=row.get("id"),
            conversation_id=ConversationId(row["conversation_id"]),
            sender_id=UserId(row["sender_id"]),
            content=row["content"],
            message_type=row.get("message_type") or "text",
            is_deleted=row.get("is_deleted"),
            created_at=row.get("created_at"),
        )

    async def get_by_conversation(
        self, conversation_id: ConversationId, limit: int = 200
    ) -> list[Message]:
        """
        Most recent `limit` messages, oldest first.

        Rows that do not decode into a Message are skipped.
        """
        rows = await self._gateway.query(
            Collections.MESSAGES, [("conversation_id", conversation_id.value)]
        )
        messages = []
        for row in rows:
            try:
                messages.append(self._to_entity(row))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"[messages] Skipping undecodable row {row.get('id')}: {e}")

        messages.sort(key=lambda m: m.sort_key)
        return messages[-limit:] if limit > 0 else []

    async def save(self, message: Message) -> None:
        stored = await self._gateway.insert(
            Collections.MESSAGES,
            {
                "conversation_id": message.conversation_id.value,
                "sender_id": message.sender_id.value,
                "content": message.content,
                "message_type": message.message_type,
            },
        )
        message.id = stored.get("id", message.id)
        message.created_at = stored.get("created_at", message.created_at)
