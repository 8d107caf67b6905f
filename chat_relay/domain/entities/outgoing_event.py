"""
OutgoingEvent - what the relay broadcasts to everyone in a conversation.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
import json

from chat_relay.domain.value_objects.user_id import UserId


@dataclass(frozen=True)
class OutgoingEvent:
    sender_id: UserId
    content: str
    created_at: str  # RFC 3339, assigned by the server at publish time

    @classmethod
    def stamp(cls, sender_id: UserId, content: str) -> OutgoingEvent:
        """Build an event with a server-generated UTC timestamp."""
        return cls(
            sender_id=sender_id,
            content=content,
            created_at=datetime.now(timezone.utc).isoformat(),
        )

    def to_dict(self) -> dict:
        return {
            "sender_id": self.sender_id.value,
            "content": self.content,
            "created_at": self.created_at,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)
