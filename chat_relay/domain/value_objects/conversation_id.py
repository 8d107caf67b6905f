"""
ConversationId Value Object - UUID wrapper for conversation identity.
Key of the conversation registry.
"""

from __future__ import annotations
from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ConversationId:
    value: str  # canonical lowercase UUID string

    def __post_init__(self):
        if not self.value:
            raise ValueError("ConversationId cannot be empty")
        try:
            canonical = str(UUID(str(self.value)))
        except ValueError:
            raise ValueError(f"Invalid conversation ID (UUID): {self.value}") from None
        object.__setattr__(self, "value", canonical)

    @classmethod
    def new(cls) -> ConversationId:
        return cls(str(uuid4()))

    def __str__(self) -> str:
        return self.value
