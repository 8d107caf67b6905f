"""
Persistence Gateway Port - data-access contract over named collections.
Implementation: chat_relay/infrastructure/persistence/prisma_gateway.py

Every method may raise DataAccessError. Callers decide what a failure means:
authorization checks fail closed, broadcast persistence swallows it, read
paths surface it.
"""

from abc import ABC, abstractmethod
from typing import Any


class Collections:
    CONVERSATIONS = "conversations"
    CONVERSATION_MEMBERS = "conversation_members"
    MESSAGES = "messages"


class PersistenceGateway(ABC):
    @abstractmethod
    async def query(
        self, collection: str, filters: list[tuple[str, Any]]
    ) -> list[dict[str, Any]]:
        """Return records whose fields equal every (field, value) pair."""
        ...

    @abstractmethod
    async def insert(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        """Insert a record and return it as stored."""
        ...

    @abstractmethod
    async def update(self, collection: str, id: Any, partial: dict[str, Any]) -> None: ...
