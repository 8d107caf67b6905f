"""
Prisma Persistence Gateway Implementation.

Implements the PersistenceGateway port over the Prisma client (PostgreSQL).
Collection names are the table names from prisma/schema.prisma; each maps to
a Prisma model accessor on the client:

    conversations        → prisma.conversation
    conversation_members → prisma.conversationmember
    messages             → prisma.message

Records cross the port as plain dicts; datetimes are rendered as ISO 8601
strings. Every Prisma error is re-raised as DataAccessError.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

from prisma.errors import PrismaError

from chat_relay.domain.exceptions import DataAccessError
from chat_relay.domain.ports import Collections, PersistenceGateway

if TYPE_CHECKING:
    from prisma import Prisma

logger = logging.getLogger(__name__)

MODEL_ACCESSORS = {
    Collections.CONVERSATIONS: "conversation",
    Collections.CONVERSATION_MEMBERS: "conversationmember",
    Collections.MESSAGES: "message",
}

# Relation fields are never loaded; keep them out of the records
RELATION_FIELDS = {"conversation", "members", "messages"}


class PrismaPersistenceGateway(PersistenceGateway):
    """
    Prisma implementation of PersistenceGateway.

    The client is injected (connected) by the DI container; connect() is the
    factory used there.
    """

    _prisma: Prisma

    def __init__(self, prisma: Prisma):
        self._prisma = prisma

    @classmethod
    async def connect(cls) -> PrismaPersistenceGateway:
        """Create and connect a Prisma client (reads DATABASE_URL)."""
        from prisma import Prisma

        prisma = Prisma()
        await prisma.connect()
        logger.info("[Prisma] Connected")
        return cls(prisma)

    async def disconnect(self) -> None:
        if self._prisma.is_connected():
            await self._prisma.disconnect()
            logger.info("[Prisma] Disconnected")

    def _model(self, collection: str):
        accessor = MODEL_ACCESSORS.get(collection)
        if accessor is None:
            raise DataAccessError(f"Unknown collection: {collection}")
        return getattr(self._prisma, accessor)

    @staticmethod
    def _to_record(model: Any) -> dict[str, Any]:
        record = model.model_dump(exclude=RELATION_FIELDS)
        for key, value in record.items():
            if isinstance(value, datetime):
                record[key] = value.isoformat()
        return record

    async def query(
        self, collection: str, filters: list[tuple[str, Any]]
    ) -> list[dict[str, Any]]:
        model = self._model(collection)
        try:
            rows = await model.find_many(where=dict(filters))
        except PrismaError as e:
            logger.error(f"[Prisma] query {collection} {filters} failed: {e}")
            raise DataAccessError(str(e)) from e
        return [self._to_record(row) for row in rows]

    async def insert(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        model = self._model(collection)
        try:
            created = await model.create(data=record)
        except PrismaError as e:
            logger.error(f"[Prisma] insert into {collection} failed: {e}")
            raise DataAccessError(str(e)) from e
        return self._to_record(created)

    async def update(self, collection: str, id: Any, partial: dict[str, Any]) -> None:
        model = self._model(collection)
        try:
            updated = await model.update(where={"id": id}, data=partial)
        except PrismaError as e:
            logger.error(f"[Prisma] update {collection} id={id} failed: {e}")
            raise DataAccessError(str(e)) from e
        if updated is None:
            raise DataAccessError(f"No {collection} record with id {id}")
