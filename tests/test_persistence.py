"""
Unit tests for the persistence adapters.

PrismaPersistenceGateway is exercised against a mocked Prisma client, so no
database or generated client is needed.

Run with: pytest tests/test_persistence.py -v
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from prisma.errors import PrismaError

from chat_relay.domain.entities.message import Message
from chat_relay.domain.exceptions import DataAccessError
from chat_relay.domain.ports import Collections
from chat_relay.infrastructure.persistence import (
    GatewayMessageRepository,
    PrismaPersistenceGateway,
)

from conftest import ALICE, BOB


def _model(**fields):
    model = MagicMock()
    model.model_dump.return_value = dict(fields)
    return model


class TestPrismaPersistenceGateway:
    async def test_query_filters_by_equality(self):
        prisma = MagicMock()
        prisma.conversationmember.find_many = AsyncMock(
            return_value=[_model(id=1, conversation_id="c", user_id="u", role="member")]
        )
        gateway = PrismaPersistenceGateway(prisma)

        rows = await gateway.query(
            Collections.CONVERSATION_MEMBERS, [("conversation_id", "c"), ("user_id", "u")]
        )

        prisma.conversationmember.find_many.assert_awaited_once_with(
            where={"conversation_id": "c", "user_id": "u"}
        )
        assert rows == [{"id": 1, "conversation_id": "c", "user_id": "u", "role": "member"}]

    async def test_datetimes_become_iso_strings(self):
        created = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        prisma = MagicMock()
        prisma.message.create = AsyncMock(
            return_value=_model(id=7, content="hi", created_at=created)
        )
        gateway = PrismaPersistenceGateway(prisma)

        stored = await gateway.insert(Collections.MESSAGES, {"content": "hi"})

        prisma.message.create.assert_awaited_once_with(data={"content": "hi"})
        assert stored == {"id": 7, "content": "hi", "created_at": created.isoformat()}

    async def test_prisma_errors_become_data_access_errors(self):
        prisma = MagicMock()
        prisma.message.find_many = AsyncMock(side_effect=PrismaError("connection refused"))
        gateway = PrismaPersistenceGateway(prisma)

        with pytest.raises(DataAccessError):
            await gateway.query(Collections.MESSAGES, [("conversation_id", "c")])

    async def test_unknown_collection_is_rejected(self):
        gateway = PrismaPersistenceGateway(MagicMock())

        with pytest.raises(DataAccessError):
            await gateway.query("friend_requests", [])

    async def test_update_by_id(self):
        prisma = MagicMock()
        prisma.message.update = AsyncMock(return_value=_model(id=3))
        gateway = PrismaPersistenceGateway(prisma)

        await gateway.update(Collections.MESSAGES, 3, {"is_deleted": True})

        prisma.message.update.assert_awaited_once_with(
            where={"id": 3}, data={"is_deleted": True}
        )

    async def test_update_of_missing_record_fails(self):
        prisma = MagicMock()
        prisma.message.update = AsyncMock(return_value=None)
        gateway = PrismaPersistenceGateway(prisma)

        with pytest.raises(DataAccessError):
            await gateway.update(Collections.MESSAGES, 99, {"is_deleted": True})


class TestGatewayMessageRepository:
    async def test_save_records_store_assigned_fields(self, gateway):
        conversation_id = gateway.add_conversation(ALICE, BOB)
        repo = GatewayMessageRepository(gateway)
        message = Message.create(conversation_id, ALICE, "hello")

        await repo.save(message)

        assert message.id is not None
        assert message.created_at is not None
        row = gateway.tables[Collections.MESSAGES][0]
        assert row["conversation_id"] == conversation_id.value
        assert row["sender_id"] == ALICE.value
        assert row["message_type"] == "text"

    async def test_undecodable_rows_are_skipped(self, gateway):
        conversation_id = gateway.add_conversation(ALICE, BOB)
        repo = GatewayMessageRepository(gateway)
        await repo.save(Message.create(conversation_id, ALICE, "good"))
        gateway.tables[Collections.MESSAGES].append(
            {
                "id": 999,
                "conversation_id": conversation_id.value,
                "sender_id": "not-a-uuid",
                "content": "bad",
                "created_at": "2024-01-01T00:00:00+00:00",
            }
        )
        gateway.tables[Collections.MESSAGES].append(
            {"id": 1000, "conversation_id": conversation_id.value, "sender_id": BOB.value}
        )

        messages = await repo.get_by_conversation(conversation_id)

        assert [m.content for m in messages] == ["good"]

    async def test_only_requested_conversation(self, gateway):
        mine = gateway.add_conversation(ALICE, BOB)
        other = gateway.add_conversation(ALICE, BOB)
        repo = GatewayMessageRepository(gateway)
        await repo.save(Message.create(mine, ALICE, "mine"))
        await repo.save(Message.create(other, ALICE, "other"))

        messages = await repo.get_by_conversation(mine)

        assert [m.content for m in messages] == ["mine"]
