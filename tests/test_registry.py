"""
Unit tests for ConversationRegistry.

Run with: pytest tests/test_registry.py -v
"""

import asyncio

from chat_relay.application.relay import ConversationRegistry
from chat_relay.domain.value_objects import ConversationId


class TestGetOrCreate:
    async def test_concurrent_callers_share_one_channel(self):
        """N concurrent get_or_create for one id all get the same channel."""
        registry = ConversationRegistry()
        conversation_id = ConversationId.new()

        channels = await asyncio.gather(
            *(registry.get_or_create(conversation_id) for _ in range(50))
        )

        assert all(channel is channels[0] for channel in channels)
        assert len(registry) == 1

    async def test_equal_ids_map_to_same_channel(self):
        """Ids that differ only in case are the same conversation."""
        registry = ConversationRegistry()
        conversation_id = ConversationId.new()

        first = await registry.get_or_create(conversation_id)
        second = await registry.get_or_create(ConversationId(conversation_id.value.upper()))

        assert first is second

    async def test_distinct_conversations_get_distinct_channels(self):
        registry = ConversationRegistry()

        a = await registry.get_or_create(ConversationId.new())
        b = await registry.get_or_create(ConversationId.new())

        assert a is not b
        assert len(registry) == 2

    async def test_get_does_not_create(self):
        registry = ConversationRegistry()

        assert registry.get(ConversationId.new()) is None
        assert len(registry) == 0

    async def test_channels_use_registry_capacity(self):
        registry = ConversationRegistry(capacity=3)
        channel = await registry.get_or_create(ConversationId.new())

        subscription = channel.subscribe()
        assert subscription._capacity == 3
