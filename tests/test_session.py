"""
Unit tests for ConnectionSession and RelayService.

The sessions run against a ScriptedStream and the in-memory gateway.

Run with: pytest tests/test_session.py -v
"""

import asyncio
import json

import pytest

from chat_relay.application.membership import MembershipAuthority
from chat_relay.application.relay import (
    ConnectionSession,
    ConversationRegistry,
    RelayService,
    SessionState,
)
from chat_relay.domain.exceptions import UnauthorizedError
from chat_relay.domain.ports import Collections
from chat_relay.infrastructure.persistence import GatewayMessageRepository

from conftest import ALICE, BOB, CAROL, ScriptedStream, wait_until


@pytest.fixture()
def registry():
    return ConversationRegistry(capacity=16)


@pytest.fixture()
def relay(gateway, registry):
    return RelayService(
        registry=registry,
        membership=MembershipAuthority(gateway),
        message_repository=GatewayMessageRepository(gateway),
    )


async def _observe(registry, conversation_id):
    """A bystander subscription on the conversation channel."""
    channel = await registry.get_or_create(conversation_id)
    return channel.subscribe()


def _contents(subscription):
    return [event.content for event in subscription._buffer]


class TestAuthorization:
    async def test_non_member_never_subscribes(self, gateway, registry, relay):
        conversation_id = gateway.add_conversation(ALICE, BOB)
        stream = ScriptedStream()

        with pytest.raises(UnauthorizedError):
            await relay.connect(CAROL, conversation_id, stream)

        assert registry.get(conversation_id) is None
        assert not stream.accepted

    async def test_rejected_session_is_closed(self, gateway, registry):
        conversation_id = gateway.add_conversation(ALICE, BOB)
        session = ConnectionSession(
            CAROL,
            conversation_id,
            ScriptedStream(),
            registry,
            MembershipAuthority(gateway),
            GatewayMessageRepository(gateway),
        )

        with pytest.raises(UnauthorizedError):
            await session.authorize()

        assert session.state is SessionState.CLOSED
        with pytest.raises(RuntimeError):
            await session.run()

    async def test_member_is_authorized(self, gateway, relay):
        conversation_id = gateway.add_conversation(ALICE, BOB)

        session = await relay.connect(ALICE, conversation_id, ScriptedStream())

        assert session.state is SessionState.AUTHORIZED


class TestRelay:
    async def test_inbound_frames_become_events(self, gateway, registry, relay):
        conversation_id = gateway.add_conversation(ALICE, BOB)
        observer = await _observe(registry, conversation_id)
        stream = ScriptedStream()
        session = await relay.connect(ALICE, conversation_id, stream)

        for text in ('{"content": "hello"}', "hello", '{"content": "   "}', ""):
            stream.feed(text)
        stream.feed_binary(b"\x00\x01")
        stream.hang_up()
        await asyncio.wait_for(session.run(), timeout=2)

        assert _contents(observer) == ["hello", "hello"]
        assert all(event.sender_id == ALICE for event in observer._buffer)
        stored = gateway.tables[Collections.MESSAGES]
        assert [row["content"] for row in stored] == ["hello", "hello"]
        assert all(row["sender_id"] == ALICE.value for row in stored)

    async def test_json_without_object_content_is_ignored(self, gateway, registry, relay):
        conversation_id = gateway.add_conversation(ALICE, BOB)
        observer = await _observe(registry, conversation_id)
        stream = ScriptedStream()
        session = await relay.connect(ALICE, conversation_id, stream)

        for text in ('"hi"', "42", "[1, 2]", "null", "true"):
            stream.feed(text)
        stream.hang_up()
        await asyncio.wait_for(session.run(), timeout=2)

        assert _contents(observer) == []
        assert gateway.tables[Collections.MESSAGES] == []

    async def test_sender_receives_own_message(self, gateway, relay):
        conversation_id = gateway.add_conversation(ALICE, BOB)
        stream = ScriptedStream()
        session = await relay.connect(ALICE, conversation_id, stream)
        task = asyncio.create_task(session.run())

        stream.feed('{"content": "echo?"}')
        await wait_until(lambda: stream.sent)
        stream.hang_up()
        await asyncio.wait_for(task, timeout=2)

        event = json.loads(stream.sent[0])
        assert event["content"] == "echo?"
        assert event["sender_id"] == ALICE.value
        assert event["created_at"]

    async def test_two_members_see_each_other(self, gateway, relay):
        conversation_id = gateway.add_conversation(ALICE, BOB)
        alice_stream, bob_stream = ScriptedStream(), ScriptedStream()
        alice = await relay.connect(ALICE, conversation_id, alice_stream)
        bob = await relay.connect(BOB, conversation_id, bob_stream)
        tasks = [asyncio.create_task(alice.run()), asyncio.create_task(bob.run())]
        await wait_until(lambda: alice_stream.accepted and bob_stream.accepted)

        alice_stream.feed("hi bob")
        await wait_until(lambda: len(bob_stream.sent) == 1)
        bob_stream.feed("hi alice")
        await wait_until(lambda: len(alice_stream.sent) == 2)

        assert [json.loads(t)["content"] for t in alice_stream.sent] == ["hi bob", "hi alice"]
        assert json.loads(bob_stream.sent[0])["sender_id"] == ALICE.value

        alice_stream.hang_up()
        bob_stream.hang_up()
        await asyncio.wait_for(asyncio.gather(*tasks), timeout=2)

    async def test_persistence_failure_still_broadcasts(self, gateway, registry, relay):
        conversation_id = gateway.add_conversation(ALICE, BOB)
        gateway.failing.add(Collections.MESSAGES)
        observer = await _observe(registry, conversation_id)
        stream = ScriptedStream()
        session = await relay.connect(ALICE, conversation_id, stream)

        stream.feed("not saved")
        stream.feed("still relayed")
        stream.hang_up()
        await asyncio.wait_for(session.run(), timeout=2)

        assert _contents(observer) == ["not saved", "still relayed"]
        assert gateway.tables[Collections.MESSAGES] == []


class TestTermination:
    async def test_inbound_close_ends_session(self, gateway, registry, relay):
        conversation_id = gateway.add_conversation(ALICE, BOB)
        stream = ScriptedStream()
        session = await relay.connect(ALICE, conversation_id, stream)
        task = asyncio.create_task(session.run())
        await wait_until(lambda: session.state is SessionState.ACTIVE)

        stream.hang_up()
        await asyncio.wait_for(task, timeout=1)

        assert session.state is SessionState.CLOSED
        assert session.subscription.closed
        assert registry.get(conversation_id).subscriber_count == 0
        assert stream.closed_with == 1000

    async def test_write_failure_ends_session(self, gateway, relay):
        """Outbound ending (peer gone) cancels the blocked inbound reader."""
        conversation_id = gateway.add_conversation(ALICE, BOB)
        stream = ScriptedStream()
        stream.peer_gone = True
        session = await relay.connect(ALICE, conversation_id, stream)
        task = asyncio.create_task(session.run())

        stream.feed("into the void")
        await asyncio.wait_for(task, timeout=1)

        assert session.state is SessionState.CLOSED
