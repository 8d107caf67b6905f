import os

# Must be set before chat_relay.config.settings is imported
os.environ.setdefault("SESSION_SECRET", "test-secret")
os.environ.setdefault("APP_ENV", "testing")

import asyncio
import time
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Any

import jwt
import pytest
from dishka import Provider, Scope, provide
from fastapi.testclient import TestClient

from chat_relay.config.settings import Config
from chat_relay.domain.exceptions import DataAccessError, PeerDisconnectedError
from chat_relay.domain.ports import Collections, Frame, MessageStream, PersistenceGateway
from chat_relay.domain.ports.repositories import MessageRepository
from chat_relay.domain.value_objects import ConversationId, UserId
from chat_relay.fastapi_app import create_fastapi_app
from chat_relay.infrastructure.persistence import GatewayMessageRepository
from chat_relay.setup.ioc.container import create_container

ALICE = UserId("11111111-1111-4111-8111-111111111111")
BOB = UserId("22222222-2222-4222-8222-222222222222")
CAROL = UserId("33333333-3333-4333-8333-333333333333")


def session_token(user_id, **overrides):
    now = int(time.time())
    claims = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + 300,
        "iss": Config.SESSION_ISSUER,
        "aud": Config.SESSION_AUDIENCE,
    }
    claims.update(overrides)
    return jwt.encode(claims, Config.SESSION_SECRET, algorithm="HS256")


def bearer(user_id):
    return {"Authorization": f"Bearer {session_token(user_id)}"}


async def wait_until(predicate, timeout=2.0):
    async def _poll():
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout)


class InMemoryGateway(PersistenceGateway):
    """PersistenceGateway double; collections listed in `failing` raise DataAccessError."""

    unique_keys = {
        Collections.CONVERSATIONS: ("id",),
        Collections.CONVERSATION_MEMBERS: ("conversation_id", "user_id"),
    }

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.failing: set[str] = set()
        self._ids = count(1)
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _check(self, collection):
        if collection in self.failing:
            raise DataAccessError(f"{collection} unavailable")

    async def query(self, collection, filters):
        self._check(collection)
        return [
            dict(row)
            for row in self.tables[collection]
            if all(row.get(field) == value for field, value in filters)
        ]

    async def insert(self, collection, record):
        self._check(collection)
        row = dict(record)
        row.setdefault("id", next(self._ids))
        fields = self.unique_keys.get(collection, ())
        if fields and any(
            all(existing.get(f) == row.get(f) for f in fields)
            for existing in self.tables[collection]
        ):
            raise DataAccessError(f"Unique constraint failed on {collection} {fields}")
        if collection == Collections.MESSAGES:
            self._clock += timedelta(seconds=1)
            row.setdefault("created_at", self._clock.isoformat())
            row.setdefault("is_deleted", False)
        self.tables[collection].append(row)
        return dict(row)

    async def update(self, collection, id, partial):
        self._check(collection)
        for row in self.tables[collection]:
            if row.get("id") == id:
                row.update(partial)
                return
        raise DataAccessError(f"No {collection} record with id {id}")

    def add_conversation(self, *user_ids) -> ConversationId:
        conversation_id = ConversationId.new()
        self.tables[Collections.CONVERSATIONS].append(
            {"id": conversation_id.value, "is_group": False}
        )
        for user_id in user_ids:
            self.tables[Collections.CONVERSATION_MEMBERS].append(
                {
                    "id": next(self._ids),
                    "conversation_id": conversation_id.value,
                    "user_id": str(user_id),
                    "role": "member",
                }
            )
        return conversation_id

    def revoke(self, conversation_id, user_id):
        self.tables[Collections.CONVERSATION_MEMBERS] = [
            row
            for row in self.tables[Collections.CONVERSATION_MEMBERS]
            if not (
                row["conversation_id"] == str(conversation_id)
                and row["user_id"] == str(user_id)
            )
        ]


class ScriptedStream(MessageStream):
    """MessageStream double fed by the test; records what the session writes."""

    def __init__(self):
        self.inbound: asyncio.Queue = asyncio.Queue()
        self.sent: list[str] = []
        self.accepted = False
        self.closed_with = None
        self.peer_gone = False

    def feed(self, text):
        self.inbound.put_nowait(Frame.text_frame(text))

    def feed_binary(self, data):
        self.inbound.put_nowait(Frame.binary_frame(data))

    def hang_up(self, code=1000):
        self.inbound.put_nowait(Frame.close_frame(code))

    async def accept(self):
        self.accepted = True

    async def receive(self):
        return await self.inbound.get()

    async def send_text(self, text):
        if self.peer_gone:
            raise PeerDisconnectedError()
        self.sent.append(text)

    async def close(self, code=1000):
        self.closed_with = code


class InMemoryInfrastructureProvider(Provider):
    def __init__(self, gateway: InMemoryGateway):
        super().__init__()
        self._gateway = gateway

    @provide(scope=Scope.APP)
    def get_gateway(self) -> PersistenceGateway:
        return self._gateway

    @provide(scope=Scope.APP)
    def get_message_repository(self, gateway: PersistenceGateway) -> MessageRepository:
        return GatewayMessageRepository(gateway)


@pytest.fixture()
def gateway():
    return InMemoryGateway()


@pytest.fixture()
def app(gateway):
    """FastAPI app wired to the in-memory gateway."""
    return create_fastapi_app(create_container(InMemoryInfrastructureProvider(gateway)))


@pytest.fixture()
def client(app):
    """A test client for the FastAPI app (lifespan runs, one event loop for all calls)."""
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def auth_headers():
    """Authentication headers for ALICE."""
    return bearer(ALICE)
