"""
Connection Session - the per-socket relay state machine.

    CONNECTING → AUTHORIZED → ACTIVE → CLOSING → CLOSED

- authorize(): membership gate. On failure the session goes straight to
  CLOSED and no channel subscription is ever taken.
- run(): subscribes to the conversation channel, accepts the stream and runs
  two tasks until either one finishes:
    outbound: subscription → serialize → stream.send_text
    inbound:  stream.receive → parse → persist (background, best effort) → publish
  The first task to finish cancels its sibling, then the subscription is
  detached. Neither side is left half-open.

Per-channel publish order is what every subscriber observes. The sender is a
subscriber too, so it receives its own message back with the server
timestamp.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Optional

from chat_relay.application.membership.authority import MembershipAuthority
from chat_relay.application.relay.fanout import FanoutChannel, Subscription
from chat_relay.application.relay.frames import message_content, parse_inbound_frame
from chat_relay.application.relay.registry import ConversationRegistry
from chat_relay.domain.entities.message import Message
from chat_relay.domain.entities.outgoing_event import OutgoingEvent
from chat_relay.domain.exceptions import PeerDisconnectedError, UnauthorizedError
from chat_relay.domain.ports.repositories import MessageRepository
from chat_relay.domain.ports.transport import FrameKind, MessageStream
from chat_relay.domain.value_objects import ConversationId, UserId
from chat_relay.observability import (
    decrement_active_sessions,
    increment_active_sessions,
    increment_error,
    increment_messages_broadcast,
    increment_persistence_failures,
    MetricsErrorType,
)

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    CONNECTING = "connecting"
    AUTHORIZED = "authorized"
    ACTIVE = "active"
    CLOSING = "closing"
    CLOSED = "closed"


class ConnectionSession:
    def __init__(
        self,
        user_id: UserId,
        conversation_id: ConversationId,
        stream: MessageStream,
        registry: ConversationRegistry,
        membership: MembershipAuthority,
        message_repository: MessageRepository,
    ):
        self.user_id = user_id
        self.conversation_id = conversation_id
        self.state = SessionState.CONNECTING
        self.subscription: Optional[Subscription] = None
        self._stream = stream
        self._registry = registry
        self._membership = membership
        self._message_repository = message_repository
        self._channel: Optional[FanoutChannel] = None
        self._pending_writes: set[asyncio.Task] = set()

    def __repr__(self) -> str:
        return (
            f"<ConnectionSession user={self.user_id} "
            f"conversation={self.conversation_id} state={self.state.value}>"
        )

    async def authorize(self) -> None:
        if self.state is not SessionState.CONNECTING:
            raise RuntimeError(f"Cannot authorize a session in state {self.state.value}")
        try:
            await self._membership.verify(self.conversation_id, self.user_id)
        except UnauthorizedError:
            self.state = SessionState.CLOSED
            raise
        self.state = SessionState.AUTHORIZED

    async def run(self) -> None:
        if self.state is not SessionState.AUTHORIZED:
            raise RuntimeError(f"Cannot run a session in state {self.state.value}")

        # Subscribe first: anything published after the handshake reaches this client
        self._channel = await self._registry.get_or_create(self.conversation_id)
        self.subscription = self._channel.subscribe()
        self.state = SessionState.ACTIVE
        increment_active_sessions()

        tasks: list[asyncio.Task] = []
        try:
            await self._stream.accept()
            logger.info(f"[session] {self.user_id} joined conversation {self.conversation_id}")

            tasks = [
                asyncio.create_task(self._outbound(), name=f"outbound-{self.user_id}"),
                asyncio.create_task(self._inbound(), name=f"inbound-{self.user_id}"),
            ]
            done, _ = await asyncio.wait(
                tasks, return_when=asyncio.FIRST_COMPLETED
            )
            for task in done:
                if not task.cancelled() and task.exception() is not None:
                    logger.error(
                        f"[session] {task.get_name()} failed: {task.exception()!r}"
                    )
                    increment_error(MetricsErrorType.SESSION)
        finally:
            self.state = SessionState.CLOSING
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            if self._pending_writes:
                await asyncio.gather(*self._pending_writes, return_exceptions=True)
            self.subscription.close()
            await self._stream.close()
            self.state = SessionState.CLOSED
            decrement_active_sessions()
            logger.info(f"[session] {self.user_id} left conversation {self.conversation_id}")

    async def _outbound(self) -> None:
        async for event in self.subscription:
            try:
                await self._stream.send_text(event.to_json())
            except PeerDisconnectedError:
                logger.debug(f"[session] Write to {self.user_id} failed, peer gone")
                return

    async def _inbound(self) -> None:
        while True:
            try:
                frame = await self._stream.receive()
            except PeerDisconnectedError:
                return

            if frame.kind is FrameKind.CLOSE:
                return
            if frame.kind is not FrameKind.TEXT:
                continue

            content = message_content(parse_inbound_frame(frame.text or ""))
            if content is None:
                continue

            self._persist_in_background(content)
            self.publish(content)

    def publish(self, content: str) -> OutgoingEvent:
        """Stamp and broadcast one message from this session's user."""
        event = OutgoingEvent.stamp(self.user_id, content)
        receivers = self._channel.publish(event)
        increment_messages_broadcast()
        logger.debug(
            f"[session] {self.user_id} → {receivers} subscriber(s) on {self.conversation_id}"
        )
        return event

    def _persist_in_background(self, content: str) -> None:
        """Start the write without awaiting it; run() drains pending writes on close."""
        task = asyncio.create_task(self._persist(content))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _persist(self, content: str) -> None:
        message = Message.create(self.conversation_id, self.user_id, content)
        try:
            await self._message_repository.save(message)
        except Exception as e:
            # Best effort: never surfaced to the sender, never retried
            logger.warning(
                f"[session] Failed to persist message from {self.user_id} "
                f"in {self.conversation_id}: {e}"
            )
            increment_persistence_failures()
