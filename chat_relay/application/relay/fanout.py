"""
Fan-out channel - in-process broadcast for one conversation.

Each subscriber owns a bounded delivery buffer, so a slow reader never blocks
the publisher or any other subscriber. When a buffer is full the OLDEST
pending event is discarded to make room (drop-oldest); the subscription's
`dropped` counter records how many events it missed. Delivery is therefore
ordered but not lossless for lagging subscribers.

Publishing never awaits: it appends to every buffer and wakes the readers.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import AsyncIterator

from chat_relay.domain.entities.outgoing_event import OutgoingEvent
from chat_relay.domain.value_objects.conversation_id import ConversationId
from chat_relay.observability import increment_dropped_events

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 256


class SubscriptionClosed(Exception):
    """Raised by receive() once the subscription has been closed and drained."""


class Subscription:
    """One subscriber's cursor on a FanoutChannel."""

    def __init__(self, channel: FanoutChannel, capacity: int):
        if capacity < 1:
            raise ValueError("Subscription capacity must be at least 1")
        self._channel = channel
        self._capacity = capacity
        self._buffer: deque[OutgoingEvent] = deque()
        self._ready = asyncio.Event()
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def _deliver(self, event: OutgoingEvent) -> bool:
        """Buffer one event; returns True if an older event had to be dropped."""
        if self._closed:
            return False
        overflowed = len(self._buffer) >= self._capacity
        if overflowed:
            self._buffer.popleft()
            self.dropped += 1
        self._buffer.append(event)
        self._ready.set()
        return overflowed

    async def receive(self) -> OutgoingEvent:
        while not self._buffer:
            if self._closed:
                raise SubscriptionClosed()
            self._ready.clear()
            await self._ready.wait()
        return self._buffer.popleft()

    def __aiter__(self) -> AsyncIterator[OutgoingEvent]:
        return self

    async def __anext__(self) -> OutgoingEvent:
        try:
            return await self.receive()
        except SubscriptionClosed:
            raise StopAsyncIteration from None

    def close(self) -> None:
        """Detach from the channel. Already-buffered events can still be drained."""
        if self._closed:
            return
        self._closed = True
        self._channel._detach(self)
        self._ready.set()


class FanoutChannel:
    """Multi-producer, multi-consumer broadcast bound to one conversation."""

    def __init__(self, conversation_id: ConversationId, capacity: int = DEFAULT_CAPACITY):
        self.conversation_id = conversation_id
        self._capacity = capacity
        self._subscribers: list[Subscription] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        subscription = Subscription(self, self._capacity)
        self._subscribers.append(subscription)
        logger.debug(
            f"[fanout] +1 subscriber on {self.conversation_id} "
            f"(now {len(self._subscribers)})"
        )
        return subscription

    def _detach(self, subscription: Subscription) -> None:
        try:
            self._subscribers.remove(subscription)
        except ValueError:
            return
        logger.debug(
            f"[fanout] -1 subscriber on {self.conversation_id} "
            f"(now {len(self._subscribers)})"
        )

    def publish(self, event: OutgoingEvent) -> int:
        """
        Deliver event to every current subscriber.

        Returns the number of subscribers reached. Zero subscribers is a no-op.
        """
        receivers = list(self._subscribers)
        dropped = 0
        for subscription in receivers:
            if subscription._deliver(event):
                dropped += 1
        if dropped:
            logger.warning(
                f"[fanout] {dropped} lagging subscriber(s) on {self.conversation_id} "
                "dropped their oldest buffered event"
            )
            increment_dropped_events(dropped)
        return len(receivers)
