"""
Conversation Registry - process-wide ConversationId → FanoutChannel map.

Owned by the DI container (APP scope) and shared by every connection
handler. Channels are created lazily on first subscriber and live for the
rest of the process: there is no removal, so a channel can never be disposed
while someone is publishing to it. The map grows with the number of distinct
conversations ever joined (see the chat_relay_channels gauge).
"""

import asyncio
import logging
from typing import Optional

from chat_relay.application.relay.fanout import DEFAULT_CAPACITY, FanoutChannel
from chat_relay.domain.value_objects.conversation_id import ConversationId
from chat_relay.observability import set_channel_count

logger = logging.getLogger(__name__)


class ConversationRegistry:
    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        self._capacity = capacity
        self._channels: dict[ConversationId, FanoutChannel] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._channels)

    def get(self, conversation_id: ConversationId) -> Optional[FanoutChannel]:
        return self._channels.get(conversation_id)

    async def get_or_create(self, conversation_id: ConversationId) -> FanoutChannel:
        """
        Return the channel for conversation_id, creating it if needed.

        Insertion happens under the lock with a re-check, so concurrent callers
        for the same id all receive the one channel that was inserted.
        """
        channel = self._channels.get(conversation_id)
        if channel is not None:
            return channel

        async with self._lock:
            channel = self._channels.get(conversation_id)
            if channel is None:
                channel = FanoutChannel(conversation_id, self._capacity)
                self._channels[conversation_id] = channel
                logger.info(
                    f"[registry] Created channel for conversation {conversation_id} "
                    f"({len(self._channels)} total)"
                )
                set_channel_count(len(self._channels))
            return channel
