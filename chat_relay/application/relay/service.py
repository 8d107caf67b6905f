"""
Relay Service - composition root for connection sessions.

The WebSocket route hands over an authenticated identity, a conversation id
and a transport stream; the service wires them to the shared registry,
membership authority and message repository.
"""

import logging

from chat_relay.application.membership.authority import MembershipAuthority
from chat_relay.application.relay.registry import ConversationRegistry
from chat_relay.application.relay.session import ConnectionSession
from chat_relay.domain.ports.repositories import MessageRepository
from chat_relay.domain.ports.transport import MessageStream
from chat_relay.domain.value_objects import ConversationId, UserId

logger = logging.getLogger(__name__)


class RelayService:
    def __init__(
        self,
        registry: ConversationRegistry,
        membership: MembershipAuthority,
        message_repository: MessageRepository,
    ):
        self._registry = registry
        self._membership = membership
        self._message_repository = message_repository

    async def connect(
        self, user_id: UserId, conversation_id: ConversationId, stream: MessageStream
    ) -> ConnectionSession:
        """
        Create a session and run its membership gate.

        Raises:
            UnauthorizedError: user is not a member; nothing was subscribed
        """
        session = ConnectionSession(
            user_id=user_id,
            conversation_id=conversation_id,
            stream=stream,
            registry=self._registry,
            membership=self._membership,
            message_repository=self._message_repository,
        )
        await session.authorize()
        return session
