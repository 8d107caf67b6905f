"""
GetChatHistory Query - message history of a conversation.

Used by the frontend to load earlier messages before opening the relay
socket.
"""

from dataclasses import dataclass

from chat_relay.application.common.interfaces import Query, QueryHandler
from chat_relay.application.membership.authority import MembershipAuthority
from chat_relay.config.settings import Config
from chat_relay.domain.entities.message import Message
from chat_relay.domain.ports.repositories import MessageRepository
from chat_relay.domain.value_objects import ConversationId, UserId


@dataclass(frozen=True)
class GetChatHistoryQuery(Query[list[Message]]):
    conversation_id: ConversationId
    user_id: UserId
    limit: int = Config.CONVERSATION_MESSAGE_LIMIT


class GetChatHistoryHandler(QueryHandler[list[Message]]):
    def __init__(self, membership: MembershipAuthority, msg_repo: MessageRepository):
        self._membership = membership
        self._msg_repo = msg_repo

    async def execute(self, query: GetChatHistoryQuery) -> list[Message]:
        """
        Returns:
            Messages in chronological order (oldest first)

        Raises:
            UnauthorizedError: user is not a member of the conversation
            DataAccessError: the store could not be read
        """
        await self._membership.verify(query.conversation_id, query.user_id)
        messages = await self._msg_repo.get_by_conversation(
            query.conversation_id, limit=query.limit
        )
        return sorted(messages, key=lambda m: m.sort_key)
