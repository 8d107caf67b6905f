"""ListConversations Query - ids of every conversation the user belongs to."""

from dataclasses import dataclass

from chat_relay.application.commands.conversations import extract_conversation_ids
from chat_relay.application.common.interfaces import Query, QueryHandler
from chat_relay.domain.ports import Collections, PersistenceGateway
from chat_relay.domain.value_objects import ConversationId, UserId


@dataclass(frozen=True)
class ListConversationsQuery(Query[list[ConversationId]]):
    user_id: UserId


class ListConversationsHandler(QueryHandler[list[ConversationId]]):
    def __init__(self, gateway: PersistenceGateway):
        self._gateway = gateway

    async def execute(self, query: ListConversationsQuery) -> list[ConversationId]:
        rows = await self._gateway.query(
            Collections.CONVERSATION_MEMBERS, [("user_id", query.user_id.value)]
        )
        return extract_conversation_ids(rows)
