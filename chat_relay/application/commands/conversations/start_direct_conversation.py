"""
Start Direct Conversation Command - find or create the 1:1 conversation
between two users.

Steps:
1. Reject a conversation with yourself
2. Load membership rows of both users
3. Return the first conversation id they share (in the caller's row order)
4. Otherwise create the pair's conversation plus one membership row per user

A created conversation gets an id derived from the pair, so concurrent
requests for the same two users (on any number of processes) collide on
the conversations primary key and on the (conversation_id, user_id) unique
key instead of creating a second conversation. The losing request, or a
retry after a run that stopped between inserts, finds the rows already
there and completes whatever membership is missing.

Runs over the persistence gateway only; the returned id is what clients use
to open a relay session. Gateway failures propagate as DataAccessError.
"""

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID, uuid5

from chat_relay.application.common.interfaces import Command, CommandHandler
from chat_relay.domain.entities.membership import ConversationMember
from chat_relay.domain.exceptions import DataAccessError, DomainValidationError
from chat_relay.domain.ports import Collections, PersistenceGateway
from chat_relay.domain.value_objects import ConversationId, UserId

logger = logging.getLogger(__name__)

DIRECT_CONVERSATION_NAMESPACE = UUID("6f1c2a7e-3b9d-5e48-9a0c-d2f4b8e61c35")


def direct_conversation_id(a: UserId, b: UserId) -> ConversationId:
    """Id of the direct conversation between two users, independent of order."""
    low, high = sorted((a.value, b.value))
    return ConversationId(str(uuid5(DIRECT_CONVERSATION_NAMESPACE, f"{low}:{high}")))


def extract_conversation_ids(rows: list[dict[str, Any]]) -> list[ConversationId]:
    """conversation_id of every membership row, skipping malformed ones."""
    ids = []
    for row in rows:
        raw = row.get("conversation_id")
        if not raw:
            continue
        try:
            ids.append(ConversationId(str(raw)))
        except ValueError:
            logger.warning(f"[conversations] Skipping malformed conversation_id {raw!r}")
    return ids


@dataclass(frozen=True)
class StartDirectConversationCommand(Command[ConversationId]):
    user_id: UserId
    friend_id: UserId


class StartDirectConversationHandler(CommandHandler[ConversationId]):
    def __init__(self, gateway: PersistenceGateway):
        self._gateway = gateway

    async def _conversation_ids_of(self, user_id: UserId) -> list[ConversationId]:
        rows = await self._gateway.query(
            Collections.CONVERSATION_MEMBERS, [("user_id", user_id.value)]
        )
        return extract_conversation_ids(rows)

    async def _insert_unless_present(
        self, collection: str, record: dict[str, Any], key: list[tuple[str, Any]]
    ) -> None:
        """Insert a row; a failed insert is fine only if the row now exists."""
        try:
            await self._gateway.insert(collection, record)
        except DataAccessError:
            if not await self._gateway.query(collection, key):
                raise
            logger.info(f"[start_conversation] {collection} row {dict(key)} already exists")

    async def execute(self, command: StartDirectConversationCommand) -> ConversationId:
        me, friend = command.user_id, command.friend_id
        logger.info(f"[start_conversation] me={me}, friend_id={friend}")

        if me == friend:
            raise DomainValidationError("Cannot start a conversation with yourself")

        my_ids = await self._conversation_ids_of(me)
        friend_ids = set(await self._conversation_ids_of(friend))
        for conversation_id in my_ids:
            if conversation_id in friend_ids:
                logger.info(f"[start_conversation] Reusing conversation {conversation_id}")
                return conversation_id

        conversation_id = direct_conversation_id(me, friend)
        logger.info(f"[start_conversation] Creating new conversation: {conversation_id}")
        await self._insert_unless_present(
            Collections.CONVERSATIONS,
            {"id": conversation_id.value, "is_group": False},
            [("id", conversation_id.value)],
        )
        for user_id in (me, friend):
            member = ConversationMember(conversation_id, user_id)
            await self._insert_unless_present(
                Collections.CONVERSATION_MEMBERS,
                member.to_record(),
                [("conversation_id", conversation_id.value), ("user_id", user_id.value)],
            )
        return conversation_id
