"""
Membership Authority - decides whether a user may join or read a conversation.

Every check goes to the persistence gateway; nothing is memoized, so a
revoked membership takes effect on the very next check. Gateway failures
fail closed (treated as "not a member").
"""

import logging

from chat_relay.domain.exceptions import DataAccessError, UnauthorizedError
from chat_relay.domain.ports import Collections, PersistenceGateway
from chat_relay.domain.value_objects import ConversationId, UserId
from chat_relay.observability import increment_error, MetricsErrorType

logger = logging.getLogger(__name__)


class MembershipAuthority:
    def __init__(self, gateway: PersistenceGateway):
        self._gateway = gateway

    async def is_member(self, conversation_id: ConversationId, user_id: UserId) -> bool:
        try:
            rows = await self._gateway.query(
                Collections.CONVERSATION_MEMBERS,
                [
                    ("conversation_id", conversation_id.value),
                    ("user_id", user_id.value),
                ],
            )
        except DataAccessError as e:
            logger.error(
                f"[membership] Lookup failed for conversation={conversation_id} "
                f"user={user_id}, denying: {e}"
            )
            increment_error(MetricsErrorType.MEMBERSHIP_LOOKUP)
            return False

        logger.debug(f"[membership] Found {len(rows)} membership rows")
        return bool(rows)

    async def verify(self, conversation_id: ConversationId, user_id: UserId) -> None:
        """
        Raise UnauthorizedError unless user_id is a member of conversation_id.

        Gate for session creation and for every history read.
        """
        if not await self.is_member(conversation_id, user_id):
            logger.warning(
                f"[membership] User {user_id} is not a member of conversation {conversation_id}"
            )
            raise UnauthorizedError(
                f"User {user_id} is not a member of conversation {conversation_id}"
            )
