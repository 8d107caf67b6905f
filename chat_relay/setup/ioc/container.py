"""
Dishka DI Container Setup.

Two providers:
- InfrastructureProvider: adapters with external resources (Prisma, Redis).
  Tests swap this one for in-memory doubles.
- AppProvider: the relay core and the command/query handlers.

Scopes:
- Scope.APP     = created once, shared by every request and socket
                  (gateway, message repository, registry, membership, relay)
- Scope.REQUEST = new instance per HTTP request (handlers)

Flow:
  Container → PrismaPersistenceGateway → MembershipAuthority → RelayService
                        ↓                                         ↑
              GatewayMessageRepository → (CachedMessageRepository) ┘
"""

import logging
from typing import AsyncIterator

from dishka import Provider, Scope, make_async_container, provide, AsyncContainer

from chat_relay.application.commands.conversations import (
    StartDirectConversationHandler,
)
from chat_relay.application.membership.authority import MembershipAuthority
from chat_relay.application.queries.chat import GetChatHistoryHandler
from chat_relay.application.queries.conversations import ListConversationsHandler
from chat_relay.application.relay.registry import ConversationRegistry
from chat_relay.application.relay.service import RelayService
from chat_relay.config.settings import Config
from chat_relay.domain.ports import PersistenceGateway
from chat_relay.domain.ports.repositories import MessageRepository
from chat_relay.infrastructure.cache import (
    CachedMessageRepository,
    close_redis_client,
    create_redis_client,
)
from chat_relay.infrastructure.persistence import (
    GatewayMessageRepository,
    PrismaPersistenceGateway,
)

logger = logging.getLogger(__name__)


class InfrastructureProvider(Provider):
    """Persistence and cache adapters (connected on first use, closed with the container)."""

    # ==================== DATABASE ====================

    @provide(scope=Scope.APP)
    async def get_gateway(self) -> AsyncIterator[PersistenceGateway]:
        gateway = await PrismaPersistenceGateway.connect()
        yield gateway
        await gateway.disconnect()

    # ==================== REPOSITORIES ====================

    @provide(scope=Scope.APP)
    async def get_message_repository(
        self, gateway: PersistenceGateway
    ) -> AsyncIterator[MessageRepository]:
        """
        Gateway-backed repository, wrapped by the Redis cache when REDIS_URL
        is set.
        """
        repository = GatewayMessageRepository(gateway)
        if not Config.REDIS_URL:
            yield repository
            return

        redis = await create_redis_client()
        try:
            yield CachedMessageRepository(repository, redis)
        finally:
            await close_redis_client(redis)


class AppProvider(Provider):
    """Relay core and request handlers."""

    # ==================== RELAY ====================

    @provide(scope=Scope.APP)
    def get_registry(self) -> ConversationRegistry:
        return ConversationRegistry(capacity=Config.CHANNEL_CAPACITY)

    @provide(scope=Scope.APP)
    def get_membership_authority(
        self, gateway: PersistenceGateway
    ) -> MembershipAuthority:
        return MembershipAuthority(gateway)

    @provide(scope=Scope.APP)
    def get_relay_service(
        self,
        registry: ConversationRegistry,
        membership: MembershipAuthority,
        message_repository: MessageRepository,
    ) -> RelayService:
        return RelayService(registry, membership, message_repository)

    # ==================== HANDLERS ====================

    @provide(scope=Scope.REQUEST)
    def get_start_conversation_handler(
        self, gateway: PersistenceGateway
    ) -> StartDirectConversationHandler:
        return StartDirectConversationHandler(gateway)

    @provide(scope=Scope.REQUEST)
    def get_list_conversations_handler(
        self, gateway: PersistenceGateway
    ) -> ListConversationsHandler:
        return ListConversationsHandler(gateway)

    @provide(scope=Scope.REQUEST)
    def get_chat_history_handler(
        self,
        membership: MembershipAuthority,
        message_repository: MessageRepository,
    ) -> GetChatHistoryHandler:
        return GetChatHistoryHandler(
            membership=membership,
            msg_repo=message_repository,
        )


def create_container(*providers: Provider) -> AsyncContainer:
    """
    Create and configure the DI container.

    With no arguments the production InfrastructureProvider is used; pass
    replacement providers (tests) to substitute the adapters.
    """
    infrastructure = providers or (InfrastructureProvider(),)
    return make_async_container(*infrastructure, AppProvider())
