"""
Persistence Layer - Database implementations.

Contains the Prisma gateway and the gateway-backed repositories.
"""

from chat_relay.infrastructure.persistence.prisma_gateway import (
    PrismaPersistenceGateway,
)
from chat_relay.infrastructure.persistence.gateway_message_repository import (
    GatewayMessageRepository,
)

__all__ = [
    "PrismaPersistenceGateway",
    "GatewayMessageRepository",
]
