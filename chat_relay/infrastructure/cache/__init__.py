"""
Cache Layer - Redis caching implementations.

Contains async Redis client and cached repository decorators.
"""

from chat_relay.infrastructure.cache.redis_client import (
    create_redis_client,
    close_redis_client,
)
from chat_relay.infrastructure.cache.cached_message_repository import (
    CachedMessageRepository,
)

__all__ = [
    "create_redis_client",
    "close_redis_client",
    "CachedMessageRepository",
]
