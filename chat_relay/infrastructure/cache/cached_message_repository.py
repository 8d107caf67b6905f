"""
Cached Message Repository - Redis read-through decorator with invalidation.

    CachedMessageRepository (decorator)
        ↓ wraps
    GatewayMessageRepository
        ↓ implements
    MessageRepository

Redis layout (per conversation):
- "conv:{conversation_id}:msgs": LIST, one message as JSON per element,
  position 0 = newest. Trimmed to Config.REDIS_CACHE_LIMIT.
- "conv:{conversation_id}:ver": counter bumped by every save.
Both expire after Config.REDIS_CACHE_TTL.

A save bumps the version and drops the list. A miss reads the version
before reading the store and fills the list inside a WATCH/MULTI
transaction only while the version is unchanged, so a list built from a
store read that a save has overtaken is never written.

The store stays the source of truth. A cache failure never fails the call;
it is logged, counted, and the store is used instead.
"""

import json
import logging
from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import WatchError

from chat_relay.config.settings import Config
from chat_relay.domain.entities.message import Message
from chat_relay.domain.ports.repositories.message_repository import MessageRepository
from chat_relay.domain.value_objects import ConversationId, UserId
from chat_relay.observability import increment_error, MetricsErrorType

logger = logging.getLogger(__name__)


class CachedMessageRepository(MessageRepository):
    def __init__(
        self,
        repo: MessageRepository,
        redis: Redis,
        ttl: int | None = None,
        cache_limit: int | None = None,
    ):
        self._repo = repo
        self._redis = redis
        self._ttl = ttl or Config.REDIS_CACHE_TTL
        self._cache_limit = cache_limit or Config.REDIS_CACHE_LIMIT

    def _cache_key(self, conversation_id: ConversationId) -> str:
        return f"conv:{conversation_id.value}:msgs"

    def _version_key(self, conversation_id: ConversationId) -> str:
        return f"conv:{conversation_id.value}:ver"

    def _serialize_message(self, message: Message) -> str:
        return json.dumps(
            {
                "id": message.id,
                "conversation_id": message.conversation_id.value,
                "sender_id": message.sender_id.value,
                "content": message.content,
                "message_type": message.message_type,
                "is_deleted": message.is_deleted,
                "created_at": message.created_at,
            },
            ensure_ascii=False,
        )

    def _deserialize_message(self, json_str: str) -> Message:
        d = json.loads(json_str)
        return Message(
            id=d.get("id"),
            conversation_id=ConversationId(d["conversation_id"]),
            sender_id=UserId(d["sender_id"]),
            content=d["content"],
            message_type=d.get("message_type") or "text",
            is_deleted=d.get("is_deleted"),
            created_at=d.get("created_at"),
        )

    async def get_by_conversation(
        self, conversation_id: ConversationId, limit: int = 200
    ) -> list[Message]:
        """
        Messages oldest first.

        Requests above the cache limit go straight to the store, since the
        cache only ever holds the newest REDIS_CACHE_LIMIT messages.
        """
        if limit <= 0:
            return []
        if limit > self._cache_limit:
            logger.debug(
                f"Limit {limit} > cache limit {self._cache_limit}, bypassing cache"
            )
            return await self._repo.get_by_conversation(conversation_id, limit)

        cache_key = self._cache_key(conversation_id)
        fillable = False
        seen_version = None

        try:
            seen_version = await self._redis.get(self._version_key(conversation_id))
            cached_json_list = await self._redis.lrange(cache_key, 0, limit - 1)
            if cached_json_list:
                logger.debug(f"Cache HIT for {cache_key}")
                messages = [
                    self._deserialize_message(json_str) for json_str in cached_json_list
                ]
                messages.reverse()
                return messages
            fillable = True
        except Exception as e:
            logger.warning(f"Redis cache read error for {cache_key}: {str(e)}")
            increment_error(MetricsErrorType.CACHE)

        # Fill the whole cache window so later, larger reads are served too
        logger.debug(f"Cache MISS for {cache_key}")
        messages = await self._repo.get_by_conversation(
            conversation_id, self._cache_limit
        )

        if fillable and messages:
            try:
                await self._fill(conversation_id, messages, seen_version)
            except WatchError:
                logger.debug(f"Cache fill for {cache_key} overtaken by a save, skipped")
            except Exception as e:
                logger.warning(f"Redis cache write error for {cache_key}: {str(e)}")
                increment_error(MetricsErrorType.CACHE)

        return messages[-limit:]

    async def _fill(
        self,
        conversation_id: ConversationId,
        messages: list[Message],
        seen_version: Optional[str],
    ) -> None:
        cache_key = self._cache_key(conversation_id)
        version_key = self._version_key(conversation_id)
        json_strings = [self._serialize_message(msg) for msg in reversed(messages)]

        async with self._redis.pipeline(transaction=True) as pipe:
            await pipe.watch(version_key)
            if await pipe.get(version_key) != seen_version:
                logger.debug(f"Cache fill for {cache_key} is stale, skipped")
                return
            pipe.multi()
            pipe.delete(cache_key)
            pipe.rpush(cache_key, *json_strings)
            pipe.ltrim(cache_key, 0, self._cache_limit - 1)
            pipe.expire(cache_key, self._ttl)
            await pipe.execute()
        logger.debug(f"Cache POPULATED for {cache_key}")

    async def save(self, message: Message) -> None:
        await self._repo.save(message)

        cache_key = self._cache_key(message.conversation_id)
        version_key = self._version_key(message.conversation_id)
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.incr(version_key)
                pipe.expire(version_key, self._ttl)
                pipe.delete(cache_key)
                await pipe.execute()
            logger.debug(f"Cache INVALIDATED for {cache_key}")
        except Exception as e:
            logger.warning(f"Redis cache invalidation error for {cache_key}: {str(e)}")
            increment_error(MetricsErrorType.CACHE)
