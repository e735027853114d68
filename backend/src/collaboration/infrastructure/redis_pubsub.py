import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any
from uuid import UUID

from redis.asyncio import Redis
from redis.exceptions import RedisError

from collaboration.domain.entities import DocumentEvent
from collaboration.infrastructure.event_codec import encode_event

logger = logging.getLogger(__name__)


def _channel_name(document_id: UUID) -> str:
    return f"doc:{document_id}:events"


async def publish_event(redis: Redis, event: DocumentEvent) -> None:
    await redis.publish(_channel_name(event.document_id), encode_event(event))


class RedisEventPublisher:
    """Broadcasts document events; a Redis outage is logged, never raised."""

    def __init__(self, redis: Redis):
        self.redis = redis

    async def publish(self, event: DocumentEvent) -> None:
        try:
            await publish_event(self.redis, event)
        except RedisError:
            logger.warning(
                "Failed to broadcast %s event for document %s",
                event.type,
                event.document_id,
                exc_info=True,
            )


class NullEventPublisher:
    async def publish(self, event: DocumentEvent) -> None:
        return None


async def subscribe(
    redis: Redis,
    document_id: UUID,
    callback: Callable[[bytes], Coroutine[Any, Any, None]],
) -> asyncio.Task:
    """Subscribe to document events. Returns a task that can be cancelled to unsubscribe."""
    pubsub = redis.pubsub()
    await pubsub.subscribe(_channel_name(document_id))

    async def _listen():
        try:
            async for message in pubsub.listen():
                if message["type"] == "message":
                    await callback(message["data"])
        except asyncio.CancelledError:
            pass
        finally:
            await pubsub.unsubscribe(_channel_name(document_id))
            await pubsub.aclose()

    return asyncio.create_task(_listen())
