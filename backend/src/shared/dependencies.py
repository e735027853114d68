from collections.abc import AsyncGenerator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from collaboration.domain.publisher import EventPublisher
from collaboration.infrastructure.redis_pubsub import NullEventPublisher, RedisEventPublisher
from identity.application.services import verify_token
from shared.config import settings
from shared.infrastructure.database import async_session
from shared.infrastructure.redis import get_redis_pool

security = HTTPBearer()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    return verify_token(credentials.credentials)


def get_event_publisher() -> EventPublisher:
    if not settings.BROADCAST_ENABLED:
        return NullEventPublisher()
    return RedisEventPublisher(get_redis_pool())
