from redis.asyncio import ConnectionPool, Redis

from shared.config import settings

pool = ConnectionPool.from_url(settings.REDIS_URL)


def get_redis_pool() -> Redis:
    return Redis(connection_pool=pool)


async def close_redis_pool() -> None:
    await pool.aclose()
