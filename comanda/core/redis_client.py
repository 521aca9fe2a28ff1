"""
Comanda — Redis client singleton

Shared by the idempotency cache, kitchen event publishing and the SSE
stream (each stream opens its own pub/sub on this client's pool).
Celery talks to Redis through its own connection settings.
"""
import redis.asyncio as aioredis

from comanda.core.config import get_settings

settings = get_settings()

_redis_client: aioredis.Redis | None = None


def get_redis() -> aioredis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=settings.HEALTH_CHECK_TIMEOUT,
            health_check_interval=settings.SSE_KEEPALIVE_INTERVAL_SECONDS,
            client_name=settings.SERVICE_NAME,
        )
    return _redis_client


async def close_redis() -> None:
    global _redis_client
    if _redis_client is not None:
        client, _redis_client = _redis_client, None
        await client.aclose()
