import logging
from typing import Optional
from redis.asyncio import Redis, from_url
from redis.exceptions import RedisError
from config.settings import settings

logger = logging.getLogger(__name__)

# One client per process; repositories fetch it through get_redis().
_client: Optional[Redis] = None


async def get_redis() -> Redis:
    global _client
    if _client is None:
        _client = from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,  # repositories store JSON text and ints only
            socket_keepalive=True,
            health_check_interval=30,
        )
        # Fail fast on startup if Redis is unreachable.
        await _client.ping()
    return _client


async def redis_ok() -> bool:
    try:
        r = await get_redis()
        return bool(await r.ping())
    except (RedisError, OSError) as e:
        logger.warning("redis.ping.failed err=%s", type(e).__name__)
        return False


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
