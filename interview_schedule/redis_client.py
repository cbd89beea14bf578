import logging
from functools import lru_cache

from redis import Redis

from .config import settings

logger = logging.getLogger(__name__)


@lru_cache
def get_redis() -> Redis | None:
    """
    Shared Redis client, or None when REDIS_URL is not configured.

    Created once per process; the connection pool is lazy, so building the
    client does not touch the network.
    """
    if not settings.redis_url:
        return None
    logger.info("Redis client configured")
    return Redis.from_url(settings.redis_url, socket_timeout=2.0)
