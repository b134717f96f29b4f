"""Redis reachability for the health check.

Lookups never touch Redis; only the rate limiter stores counters there. The
health endpoint reports it as ``ok``, ``unavailable`` (not reachable, which
is fine for a single instance) or ``error`` (reachable but failing).
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError, TimeoutError as RedisTimeoutError

from feriados.config import settings

logger = logging.getLogger(__name__)


async def redis_status() -> str:
    """Ping Redis on a short-lived connection and classify the outcome."""
    client = aioredis.from_url(settings.REDIS_URL, socket_connect_timeout=1)
    try:
        await client.ping()
    except (RedisConnectionError, RedisTimeoutError, OSError):
        logger.debug("Redis not reachable at %s", settings.REDIS_URL)
        return "unavailable"
    except RedisError:
        logger.warning("Redis ping failed at %s", settings.REDIS_URL, exc_info=True)
        return "error"
    finally:
        await client.aclose()
    return "ok"
