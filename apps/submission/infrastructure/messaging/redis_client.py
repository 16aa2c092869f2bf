"""Redis 클라이언트 팩토리.

submission API 전용 - Cache Redis (멱등성 캐시) 하나만 사용한다.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from submission.setup.config import get_settings

if TYPE_CHECKING:
    import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


_async_cache_client: "aioredis.Redis | None" = None


async def get_async_cache_client() -> "aioredis.Redis":
    """비동기 Cache Redis 클라이언트.

    Returns:
        비동기 Redis 클라이언트 (싱글톤)
    """
    global _async_cache_client

    if _async_cache_client is None:
        import redis.asyncio as aioredis

        url = get_settings().redis_cache_url
        _async_cache_client = aioredis.from_url(
            url,
            decode_responses=True,  # JSON 처리 편의
            socket_timeout=5.0,
            socket_connect_timeout=5.0,
            retry_on_timeout=True,
            health_check_interval=30,
            max_connections=100,
        )
        logger.info("async_cache_client_initialized", extra={"url": url})

    return _async_cache_client


async def close_async_cache_client() -> None:
    """비동기 Cache 클라이언트 종료."""
    global _async_cache_client

    if _async_cache_client is not None:
        await _async_cache_client.aclose()
        logger.info("async_cache_client_closed")
        _async_cache_client = None
