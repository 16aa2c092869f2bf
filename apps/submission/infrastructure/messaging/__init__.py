"""Messaging - Redis 클라이언트."""

from submission.infrastructure.messaging.redis_client import (
    close_async_cache_client,
    get_async_cache_client,
)

__all__ = ["close_async_cache_client", "get_async_cache_client"]
