"""Redis Persistence Adapters."""

from submission.infrastructure.persistence_redis.idempotency_cache_redis import (
    IdempotencyCacheRedis,
)

__all__ = ["IdempotencyCacheRedis"]
