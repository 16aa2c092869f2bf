"""Idempotency Cache Redis Adapter - 멱등성 캐시 Redis 구현체."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from submission.application.submit.ports import IdempotencyCache
from submission.infrastructure.messaging import get_async_cache_client

if TYPE_CHECKING:
    import redis.asyncio as aioredis

logger = logging.getLogger(__name__)

KEY_PREFIX = "submission:idempotency"
IN_PROGRESS_MARKER = {"status": "in_progress"}


class IdempotencyCacheRedis(IdempotencyCache):
    """멱등성 캐시 Redis Adapter.

    Redis 장애 시에도 제출 자체는 진행된다 (조회 실패 = 캐시 miss).

    Key 패턴: submission:idempotency:{key}
    값: 처리 중 마커 {"status": "in_progress"} 또는 SubmissionOutcome dict
    """

    def __init__(
        self,
        client_factory: Callable[[], Awaitable["aioredis.Redis"]] = get_async_cache_client,
    ):
        self._client_factory = client_factory

    @staticmethod
    def _cache_key(key: str) -> str:
        return f"{KEY_PREFIX}:{key}"

    async def get(self, key: str) -> dict[str, Any] | None:
        """캐시된 결과 조회."""
        try:
            client = await self._client_factory()
            data = await client.get(self._cache_key(key))
            if data:
                return json.loads(data)
        except Exception as e:
            logger.warning(
                "idempotency_cache_get_failed",
                extra={"key": key, "error": str(e)},
            )

        return None

    async def set(self, key: str, response: dict[str, Any], ttl: int) -> None:
        """결과 캐시 저장."""
        try:
            client = await self._client_factory()
            await client.setex(self._cache_key(key), ttl, json.dumps(response))
            logger.debug(
                "idempotency_cache_set",
                extra={"key": key, "ttl": ttl},
            )
        except Exception as e:
            logger.warning(
                "idempotency_cache_set_failed",
                extra={"key": key, "error": str(e)},
            )

    async def claim(self, key: str, ttl: int) -> bool:
        """처리 중 마커를 SET NX EX 로 원자적으로 기록.

        Redis 장애 시 True (제출은 진행, 멱등성 보장 없음).
        """
        try:
            client = await self._client_factory()
            claimed = await client.set(
                self._cache_key(key), json.dumps(IN_PROGRESS_MARKER), nx=True, ex=ttl
            )
            return bool(claimed)
        except Exception as e:
            logger.warning(
                "idempotency_cache_claim_failed",
                extra={"key": key, "error": str(e)},
            )
            return True

    async def release(self, key: str) -> None:
        """처리 중 마커 삭제."""
        try:
            client = await self._client_factory()
            await client.delete(self._cache_key(key))
        except Exception as e:
            logger.warning(
                "idempotency_cache_release_failed",
                extra={"key": key, "error": str(e)},
            )
