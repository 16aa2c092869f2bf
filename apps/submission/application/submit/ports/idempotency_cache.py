"""Idempotency Cache Port - 멱등성 캐시 인터페이스."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IdempotencyCache(ABC):
    """멱등성 캐시 Port.

    동일한 제출이 재시도될 때 보상이 두 번 지급되는 것을 막는다.
    X-Idempotency-Key 헤더로 클라이언트가 키를 제공한다.

    키 수명:
        claim() → (처리 중 마커) → set() 으로 결과 덮어쓰기
                                 → release() 로 삭제 (실패 시)
    """

    @abstractmethod
    async def claim(self, key: str, ttl: int) -> bool:
        """키 선점 (원자적, 키가 없을 때만 처리 중 마커 저장).

        Args:
            key: Idempotency key
            ttl: 마커 TTL (초)

        Returns:
            선점에 성공하면 True, 이미 키가 있으면 False
        """
        ...

    @abstractmethod
    async def get(self, key: str) -> dict[str, Any] | None:
        """캐시된 결과 조회.

        Args:
            key: Idempotency key

        Returns:
            캐시된 결과 또는 None (처리 중 마커는 결과 형식이 아님)
        """
        ...

    @abstractmethod
    async def set(self, key: str, response: dict[str, Any], ttl: int) -> None:
        """결과 캐시 저장 (처리 중 마커를 덮어씀).

        Args:
            key: Idempotency key
            response: 캐시할 결과
            ttl: TTL (초)
        """
        ...

    @abstractmethod
    async def release(self, key: str) -> None:
        """선점 해제 (제출이 예외로 끝났을 때)."""
        ...
