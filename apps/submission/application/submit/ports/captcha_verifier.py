"""Captcha Verifier Port - 사람 여부 검증 인터페이스."""

from __future__ import annotations

from abc import ABC, abstractmethod


class CaptchaVerifier(ABC):
    """Captcha 검증 Port.

    전송/벤더 오류는 예외로 올리지 않고 False로 반환해야 한다 (fail closed).
    """

    @abstractmethod
    async def verify(self, token: str) -> bool:
        """클라이언트 토큰 검증.

        Args:
            token: 클라이언트가 발급받은 불투명 토큰 (빈 문자열 허용)

        Returns:
            success, action, score 조건을 모두 만족하면 True
        """
        ...

    async def close(self) -> None:
        """보유한 커넥션 정리 (기본: 없음)."""
        return None
