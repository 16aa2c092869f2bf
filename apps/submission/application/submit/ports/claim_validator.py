"""Claim Validator Port - 영수증 이미지 판정 인터페이스."""

from __future__ import annotations

from abc import ABC, abstractmethod

from submission.domain.value_objects import EncodedImage, ValidationVerdict


class ClaimValidator(ABC):
    """영수증 판정 Port.

    이미지 외 제출 필드는 판정에 영향을 주지 않는다. 재시도하지 않는다.
    """

    @abstractmethod
    async def validate(self, image: EncodedImage) -> ValidationVerdict:
        """이미지 판정.

        Raises:
            ValidationServiceError: 응답 없음, 형식 오류, 호출 실패
        """
        ...

    async def close(self) -> None:
        """보유한 커넥션 정리 (기본: 없음)."""
        return None
