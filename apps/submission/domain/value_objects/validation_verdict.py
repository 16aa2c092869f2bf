"""Validation Verdict Value Object."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

APPROVED_VALIDITY_FACTOR = 1


@dataclass(frozen=True, slots=True)
class ValidationVerdict:
    """분류 서비스의 영수증 판정 결과.

    Attributes:
        validity_factor: 유일한 승인 신호. 정확히 1일 때만 승인
        description_of_analysis: 사용자에게 보여줄 분석 설명 (제어 흐름에 사용하지 않음)
    """

    validity_factor: float
    description_of_analysis: str = ""

    @property
    def is_approved(self) -> bool:
        """validityFactor == 1 정확 일치 (임계값 아님)."""
        return self.validity_factor == APPROVED_VALIDITY_FACTOR

    @classmethod
    def from_payload(cls, payload: Any) -> ValidationVerdict:
        """분류 서비스 JSON 응답에서 생성.

        Raises:
            ValueError: dict가 아니거나 validityFactor 누락/숫자 아님
        """
        if not isinstance(payload, dict) or "validityFactor" not in payload:
            raise ValueError("validityFactor missing from classification response")

        factor = payload["validityFactor"]
        if isinstance(factor, bool) or not isinstance(factor, (int, float)):
            raise ValueError(f"validityFactor is not numeric: {factor!r}")
        if not math.isfinite(factor):
            raise ValueError(f"validityFactor is not finite: {factor!r}")

        description = payload.get("descriptionOfAnalysis")
        return cls(
            validity_factor=factor,
            description_of_analysis=str(description) if description is not None else "",
        )

    def to_dict(self) -> dict[str, Any]:
        """레거시 응답 형식 (camelCase)."""
        return {
            "validityFactor": self.validity_factor,
            "descriptionOfAnalysis": self.description_of_analysis,
        }
