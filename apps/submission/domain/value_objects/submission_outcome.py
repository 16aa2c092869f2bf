"""Submission Outcome Value Object."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from submission.domain.value_objects.validation_verdict import ValidationVerdict


@dataclass(frozen=True, slots=True)
class SubmissionOutcome:
    """파이프라인 최종 결과.

    approved=True, reward_issued=False 조합은 "판정은 통과했지만 보상 트랜잭션 실패"를
    의미하며 정상 응답(200)으로 전달된다.
    """

    approved: bool
    verdict: ValidationVerdict
    reward_issued: bool = False

    def __post_init__(self) -> None:
        if self.reward_issued and not self.approved:
            raise ValueError("reward cannot be issued for a rejected submission")

    def to_dict(self) -> dict[str, Any]:
        return {
            "approved": self.approved,
            "rewardIssued": self.reward_issued,
            "validation": self.verdict.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SubmissionOutcome:
        """to_dict() 역변환 (멱등성 캐시 복원용)."""
        return cls(
            approved=bool(data["approved"]),
            verdict=ValidationVerdict.from_payload(data["validation"]),
            reward_issued=bool(data["rewardIssued"]),
        )
