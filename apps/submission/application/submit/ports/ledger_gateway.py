"""Submission Ledger Gateway Port - 보상 컨트랙트 인터페이스."""

from __future__ import annotations

from abc import ABC, abstractmethod

from submission.domain.value_objects import WalletAddress


class SubmissionLedgerGateway(ABC):
    """원장 Port.

    check_quota 는 읽기 전용, issue_reward 는 되돌릴 수 없는 트랜잭션.
    판정 결과 확인은 호출자(SubmissionPipeline) 책임이다.
    """

    @abstractmethod
    async def check_quota(self, address: WalletAddress) -> None:
        """현재 사이클 제출 한도 확인.

        Raises:
            QuotaExceededError: 한도 도달
            LedgerUnavailableError: 조회 실패
        """
        ...

    @abstractmethod
    async def issue_reward(self, address: WalletAddress, amount: int) -> bool:
        """보상 트랜잭션 전송 후 확정까지 대기.

        Returns:
            확정 + revert 아님이면 True. 전송 오류 포함 그 외 모두 False (예외 없음)
        """
        ...

    async def close(self) -> None:
        """보유한 커넥션 정리 (기본: 없음)."""
        return None
