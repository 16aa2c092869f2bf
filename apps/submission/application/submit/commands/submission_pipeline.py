"""Submission Pipeline - 영수증 제출 검증 파이프라인.

단계 (첫 실패에서 중단):
1. timestamp 부여
2. quota 확인 → QuotaExceededError
3. 이미지 형식 확인 + 영수증 판정 → InvalidImageFormatError / ValidationServiceError
4. 승인 여부 = validityFactor == 1
5. 승인된 경우에만 보상 트랜잭션 (실패해도 예외 없이 rewardIssued=False)
6. SubmissionOutcome 반환

보상 트랜잭션은 되돌릴 수 없으므로 4단계 이전에는 어떤 쓰기 호출도 하지 않는다.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from submission.application.common.exceptions import (
    SubmissionInProgressError,
    ValidationServiceError,
)
from submission.application.submit.ports import (
    ClaimValidator,
    IdempotencyCache,
    SubmissionLedgerGateway,
)
from submission.domain.entities import Submission
from submission.domain.entities.submission import current_time_ms
from submission.domain.exceptions import QuotaExceededError
from submission.domain.value_objects import EncodedImage, SubmissionOutcome, WalletAddress
from submission.setup.metrics import track_outcome, track_stage

logger = logging.getLogger(__name__)

# Idempotency key TTL (1시간)
IDEMPOTENCY_TTL = 3600

# 처리 중 마커 TTL. 판정 + 보상 확정 대기 시간보다 길어야 한다.
IDEMPOTENCY_CLAIM_TTL = 300


@dataclass
class SubmitReceiptRequest:
    """영수증 제출 요청 DTO."""

    image: str
    address: str
    device_id: str
    idempotency_key: str | None = None


class SubmissionPipeline:
    """영수증 제출 Command.

    외부 협력자(판정 서비스, 원장)는 프로세스 시작 시 한 번 생성되어 주입된다.

    X-Idempotency-Key 처리:
    - quota 확인 전에 키를 원자적으로 선점한다.
    - 선점에 실패한 요청은 저장된 결과를 받거나, 아직 처리 중이면
      SubmissionInProgressError (409) 로 끝난다. 보상은 한 번만 지급된다.
    - 예외로 끝난 제출은 선점을 해제하여 재시도를 허용한다.
    """

    def __init__(
        self,
        claim_validator: ClaimValidator,
        ledger_gateway: SubmissionLedgerGateway,
        reward_amount: int,
        idempotency_cache: IdempotencyCache | None = None,
        idempotency_ttl: int = IDEMPOTENCY_TTL,
        clock: Callable[[], int] | None = None,
        max_image_bytes: int | None = None,
        idempotency_claim_ttl: int = IDEMPOTENCY_CLAIM_TTL,
    ):
        """초기화.

        Args:
            claim_validator: 영수증 판정 서비스
            ledger_gateway: 보상 컨트랙트 게이트웨이
            reward_amount: 승인 시 지급할 고정 보상량
            idempotency_cache: 멱등성 캐시 (None이면 비활성)
            idempotency_ttl: 결과 캐시 TTL (초)
            clock: epoch ms 를 반환하는 함수 (테스트 주입용)
            max_image_bytes: 이미지 최대 크기 (None이면 제한 없음)
            idempotency_claim_ttl: 처리 중 마커 TTL (초)
        """
        if reward_amount <= 0:
            raise ValueError("reward_amount must be positive")
        self._claim_validator = claim_validator
        self._ledger_gateway = ledger_gateway
        self._reward_amount = reward_amount
        self._idempotency_cache = idempotency_cache
        self._idempotency_ttl = idempotency_ttl
        self._idempotency_claim_ttl = idempotency_claim_ttl
        self._clock = clock or current_time_ms
        self._max_image_bytes = max_image_bytes

    @property
    def reward_amount(self) -> int:
        return self._reward_amount

    async def submit(self, request: SubmitReceiptRequest) -> SubmissionOutcome:
        """제출 실행.

        Raises:
            InvalidAddressError: 주소 형식 오류 (어떤 단계도 실행 전)
            SubmissionInProgressError: 같은 키의 제출이 처리 중
            QuotaExceededError: 사이클 한도 도달 (판정/보상 없음)
            LedgerUnavailableError: quota 조회 실패
            InvalidImageFormatError / ImageTooLargeError: 이미지 형식 오류 (quota 확인 후)
            ValidationServiceError: 판정 서비스 실패 (보상 없음)
        """
        address = WalletAddress.parse(request.address)

        # 0. Idempotency 선점 (재시도 시 어떤 단계도 다시 실행하지 않음)
        cache_key = self._cache_key(address, request.idempotency_key)
        if cache_key is not None:
            cached = await self._acquire(cache_key, address, request.idempotency_key)
            if cached is not None:
                return cached

        try:
            outcome = await self._run(request, address)
        except Exception:
            if cache_key is not None:
                await self._release(cache_key)
            raise

        if cache_key is not None:
            await self._store(cache_key, outcome)

        return outcome

    async def _run(self, request: SubmitReceiptRequest, address: WalletAddress) -> SubmissionOutcome:
        # 1. timestamp 부여
        timestamp = self._clock()
        logger.info(
            "submission_received",
            extra={
                "address": address.value,
                "device_id": request.device_id,
                "timestamp": timestamp,
            },
        )

        # 2. Quota 확인
        try:
            with track_stage("quota"):
                await self._ledger_gateway.check_quota(address)
        except QuotaExceededError:
            logger.info(
                "submission_quota_exceeded",
                extra={"address": address.value, "device_id": request.device_id},
            )
            track_outcome("quota_exceeded")
            raise

        # 3. 이미지 형식 확인 후 영수증 판정
        submission = Submission.create(
            image=EncodedImage.from_data_uri(request.image, self._max_image_bytes),
            address=address,
            device_id=request.device_id,
            now_ms=timestamp,
        )
        try:
            with track_stage("classification"):
                verdict = await self._claim_validator.validate(submission.image)
        except ValidationServiceError as e:
            logger.warning(
                "submission_validation_failed",
                extra={"address": submission.address.value, "reason": e.reason},
            )
            track_outcome("validation_error")
            raise

        # 4. 승인 여부
        approved = verdict.is_approved
        logger.info(
            "submission_validated",
            extra={
                "address": submission.address.value,
                "device_id": submission.device_id,
                "image_bytes": submission.image.size_bytes,
                "validity_factor": verdict.validity_factor,
                "approved": approved,
            },
        )

        # 5. 승인된 경우에만 보상
        reward_issued = False
        if approved:
            with track_stage("reward"):
                reward_issued = await self._ledger_gateway.issue_reward(
                    submission.address, self._reward_amount
                )
            if not reward_issued:
                logger.warning(
                    "submission_reward_failed",
                    extra={"address": submission.address.value, "amount": self._reward_amount},
                )

        # 6. 결과 반환
        outcome = SubmissionOutcome(approved=approved, verdict=verdict, reward_issued=reward_issued)
        track_outcome(self._outcome_label(outcome))
        logger.info(
            "submission_completed",
            extra={
                "address": submission.address.value,
                "device_id": submission.device_id,
                "approved": outcome.approved,
                "reward_issued": outcome.reward_issued,
            },
        )
        return outcome

    @staticmethod
    def _cache_key(address: WalletAddress, idempotency_key: str | None) -> str | None:
        # 다른 계정의 결과를 키만으로 조회할 수 없도록 주소로 범위를 한정
        if not idempotency_key:
            return None
        return f"{address.normalized}:{idempotency_key}"

    @staticmethod
    def _outcome_label(outcome: SubmissionOutcome) -> str:
        if not outcome.approved:
            return "rejected"
        return "rewarded" if outcome.reward_issued else "reward_failed"

    async def _acquire(
        self, cache_key: str, address: WalletAddress, idempotency_key: str | None
    ) -> SubmissionOutcome | None:
        """키 선점. 이미 완료된 제출이면 저장된 결과를 반환.

        Raises:
            SubmissionInProgressError: 선점 실패 + 저장된 결과 없음
        """
        if self._idempotency_cache is None:
            return None

        try:
            claimed = await self._idempotency_cache.claim(cache_key, self._idempotency_claim_ttl)
        except Exception as e:
            # 캐시 장애 시 제출은 진행 (fail open)
            logger.warning("idempotency_claim_failed", extra={"key": cache_key, "error": str(e)})
            return None
        if claimed:
            return None

        cached = await self._load_cached(cache_key)
        if cached is not None:
            logger.info(
                "submission_idempotent_hit",
                extra={"address": address.value, "idempotency_key": idempotency_key},
            )
            track_outcome("idempotent_hit")
            return cached

        logger.info(
            "submission_in_progress",
            extra={"address": address.value, "idempotency_key": idempotency_key},
        )
        track_outcome("in_progress")
        raise SubmissionInProgressError(idempotency_key)

    async def _load_cached(self, cache_key: str) -> SubmissionOutcome | None:
        try:
            cached = await self._idempotency_cache.get(cache_key)
            if cached is None:
                return None
            return SubmissionOutcome.from_dict(cached)
        except Exception as e:
            # 처리 중 마커도 결과 형식이 아니므로 여기서 None
            logger.debug(
                "idempotency_entry_unreadable",
                extra={"key": cache_key, "error": str(e)},
            )
            return None

    async def _store(self, cache_key: str, outcome: SubmissionOutcome) -> None:
        try:
            await self._idempotency_cache.set(
                key=cache_key,
                response=outcome.to_dict(),
                ttl=self._idempotency_ttl,
            )
            logger.debug("idempotency_key_saved", extra={"key": cache_key})
        except Exception as e:
            logger.warning(
                "idempotency_store_failed",
                extra={"key": cache_key, "error": str(e)},
            )

    async def _release(self, cache_key: str) -> None:
        try:
            await self._idempotency_cache.release(cache_key)
        except Exception as e:
            logger.warning(
                "idempotency_release_failed",
                extra={"key": cache_key, "error": str(e)},
            )
