"""SubmissionPipeline Tests.

검증 포인트:
1. 단계 순서: quota → 판정 → (승인 시) 보상
2. quota 초과 시 판정/보상 없음
3. validityFactor != 1 이면 보상 호출 없음
4. 보상 실패는 예외가 아니라 rewardIssued=False
5. 멱등성 키 재시도 시 어떤 단계도 다시 실행하지 않음
6. 같은 키의 동시 요청은 보상 1회, 나머지는 409
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import OTHER_ADDRESS, VALID_ADDRESS
from submission.application.common.exceptions import (
    LedgerUnavailableError,
    SubmissionInProgressError,
    ValidationServiceError,
)
from submission.application.submit.commands import SubmissionPipeline, SubmitReceiptRequest
from submission.application.submit.ports import IdempotencyCache
from submission.domain.exceptions import (
    InvalidAddressError,
    InvalidImageFormatError,
    QuotaExceededError,
)
from submission.domain.value_objects import SubmissionOutcome, ValidationVerdict, WalletAddress

REWARD_AMOUNT = 1000


@pytest.fixture
def pipeline(mock_claim_validator, mock_ledger_gateway, mock_idempotency_cache):
    """Pipeline 인스턴스."""
    return SubmissionPipeline(
        claim_validator=mock_claim_validator,
        ledger_gateway=mock_ledger_gateway,
        reward_amount=REWARD_AMOUNT,
        idempotency_cache=mock_idempotency_cache,
        clock=lambda: 1_700_000_000_000,
    )


@pytest.fixture
def request_factory(image_data_uri):
    def _make(**overrides) -> SubmitReceiptRequest:
        fields = {
            "image": image_data_uri,
            "address": VALID_ADDRESS,
            "device_id": "device-1",
        }
        fields.update(overrides)
        return SubmitReceiptRequest(**fields)

    return _make


class TestSubmitReceiptRequest:
    """SubmitReceiptRequest DTO 테스트."""

    def test_optional_idempotency_key(self, image_data_uri):
        request = SubmitReceiptRequest(
            image=image_data_uri, address=VALID_ADDRESS, device_id="device-1"
        )
        assert request.idempotency_key is None


class TestSubmissionPipelineConstruction:
    def test_rejects_non_positive_reward(self, mock_claim_validator, mock_ledger_gateway):
        with pytest.raises(ValueError):
            SubmissionPipeline(
                claim_validator=mock_claim_validator,
                ledger_gateway=mock_ledger_gateway,
                reward_amount=0,
            )


class TestSubmissionPipelineScenarios:
    """End-to-end 시나리오 (외부 협력자는 Mock)."""

    @pytest.mark.anyio
    async def test_approved_submission_is_rewarded(
        self, pipeline, request_factory, mock_claim_validator, mock_ledger_gateway
    ):
        """quota 여유 + validityFactor=1 → 승인, 보상 1회."""
        outcome = await pipeline.submit(request_factory())

        assert outcome.approved is True
        assert outcome.reward_issued is True
        mock_ledger_gateway.issue_reward.assert_awaited_once()
        address, amount = mock_ledger_gateway.issue_reward.await_args.args
        assert address == WalletAddress(VALID_ADDRESS)
        assert amount == REWARD_AMOUNT

    @pytest.mark.anyio
    async def test_quota_exceeded_aborts_before_classification(
        self, pipeline, request_factory, mock_claim_validator, mock_ledger_gateway
    ):
        """quota 초과 → QuotaExceededError, 판정/보상 호출 없음."""
        mock_ledger_gateway.check_quota.side_effect = QuotaExceededError(VALID_ADDRESS)

        with pytest.raises(QuotaExceededError):
            await pipeline.submit(request_factory())

        mock_claim_validator.validate.assert_not_awaited()
        mock_ledger_gateway.issue_reward.assert_not_awaited()

    @pytest.mark.anyio
    async def test_rejected_submission_is_not_rewarded(
        self, pipeline, request_factory, mock_claim_validator, mock_ledger_gateway,
        rejected_verdict,
    ):
        """validityFactor=0 → 반려, 원장 쓰기 없음."""
        mock_claim_validator.validate.return_value = rejected_verdict

        outcome = await pipeline.submit(request_factory())

        assert outcome.approved is False
        assert outcome.reward_issued is False
        assert outcome.verdict == rejected_verdict
        mock_ledger_gateway.issue_reward.assert_not_awaited()

    @pytest.mark.anyio
    async def test_reward_failure_still_returns_outcome(
        self, pipeline, request_factory, mock_ledger_gateway
    ):
        """보상 트랜잭션 실패 → 승인은 유지, rewardIssued=False."""
        mock_ledger_gateway.issue_reward.return_value = False

        outcome = await pipeline.submit(request_factory())

        assert outcome.approved is True
        assert outcome.reward_issued is False


class TestSubmissionPipelineInvariants:
    """단계 순서 및 보상 조건 테스트."""

    @pytest.mark.anyio
    @pytest.mark.parametrize("factor", [0, 0.5, 0.99, 0.7, 1.01])
    async def test_reward_never_issued_unless_exactly_one(
        self, pipeline, request_factory, mock_claim_validator, mock_ledger_gateway, factor
    ):
        mock_claim_validator.validate.return_value = ValidationVerdict(validity_factor=factor)

        outcome = await pipeline.submit(request_factory())

        assert outcome.approved is False
        mock_ledger_gateway.issue_reward.assert_not_awaited()

    @pytest.mark.anyio
    async def test_stages_run_in_order(
        self, mock_claim_validator, mock_ledger_gateway, request_factory
    ):
        manager = MagicMock()
        manager.attach_mock(mock_ledger_gateway.check_quota, "check_quota")
        manager.attach_mock(mock_claim_validator.validate, "validate")
        manager.attach_mock(mock_ledger_gateway.issue_reward, "issue_reward")
        pipeline = SubmissionPipeline(
            claim_validator=mock_claim_validator,
            ledger_gateway=mock_ledger_gateway,
            reward_amount=REWARD_AMOUNT,
        )

        await pipeline.submit(request_factory())

        assert [c[0] for c in manager.mock_calls] == ["check_quota", "validate", "issue_reward"]

    @pytest.mark.anyio
    async def test_validator_receives_image_only(
        self, pipeline, request_factory, mock_claim_validator, image_data_uri
    ):
        await pipeline.submit(request_factory())

        (image,) = mock_claim_validator.validate.await_args.args
        assert image.data_uri == image_data_uri

    @pytest.mark.anyio
    async def test_validation_error_propagates_without_reward(
        self, pipeline, request_factory, mock_claim_validator, mock_ledger_gateway
    ):
        mock_claim_validator.validate.side_effect = ValidationServiceError("malformed")

        with pytest.raises(ValidationServiceError):
            await pipeline.submit(request_factory())

        mock_ledger_gateway.issue_reward.assert_not_awaited()

    @pytest.mark.anyio
    async def test_ledger_unavailable_propagates(
        self, pipeline, request_factory, mock_claim_validator, mock_ledger_gateway
    ):
        mock_ledger_gateway.check_quota.side_effect = LedgerUnavailableError("timeout")

        with pytest.raises(LedgerUnavailableError):
            await pipeline.submit(request_factory())

        mock_claim_validator.validate.assert_not_awaited()

    @pytest.mark.anyio
    async def test_invalid_image_fails_after_quota_check(
        self, pipeline, request_factory, mock_claim_validator, mock_ledger_gateway
    ):
        with pytest.raises(InvalidImageFormatError):
            await pipeline.submit(request_factory(image="not-an-image"))

        mock_ledger_gateway.check_quota.assert_awaited_once()
        mock_claim_validator.validate.assert_not_awaited()

    @pytest.mark.anyio
    async def test_quota_is_reported_before_image_format(
        self, pipeline, request_factory, mock_ledger_gateway
    ):
        """한도 도달 계정이 잘못된 이미지를 보내도 409 (quota 가 먼저)."""
        mock_ledger_gateway.check_quota.side_effect = QuotaExceededError(VALID_ADDRESS)

        with pytest.raises(QuotaExceededError):
            await pipeline.submit(request_factory(image="not-an-image"))

    @pytest.mark.anyio
    async def test_invalid_address_fails_before_any_stage(
        self, pipeline, request_factory, mock_ledger_gateway, mock_idempotency_cache
    ):
        with pytest.raises(InvalidAddressError):
            await pipeline.submit(request_factory(address="0x" + "z" * 40, idempotency_key="k"))

        mock_ledger_gateway.check_quota.assert_not_awaited()
        mock_idempotency_cache.claim.assert_not_awaited()

    @pytest.mark.anyio
    async def test_works_without_idempotency_cache(
        self, mock_claim_validator, mock_ledger_gateway, request_factory
    ):
        pipeline = SubmissionPipeline(
            claim_validator=mock_claim_validator,
            ledger_gateway=mock_ledger_gateway,
            reward_amount=REWARD_AMOUNT,
        )

        outcome = await pipeline.submit(request_factory(idempotency_key="key-1"))

        assert outcome.reward_issued is True


class InMemoryIdempotencyCache(IdempotencyCache):
    """SET NX 의미를 그대로 따르는 인메모리 캐시."""

    def __init__(self):
        self.entries: dict[str, dict] = {}

    async def claim(self, key: str, ttl: int) -> bool:
        if key in self.entries:
            return False
        self.entries[key] = {"status": "in_progress"}
        return True

    async def get(self, key: str):
        return self.entries.get(key)

    async def set(self, key: str, response: dict, ttl: int) -> None:
        self.entries[key] = response

    async def release(self, key: str) -> None:
        self.entries.pop(key, None)


class TestSubmissionPipelineIdempotency:
    """X-Idempotency-Key 재시도 테스트."""

    @pytest.mark.anyio
    async def test_cached_outcome_skips_all_stages(
        self, pipeline, request_factory, mock_claim_validator, mock_ledger_gateway,
        mock_idempotency_cache,
    ):
        mock_idempotency_cache.claim.return_value = False
        mock_idempotency_cache.get.return_value = {
            "approved": True,
            "rewardIssued": True,
            "validation": {"validityFactor": 1, "descriptionOfAnalysis": "cached"},
        }

        outcome = await pipeline.submit(request_factory(idempotency_key="key-1"))

        assert outcome.reward_issued is True
        assert outcome.verdict.description_of_analysis == "cached"
        mock_ledger_gateway.check_quota.assert_not_awaited()
        mock_claim_validator.validate.assert_not_awaited()
        mock_ledger_gateway.issue_reward.assert_not_awaited()
        mock_idempotency_cache.set.assert_not_awaited()
        mock_idempotency_cache.release.assert_not_awaited()

    @pytest.mark.anyio
    async def test_completed_outcome_is_cached(
        self, pipeline, request_factory, mock_idempotency_cache
    ):
        outcome = await pipeline.submit(request_factory(idempotency_key="key-1"))

        mock_idempotency_cache.set.assert_awaited_once()
        kwargs = mock_idempotency_cache.set.await_args.kwargs
        assert kwargs["key"] == f"{VALID_ADDRESS.lower()}:key-1"
        assert kwargs["response"] == outcome.to_dict()
        assert kwargs["ttl"] == 3600
        mock_idempotency_cache.release.assert_not_awaited()

    @pytest.mark.anyio
    async def test_key_is_claimed_before_quota_check(
        self, pipeline, request_factory, mock_ledger_gateway, mock_idempotency_cache
    ):
        manager = MagicMock()
        manager.attach_mock(mock_idempotency_cache.claim, "claim")
        manager.attach_mock(mock_ledger_gateway.check_quota, "check_quota")

        await pipeline.submit(request_factory(idempotency_key="key-1"))

        assert [c[0] for c in manager.mock_calls] == ["claim", "check_quota"]
        mock_idempotency_cache.claim.assert_awaited_once_with(
            f"{VALID_ADDRESS.lower()}:key-1", 300
        )

    @pytest.mark.anyio
    async def test_key_is_scoped_to_address(
        self, pipeline, request_factory, mock_idempotency_cache
    ):
        await pipeline.submit(request_factory(address=OTHER_ADDRESS, idempotency_key="key-1"))

        (key, _ttl) = mock_idempotency_cache.claim.await_args.args
        assert key == f"{OTHER_ADDRESS.lower()}:key-1"

    @pytest.mark.anyio
    async def test_duplicate_while_in_progress_is_rejected(
        self, pipeline, request_factory, mock_claim_validator, mock_ledger_gateway,
        mock_idempotency_cache,
    ):
        """선점 실패 + 저장된 결과 없음 (처리 중 마커) → 409, 어떤 단계도 실행 안 함."""
        mock_idempotency_cache.claim.return_value = False
        mock_idempotency_cache.get.return_value = {"status": "in_progress"}

        with pytest.raises(SubmissionInProgressError) as exc_info:
            await pipeline.submit(request_factory(idempotency_key="key-1"))

        assert exc_info.value.status_code == 409
        mock_ledger_gateway.check_quota.assert_not_awaited()
        mock_claim_validator.validate.assert_not_awaited()
        mock_ledger_gateway.issue_reward.assert_not_awaited()
        # 다른 요청의 마커는 건드리지 않는다
        mock_idempotency_cache.release.assert_not_awaited()

    @pytest.mark.anyio
    async def test_failed_submission_releases_claim(
        self, pipeline, request_factory, mock_ledger_gateway, mock_idempotency_cache
    ):
        mock_ledger_gateway.check_quota.side_effect = QuotaExceededError(VALID_ADDRESS)

        with pytest.raises(QuotaExceededError):
            await pipeline.submit(request_factory(idempotency_key="key-1"))

        mock_idempotency_cache.set.assert_not_awaited()
        mock_idempotency_cache.release.assert_awaited_once_with(f"{VALID_ADDRESS.lower()}:key-1")

    @pytest.mark.anyio
    async def test_release_failure_does_not_mask_original_error(
        self, pipeline, request_factory, mock_claim_validator, mock_idempotency_cache
    ):
        mock_claim_validator.validate.side_effect = ValidationServiceError("malformed")
        mock_idempotency_cache.release.side_effect = ConnectionError("redis down")

        with pytest.raises(ValidationServiceError):
            await pipeline.submit(request_factory(idempotency_key="key-1"))

    @pytest.mark.anyio
    async def test_no_key_skips_cache(self, pipeline, request_factory, mock_idempotency_cache):
        await pipeline.submit(request_factory())

        mock_idempotency_cache.claim.assert_not_awaited()
        mock_idempotency_cache.get.assert_not_awaited()
        mock_idempotency_cache.set.assert_not_awaited()

    @pytest.mark.anyio
    async def test_cache_failures_are_ignored(
        self, pipeline, request_factory, mock_idempotency_cache
    ):
        mock_idempotency_cache.claim.side_effect = ConnectionError("redis down")
        mock_idempotency_cache.set.side_effect = ConnectionError("redis down")

        outcome = await pipeline.submit(request_factory(idempotency_key="key-1"))

        assert outcome.reward_issued is True

    @pytest.mark.anyio
    async def test_concurrent_duplicates_reward_once(
        self, mock_claim_validator, mock_ledger_gateway, request_factory
    ):
        """같은 키로 동시에 들어온 두 요청 → 보상 트랜잭션은 한 번만."""

        async def slow_reward(address, amount):
            await asyncio.sleep(0.05)
            return True

        mock_ledger_gateway.issue_reward = AsyncMock(side_effect=slow_reward)
        cache = InMemoryIdempotencyCache()
        pipeline = SubmissionPipeline(
            claim_validator=mock_claim_validator,
            ledger_gateway=mock_ledger_gateway,
            reward_amount=REWARD_AMOUNT,
            idempotency_cache=cache,
        )
        request = request_factory(idempotency_key="key-1")

        results = await asyncio.gather(
            pipeline.submit(request), pipeline.submit(request), return_exceptions=True
        )

        assert mock_ledger_gateway.issue_reward.await_count == 1
        outcomes = [r for r in results if isinstance(r, SubmissionOutcome)]
        in_progress = [r for r in results if isinstance(r, SubmissionInProgressError)]
        assert len(outcomes) == 1
        assert len(in_progress) == 1
        assert outcomes[0].reward_issued is True

    @pytest.mark.anyio
    async def test_retry_after_completion_returns_stored_outcome(
        self, mock_claim_validator, mock_ledger_gateway, request_factory
    ):
        cache = InMemoryIdempotencyCache()
        pipeline = SubmissionPipeline(
            claim_validator=mock_claim_validator,
            ledger_gateway=mock_ledger_gateway,
            reward_amount=REWARD_AMOUNT,
            idempotency_cache=cache,
        )
        request = request_factory(idempotency_key="key-1")

        first = await pipeline.submit(request)
        second = await pipeline.submit(request)

        assert first == second
        mock_ledger_gateway.issue_reward.assert_awaited_once()

    @pytest.mark.anyio
    async def test_retry_after_failure_runs_again(
        self, mock_claim_validator, mock_ledger_gateway, request_factory
    ):
        cache = InMemoryIdempotencyCache()
        pipeline = SubmissionPipeline(
            claim_validator=mock_claim_validator,
            ledger_gateway=mock_ledger_gateway,
            reward_amount=REWARD_AMOUNT,
            idempotency_cache=cache,
        )
        request = request_factory(idempotency_key="key-1")
        mock_claim_validator.validate.side_effect = ValidationServiceError("timeout")

        with pytest.raises(ValidationServiceError):
            await pipeline.submit(request)
        mock_claim_validator.validate.side_effect = None

        outcome = await pipeline.submit(request)

        assert outcome.reward_issued is True
        assert cache.entries == {f"{VALID_ADDRESS.lower()}:key-1": outcome.to_dict()}
