"""Submission Dependencies - FastAPI Dependency Injection.

외부 협력자(captcha, 판정 서비스, 원장)는 프로세스당 한 번 생성하여
SubmissionPipeline 에 참조로 주입한다. 요청마다 재생성하지 않는다.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from submission.application.submit.commands import CaptchaGate, SubmissionPipeline
from submission.application.submit.ports import (
    CaptchaVerifier,
    ClaimValidator,
    IdempotencyCache,
    SubmissionLedgerGateway,
)
from submission.infrastructure.captcha import RecaptchaVerifier
from submission.infrastructure.classifier import OpenAIClaimValidator
from submission.infrastructure.ledger import Web3LedgerGateway
from submission.infrastructure.persistence_redis import IdempotencyCacheRedis
from submission.setup.config import Settings, get_settings

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────────────────
# Infrastructure Dependencies
# ─────────────────────────────────────────────────────────────────────────────


@lru_cache
def get_captcha_verifier() -> CaptchaVerifier:
    """reCAPTCHA Verifier 인스턴스 반환."""
    settings = get_settings()
    if settings.recaptcha_secret_key is None:
        raise RuntimeError("RECAPTCHA_SECRET_KEY is required when captcha is enabled")
    return RecaptchaVerifier(
        secret_key=settings.recaptcha_secret_key.get_secret_value(),
        verify_url=settings.recaptcha_verify_url,
        expected_action=settings.captcha_expected_action,
        min_score=settings.captcha_min_score,
        timeout=settings.captcha_timeout_seconds,
    )


@lru_cache
def get_claim_validator() -> ClaimValidator:
    """OpenAI Claim Validator 인스턴스 반환."""
    settings = get_settings()
    return OpenAIClaimValidator.from_api_key(
        api_key=settings.openai_api_key.get_secret_value(),
        model=settings.openai_model,
        max_tokens=settings.openai_max_tokens,
        timeout_seconds=settings.classifier_timeout_seconds,
    )


@lru_cache
def get_ledger_gateway() -> SubmissionLedgerGateway:
    """EcoEarn Ledger Gateway 인스턴스 반환."""
    settings = get_settings()
    if not settings.ecoearn_contract_address:
        raise RuntimeError("ECOEARN_CONTRACT_ADDRESS is required")
    if settings.admin_private_key is None:
        raise RuntimeError("ADMIN_PRIVATE_KEY is required")
    return Web3LedgerGateway.from_rpc_url(
        rpc_url=settings.ledger_rpc_url,
        contract_address=settings.ecoearn_contract_address,
        private_key=settings.admin_private_key.get_secret_value(),
        call_timeout=settings.ledger_call_timeout_seconds,
        receipt_timeout=settings.ledger_receipt_timeout_seconds,
    )


@lru_cache
def get_idempotency_cache() -> IdempotencyCache:
    """Idempotency Cache 인스턴스 반환."""
    return IdempotencyCacheRedis()


# ─────────────────────────────────────────────────────────────────────────────
# Application Dependencies (Commands)
# ─────────────────────────────────────────────────────────────────────────────


@lru_cache
def get_captcha_gate() -> CaptchaGate:
    """Captcha Gate 인스턴스 반환.

    Note:
        captcha_enabled=False 이면 verifier 를 만들지 않는다 (secret 불필요).
    """
    settings = get_settings()
    verifier = get_captcha_verifier() if settings.captcha_enabled else None
    return CaptchaGate(verifier=verifier, enabled=settings.captcha_enabled)


@lru_cache
def get_submission_pipeline() -> SubmissionPipeline:
    """Submission Pipeline 인스턴스 반환."""
    settings = get_settings()
    return SubmissionPipeline(
        claim_validator=get_claim_validator(),
        ledger_gateway=get_ledger_gateway(),
        reward_amount=settings.reward_amount,
        idempotency_cache=get_idempotency_cache(),
        idempotency_ttl=settings.idempotency_ttl,
        idempotency_claim_ttl=settings.idempotency_claim_ttl,
        max_image_bytes=settings.max_image_bytes,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Type Aliases for Dependency Injection
# ─────────────────────────────────────────────────────────────────────────────


SettingsDep = Annotated[Settings, Depends(get_settings)]
CaptchaGateDep = Annotated[CaptchaGate, Depends(get_captcha_gate)]
SubmissionPipelineDep = Annotated[SubmissionPipeline, Depends(get_submission_pipeline)]


# ─────────────────────────────────────────────────────────────────────────────
# Lifecycle
# ─────────────────────────────────────────────────────────────────────────────


async def close_dependencies() -> None:
    """이미 생성된 외부 협력자만 종료 (shutdown 시 호출).

    아직 만들어지지 않은 singleton 은 생성하지 않는다.
    captcha 가 비활성이면 verifier 가 없으므로 건너뛴다.
    """
    for factory in (get_captcha_verifier, get_claim_validator, get_ledger_gateway):
        if factory.cache_info().currsize == 0:
            continue
        try:
            await factory().close()
        except Exception as e:
            logger.warning(
                "dependency_close_failed",
                extra={"dependency": factory.__name__, "error": str(e)},
            )
        factory.cache_clear()

    # 닫힌 협력자를 참조하는 command 도 폐기
    get_captcha_gate.cache_clear()
    get_submission_pipeline.cache_clear()
