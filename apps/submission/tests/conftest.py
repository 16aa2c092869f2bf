"""Pytest configuration for submission tests."""

import base64
import os
from unittest.mock import AsyncMock, MagicMock

import pytest

# 테스트용 환경변수 설정 (Settings 로드 전에 필요)
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("LOG_FORMAT", "text")

from submission.application.submit.ports import (  # noqa: E402
    ClaimValidator,
    IdempotencyCache,
    SubmissionLedgerGateway,
)
from submission.domain.value_objects import ValidationVerdict  # noqa: E402

VALID_ADDRESS = "0x" + "a1" * 20
OTHER_ADDRESS = "0x" + "B2" * 20


def make_data_uri(payload: bytes = b"\x89PNG\r\n\x1a\nreceipt", subtype: str = "png") -> str:
    """테스트용 data URI."""
    return f"data:image/{subtype};base64,{base64.b64encode(payload).decode()}"


@pytest.fixture
def anyio_backend():
    """Use asyncio backend for anyio."""
    return "asyncio"


@pytest.fixture
def image_data_uri() -> str:
    return make_data_uri()


@pytest.fixture
def approved_verdict() -> ValidationVerdict:
    return ValidationVerdict(validity_factor=1, description_of_analysis="Valid receipt")


@pytest.fixture
def rejected_verdict() -> ValidationVerdict:
    return ValidationVerdict(validity_factor=0, description_of_analysis="Not a receipt")


@pytest.fixture
def mock_claim_validator(approved_verdict):
    """Mock ClaimValidator (기본: 승인)."""
    validator = MagicMock(spec=ClaimValidator)
    validator.validate = AsyncMock(return_value=approved_verdict)
    return validator


@pytest.fixture
def mock_ledger_gateway():
    """Mock SubmissionLedgerGateway (기본: quota 여유, 보상 성공)."""
    gateway = MagicMock(spec=SubmissionLedgerGateway)
    gateway.check_quota = AsyncMock(return_value=None)
    gateway.issue_reward = AsyncMock(return_value=True)
    return gateway


@pytest.fixture
def mock_idempotency_cache():
    """Mock IdempotencyCache (기본: 선점 성공, 저장된 결과 없음)."""
    cache = MagicMock(spec=IdempotencyCache)
    cache.claim = AsyncMock(return_value=True)
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock()
    cache.release = AsyncMock()
    return cache
