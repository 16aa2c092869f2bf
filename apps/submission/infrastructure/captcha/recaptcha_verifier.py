"""reCAPTCHA v3 HTTP 클라이언트.

CaptchaVerifier Port 의 HTTP 구현체.
- 검증: POST {verify_url}?secret=...&response=<token>
- 응답: { success: bool, action: str, score: float, ... }

success, action, score 세 조건을 모두 만족해야 통과한다.
전송 오류/비정상 응답은 모두 False (fail closed).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from submission.application.submit.ports import CaptchaVerifier
from submission.setup.constants import (
    CAPTCHA_ACTION_SUBMIT_RECEIPT,
    CAPTCHA_MIN_SCORE,
    RECAPTCHA_VERIFY_URL,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


class RecaptchaVerifier(CaptchaVerifier):
    """reCAPTCHA v3 서버 측 검증기.

    Usage:
        verifier = RecaptchaVerifier(secret_key="xxx")
        passed = await verifier.verify(token)
        await verifier.close()
    """

    def __init__(
        self,
        secret_key: str,
        verify_url: str = RECAPTCHA_VERIFY_URL,
        expected_action: str = CAPTCHA_ACTION_SUBMIT_RECEIPT,
        min_score: float = CAPTCHA_MIN_SCORE,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """초기화.

        Args:
            secret_key: reCAPTCHA 서버 secret
            verify_url: 검증 엔드포인트
            expected_action: 클라이언트가 보고해야 하는 action 라벨
            min_score: 최소 허용 점수 (이상이면 통과)
            timeout: 요청 타임아웃 (초)
            transport: 테스트용 httpx transport
        """
        self._secret_key = secret_key
        self._verify_url = verify_url
        self._expected_action = expected_action
        self._min_score = min_score
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Lazy HTTP 클라이언트 생성."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
            logger.info("reCAPTCHA HTTP client created")
        return self._client

    async def verify(self, token: str) -> bool:
        if not token:
            return False

        try:
            client = await self._get_client()
            response = await client.post(
                self._verify_url,
                params={"secret": self._secret_key, "response": token},
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            logger.warning(
                "captcha_verification_request_failed",
                extra={"error_type": type(e).__name__, "error": str(e)},
            )
            return False
        except ValueError as e:
            logger.warning("captcha_verification_invalid_body", extra={"error": str(e)})
            return False

        return self._is_admitted(body)

    def _is_admitted(self, body: Any) -> bool:
        if not isinstance(body, dict):
            return False

        success = body.get("success") is True
        action = body.get("action")
        score = body.get("score")
        score_ok = (
            isinstance(score, (int, float))
            and not isinstance(score, bool)
            and score >= self._min_score
        )
        action_ok = action == self._expected_action

        if not (success and action_ok and score_ok):
            logger.info(
                "captcha_verification_rejected",
                extra={
                    "success": body.get("success"),
                    "action": action,
                    "score": score,
                    "error_codes": body.get("error-codes"),
                },
            )
            return False
        return True

    async def close(self) -> None:
        """HTTP 클라이언트 종료."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
