"""Captcha Gate - 파이프라인 진입 전 사람 여부 확인."""

from __future__ import annotations

import logging

from submission.application.common.exceptions import CaptchaVerificationError
from submission.application.submit.ports import CaptchaVerifier
from submission.setup.metrics import track_captcha

logger = logging.getLogger(__name__)


class CaptchaGate:
    """boundary 계층에서 SubmissionPipeline 이전에 실행되는 게이트.

    enabled=False 인 배포에서는 검증을 건너뛴다.
    """

    def __init__(self, verifier: CaptchaVerifier | None, enabled: bool = True):
        if enabled and verifier is None:
            raise ValueError("captcha verifier is required when the gate is enabled")
        self._verifier = verifier
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def ensure_human(self, token: str | None) -> None:
        """검증 실패 시 CaptchaVerificationError.

        토큰 누락은 검증 실패와 동일하게 취급한다.
        """
        if not self._enabled:
            track_captcha("skipped")
            return

        passed = bool(token) and await self._verifier.verify(token)
        track_captcha("passed" if passed else "failed")
        if not passed:
            logger.info("captcha_rejected", extra={"has_response": bool(token)})
            raise CaptchaVerificationError()
