"""Captcha 관련 애플리케이션 예외."""

from submission.application.common.exceptions.base import ApplicationError


class CaptchaVerificationError(ApplicationError):
    """captcha 검증 실패 (사람이 아닌 요청으로 간주)."""

    status_code = 403
    code = "CAPTCHA_VERIFICATION_FAILED"

    def __init__(self) -> None:
        super().__init__("Captcha verification failed")
