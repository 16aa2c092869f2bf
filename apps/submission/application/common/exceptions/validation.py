"""영수증 판정 관련 애플리케이션 예외."""

from submission.application.common.exceptions.base import ApplicationError


class ValidationServiceError(ApplicationError):
    """분류 서비스 응답 없음/형식 오류/호출 실패."""

    status_code = 500
    code = "VALIDATION_SERVICE_ERROR"

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason
        super().__init__("Error validating image")
