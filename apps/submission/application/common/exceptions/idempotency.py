"""멱등성 관련 애플리케이션 예외."""

from submission.application.common.exceptions.base import ApplicationError


class SubmissionInProgressError(ApplicationError):
    """같은 멱등성 키의 제출이 아직 처리 중."""

    status_code = 409
    code = "SUBMISSION_IN_PROGRESS"

    def __init__(self, idempotency_key: str | None = None) -> None:
        self.idempotency_key = idempotency_key
        super().__init__("Submission with this idempotency key is already in progress")
