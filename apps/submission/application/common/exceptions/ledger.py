"""원장(컨트랙트) 관련 애플리케이션 예외."""

from submission.application.common.exceptions.base import ApplicationError


class LedgerUnavailableError(ApplicationError):
    """quota 조회를 완료하지 못함 (노드 장애/타임아웃)."""

    status_code = 503
    code = "LEDGER_UNAVAILABLE"

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason
        super().__init__("Ledger is temporarily unavailable")
