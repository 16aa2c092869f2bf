"""Base application exceptions."""

from __future__ import annotations


class ApplicationError(Exception):
    """애플리케이션 계층 기본 예외.

    status_code / code 는 presentation 계층의 HTTP 변환에 사용된다.
    """

    status_code: int = 500
    code: str = "APPLICATION_ERROR"

    def __init__(self, message: str = "Application error occurred") -> None:
        self.message = message
        super().__init__(message)
