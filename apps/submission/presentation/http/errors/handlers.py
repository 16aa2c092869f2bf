"""Exception Handlers.

도메인/애플리케이션 예외를 HTTP 응답으로 변환합니다.

응답 형식: {"message": ..., "code": ...} (+ prod 외 환경에서는 "stack")
"""

from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from submission.application.common.exceptions import ApplicationError
from submission.domain.exceptions import DomainError

logger = logging.getLogger(__name__)

UNHANDLED_ERROR_MESSAGE = "Something went wrong"


def _error_response(
    request: Request,
    exc: Exception,
    status_code: int,
    message: str,
    code: str,
    include_stack: bool,
) -> JSONResponse:
    log = logger.error if status_code >= 500 else logger.info
    log(
        f"[{request.method}] {request.url.path} >> StatusCode:: {status_code}, Message:: {message}",
        extra={"status_code": status_code, "error_code": code},
    )

    content: dict = {"message": message, "code": code}
    if include_stack:
        content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI, include_stack: bool = False) -> None:
    """예외 핸들러 등록.

    Args:
        app: FastAPI 앱
        include_stack: 응답에 stack trace 포함 여부 (prod 에서는 False)
    """

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        return _error_response(
            request, exc, exc.status_code, exc.message, exc.code, include_stack
        )

    @app.exception_handler(ApplicationError)
    async def application_error_handler(request: Request, exc: ApplicationError):
        return _error_response(
            request, exc, exc.status_code, exc.message, exc.code, include_stack
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = ", ".join(
            ".".join(str(part) for part in error.get("loc", ()) if part != "body")
            for error in exc.errors()
        )
        message = f"Invalid request: {fields}" if fields else "Invalid request"
        return _error_response(request, exc, 400, message, "INVALID_REQUEST", include_stack)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled_exception", extra={"path": request.url.path})
        return _error_response(
            request, exc, 500, UNHANDLED_ERROR_MESSAGE, "INTERNAL_ERROR", include_stack
        )
