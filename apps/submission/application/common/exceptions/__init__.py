"""Submission 애플리케이션 예외."""

from submission.application.common.exceptions.base import ApplicationError
from submission.application.common.exceptions.captcha import CaptchaVerificationError
from submission.application.common.exceptions.idempotency import SubmissionInProgressError
from submission.application.common.exceptions.ledger import LedgerUnavailableError
from submission.application.common.exceptions.validation import ValidationServiceError

__all__ = [
    "ApplicationError",
    "CaptchaVerificationError",
    "LedgerUnavailableError",
    "SubmissionInProgressError",
    "ValidationServiceError",
]
