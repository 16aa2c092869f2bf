"""Submission 도메인 예외."""

from submission.domain.exceptions.base import DomainError
from submission.domain.exceptions.submission import (
    ImageTooLargeError,
    InvalidAddressError,
    InvalidImageFormatError,
    QuotaExceededError,
)

__all__ = [
    "DomainError",
    "ImageTooLargeError",
    "InvalidAddressError",
    "InvalidImageFormatError",
    "QuotaExceededError",
]
