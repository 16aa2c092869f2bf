"""Submission 도메인 예외."""

from submission.domain.exceptions.base import DomainError


class QuotaExceededError(DomainError):
    """현재 보상 사이클의 최대 제출 횟수 도달."""

    status_code = 409
    code = "QUOTA_EXCEEDED"

    def __init__(self, address: str | None = None) -> None:
        self.address = address
        super().__init__("EcoEarn: Max submissions reached for this cycle")


class InvalidImageFormatError(DomainError):
    """data:image/*;base64 형식이 아닌 이미지."""

    code = "INVALID_IMAGE_FORMAT"

    def __init__(self) -> None:
        super().__init__("Invalid image format")


class ImageTooLargeError(DomainError):
    """허용 크기를 초과한 이미지."""

    status_code = 413
    code = "IMAGE_TOO_LARGE"

    def __init__(self, size_bytes: int, max_bytes: int) -> None:
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes
        super().__init__(f"Image exceeds {max_bytes} bytes")


class InvalidAddressError(DomainError):
    """0x 접두사 + 40자리 hex 형식이 아닌 주소."""

    code = "INVALID_ADDRESS"

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__("Invalid wallet address")
