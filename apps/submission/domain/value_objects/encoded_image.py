"""Encoded Image Value Object."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

from submission.domain.exceptions import ImageTooLargeError, InvalidImageFormatError

_DATA_URI_RE = re.compile(r"^data:(image/[a-z]+);base64,(.+)$", re.DOTALL)


@dataclass(frozen=True, slots=True)
class EncodedImage:
    """base64 data URI 형태의 영수증 이미지.

    내용은 해석하지 않는다. 분류 서비스에 그대로 전달되는 불투명 페이로드.

    Attributes:
        data_uri: `data:image/<subtype>;base64,<payload>`
        mime_type: 예) image/jpeg
        size_bytes: 디코딩된 payload 크기
    """

    data_uri: str
    mime_type: str
    size_bytes: int

    @classmethod
    def from_data_uri(cls, value: str, max_bytes: int | None = None) -> EncodedImage:
        """data URI 검증 후 EncodedImage 생성.

        Raises:
            InvalidImageFormatError: data URI 형식이 아니거나 base64 디코딩 실패
            ImageTooLargeError: 디코딩 크기가 max_bytes 초과
        """
        match = _DATA_URI_RE.match(value or "")
        if match is None:
            raise InvalidImageFormatError()

        mime_type, payload = match.groups()
        try:
            decoded = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InvalidImageFormatError() from exc
        if not decoded:
            raise InvalidImageFormatError()

        size = len(decoded)
        if max_bytes is not None and size > max_bytes:
            raise ImageTooLargeError(size, max_bytes)

        return cls(data_uri=value, mime_type=mime_type, size_bytes=size)

    def __repr__(self) -> str:
        # payload는 로그/예외 메시지에 남기지 않는다
        return f"EncodedImage(mime_type={self.mime_type!r}, size_bytes={self.size_bytes})"
