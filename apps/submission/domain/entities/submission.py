"""Submission Entity."""

from __future__ import annotations

import time
from dataclasses import dataclass

from submission.domain.value_objects import EncodedImage, WalletAddress


def current_time_ms() -> int:
    """현재 시각 (epoch milliseconds)."""
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class Submission:
    """영수증 제출 1건.

    생성 이후 불변. 하위 단계는 이 객체를 읽기만 하고 판정 결과를 별도로 반환한다.

    Attributes:
        image: 영수증 사진 (base64 data URI)
        address: 제출자 지갑 주소
        device_id: 클라이언트가 만든 기기 식별자 (어뷰징 완화용, 신뢰하지 않음)
        timestamp: 서버가 부여한 생성 시각 (ms)
    """

    image: EncodedImage
    address: WalletAddress
    device_id: str
    timestamp: int

    @classmethod
    def create(
        cls,
        image: EncodedImage,
        address: WalletAddress,
        device_id: str,
        now_ms: int | None = None,
    ) -> Submission:
        """timestamp를 한 번만 부여하여 생성."""
        return cls(
            image=image,
            address=address,
            device_id=device_id,
            timestamp=now_ms if now_ms is not None else current_time_ms(),
        )
