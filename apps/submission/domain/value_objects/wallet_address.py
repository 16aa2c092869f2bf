"""Wallet Address Value Object."""

from __future__ import annotations

import re
from dataclasses import dataclass

from submission.domain.exceptions import InvalidAddressError

_ADDRESS_RE = re.compile(r"^0[xX][0-9a-fA-F]{40}$")


@dataclass(frozen=True, slots=True)
class WalletAddress:
    """제출자의 온체인 계정 주소 (0x 포함 42자)."""

    value: str

    @classmethod
    def parse(cls, value: str) -> WalletAddress:
        """형식 검증 후 WalletAddress 생성.

        Raises:
            InvalidAddressError: 길이/접두사/hex 형식 불일치
        """
        candidate = (value or "").strip()
        if not _ADDRESS_RE.match(candidate):
            raise InvalidAddressError(value)
        return cls(candidate)

    @property
    def normalized(self) -> str:
        """소문자 + 0x 접두사."""
        return "0x" + self.value[2:].lower()

    def matches(self, other: str | WalletAddress) -> bool:
        """대소문자 무시 비교."""
        other_value = other.value if isinstance(other, WalletAddress) else other
        return self.value[2:].lower() == (other_value or "")[2:].lower()

    def __str__(self) -> str:
        return self.value
