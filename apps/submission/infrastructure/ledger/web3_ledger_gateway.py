"""Web3 Ledger Gateway - SubmissionLedgerGateway 구현체.

EcoEarn 컨트랙트 호출:
- isUserMaxSubmissionsReached(address) view → quota 확인
- registerValidSubmission(address, amount) → 보상 트랜잭션

보상 서명 키는 프로세스 전체에서 공유하는 단일 자격 증명이다.
nonce 조회부터 전송까지 asyncio.Lock 으로 직렬화한다.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Mapping
from typing import Any, TypeVar

from web3 import AsyncWeb3

from submission.application.common.exceptions import LedgerUnavailableError
from submission.application.submit.ports import SubmissionLedgerGateway
from submission.domain.exceptions import QuotaExceededError
from submission.domain.value_objects import WalletAddress
from submission.infrastructure.ledger.abi import ECOEARN_ABI
from submission.setup.metrics import track_ledger_call

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CALL_TIMEOUT = 10.0
DEFAULT_RECEIPT_TIMEOUT = 120.0

RECEIPT_STATUS_SUCCESS = 1


class Web3LedgerGateway(SubmissionLedgerGateway):
    """AsyncWeb3 기반 EcoEarn 컨트랙트 게이트웨이."""

    def __init__(
        self,
        w3: AsyncWeb3,
        contract_address: str,
        private_key: str,
        call_timeout: float = DEFAULT_CALL_TIMEOUT,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    ):
        """초기화.

        Args:
            w3: AsyncWeb3 인스턴스
            contract_address: EcoEarn 컨트랙트 주소
            private_key: 보상 트랜잭션 서명 키
            call_timeout: 단일 RPC 호출 타임아웃 (초)
            receipt_timeout: 트랜잭션 확정 대기 상한 (초)
        """
        self._w3 = w3
        self._contract = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(contract_address),
            abi=ECOEARN_ABI,
        )
        self._account = w3.eth.account.from_key(private_key)
        self._call_timeout = call_timeout
        self._receipt_timeout = receipt_timeout
        self._nonce_lock = asyncio.Lock()

    @classmethod
    def from_rpc_url(
        cls,
        rpc_url: str,
        contract_address: str,
        private_key: str,
        call_timeout: float = DEFAULT_CALL_TIMEOUT,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
    ) -> Web3LedgerGateway:
        w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        gateway = cls(
            w3=w3,
            contract_address=contract_address,
            private_key=private_key,
            call_timeout=call_timeout,
            receipt_timeout=receipt_timeout,
        )
        logger.info(
            "ledger_gateway_initialized",
            extra={"rpc_url": rpc_url, "contract": contract_address, "sender": gateway.sender},
        )
        return gateway

    @property
    def sender(self) -> str:
        """보상 트랜잭션 발신 주소."""
        return self._account.address

    async def _bounded(self, awaitable: Awaitable[T]) -> T:
        return await asyncio.wait_for(awaitable, timeout=self._call_timeout)

    async def check_quota(self, address: WalletAddress) -> None:
        participant = AsyncWeb3.to_checksum_address(address.value)
        try:
            with track_ledger_call("isUserMaxSubmissionsReached"):
                reached = await self._bounded(
                    self._contract.functions.isUserMaxSubmissionsReached(participant).call()
                )
        except Exception as e:
            logger.error(
                "ledger_quota_check_failed",
                extra={"address": address.value, "error_type": type(e).__name__, "error": str(e)},
            )
            raise LedgerUnavailableError(f"{type(e).__name__}: {e}") from e

        if reached:
            raise QuotaExceededError(address.value)

    async def issue_reward(self, address: WalletAddress, amount: int) -> bool:
        participant = AsyncWeb3.to_checksum_address(address.value)
        try:
            with track_ledger_call("registerValidSubmission"):
                tx_hash = await self._send_reward(participant, amount)
                receipt = await self._w3.eth.wait_for_transaction_receipt(
                    tx_hash, timeout=self._receipt_timeout
                )
        except Exception as e:
            # 판정 결과는 이미 확정되었으므로 보상 실패는 False 로만 전달
            logger.error(
                "ledger_reward_failed",
                extra={
                    "address": address.value,
                    "amount": amount,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )
            return False

        confirmed = self._receipt_status(receipt) == RECEIPT_STATUS_SUCCESS
        log = logger.info if confirmed else logger.warning
        log(
            "ledger_reward_confirmed" if confirmed else "ledger_reward_reverted",
            extra={
                "address": address.value,
                "amount": amount,
                "tx_hash": self._hex(tx_hash),
                "block_number": self._receipt_field(receipt, "blockNumber"),
            },
        )
        return confirmed

    async def _send_reward(self, participant: str, amount: int) -> Any:
        async with self._nonce_lock:
            nonce = await self._bounded(
                self._w3.eth.get_transaction_count(self._account.address, "pending")
            )
            tx = await self._bounded(
                self._contract.functions.registerValidSubmission(
                    participant, amount
                ).build_transaction({"from": self._account.address, "nonce": nonce})
            )
            signed = self._account.sign_transaction(tx)
            return await self._bounded(self._w3.eth.send_raw_transaction(signed.raw_transaction))

    async def close(self) -> None:
        """RPC provider 세션 종료."""
        try:
            await self._w3.provider.disconnect()
        except Exception as e:
            logger.warning("ledger_provider_close_failed", extra={"error": str(e)})

    @staticmethod
    def _receipt_field(receipt: Any, key: str) -> Any:
        if isinstance(receipt, Mapping):
            return receipt.get(key)
        return getattr(receipt, key, None)

    @classmethod
    def _receipt_status(cls, receipt: Any) -> Any:
        return cls._receipt_field(receipt, "status")

    @staticmethod
    def _hex(tx_hash: Any) -> str:
        return tx_hash.hex() if hasattr(tx_hash, "hex") else str(tx_hash)
