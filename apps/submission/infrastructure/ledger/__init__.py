"""Ledger Adapters."""

from submission.infrastructure.ledger.web3_ledger_gateway import Web3LedgerGateway

__all__ = ["Web3LedgerGateway"]
