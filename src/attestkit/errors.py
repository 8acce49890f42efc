"""
Exception types raised by attestkit.

Transport failures (``httpx.HTTPError``, web3 RPC errors, xrpl-py errors)
are not wrapped; they reach the caller as raised by the underlying library.
"""
from typing import Optional


class AttestationError(Exception):
    """Base class for attestkit errors."""


class InvalidAttestationRequestError(AttestationError):
    """The service refused to produce an ABI-encoded request."""

    def __init__(self, attestation_type: str, status: Optional[str]):
        self.attestation_type = attestation_type
        self.status = status
        super().__init__(
            f"Attestation service could not prepare {attestation_type} "
            f"request (status={status})"
        )


class TransactionRevertedError(AttestationError):
    """An on-chain transaction was mined with a failed status."""

    def __init__(self, tx_hash: str, block_number: Optional[int] = None):
        self.tx_hash = tx_hash
        self.block_number = block_number
        super().__init__(
            f"Transaction {tx_hash} reverted (block {block_number})"
        )


class XRPLTransactionError(AttestationError):
    """An XRPL transaction was validated with a non-success result."""

    def __init__(self, tx_hash: str, engine_result: Optional[str]):
        self.tx_hash = tx_hash
        self.engine_result = engine_result
        super().__init__(
            f"XRPL transaction {tx_hash} failed: {engine_result}"
        )
