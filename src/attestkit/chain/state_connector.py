"""
Attestation coordinator (``StateConnector``) wrapper.

Submits ABI-encoded attestation requests, derives the round in which a
request was registered, and answers "is this round finalized yet?".

Round derivation::

    round_id = (block_timestamp - BUFFER_TIMESTAMP_OFFSET) // BUFFER_WINDOW

Both constants are read from the contract on every submission; they are
deployment-specific and are never cached.
"""
import time
from typing import Callable, Optional

from eth_account.signers.local import LocalAccount
from loguru import logger
from pydantic import BaseModel
from web3 import Web3

from src.attestkit.chain.abis import STATE_CONNECTOR_ABI
from src.attestkit.errors import TransactionRevertedError


class RoundSubmission(BaseModel):
    """Where and when an attestation request landed on-chain."""

    round_id: int
    tx_hash: str
    block_number: int
    block_timestamp: int
    abi_encoded_request: str


class FinalityStatus(BaseModel):
    """Comparison of a target round against the last finalized round."""

    round_id: int
    last_finalized_round_id: int

    @property
    def finalized(self) -> bool:
        return self.round_id <= self.last_finalized_round_id


def compute_round_id(block_timestamp: int, offset: int, window: int) -> int:
    """Map a block timestamp to its attestation round.

    Raises:
        ValueError: If *window* is not positive.
    """
    if window <= 0:
        raise ValueError(f"BUFFER_WINDOW must be positive, got {window}")
    return (block_timestamp - offset) // window


class StateConnector:
    """Reads from and submits to the attestation coordinator contract."""

    def __init__(
        self,
        w3: Web3,
        address: str,
        account: Optional[LocalAccount] = None,
        receipt_timeout: float = 120.0,
    ):
        """
        Args:
            w3: Connected ``Web3`` instance.
            address: Coordinator contract address.
            account: Signer for ``requestAttestations``.  Read-only use
                     (finality checks) does not need one.
            receipt_timeout: Seconds to wait for the transaction receipt.
        """
        self.w3 = w3
        self.contract = w3.eth.contract(
            address=Web3.to_checksum_address(address),
            abi=STATE_CONNECTOR_ABI,
        )
        self.account = account
        self.receipt_timeout = receipt_timeout

    def submit_request(self, abi_encoded_request: str) -> RoundSubmission:
        """Call ``requestAttestations`` and derive the round id.

        The returned round is the one the request was registered in; it is
        not finalized yet.

        Raises:
            ValueError: If no signing account was configured.
            TransactionRevertedError: If the receipt reports failure.
        """
        if self.account is None:
            raise ValueError("A signing account is required to submit requests.")

        fn = self.contract.functions.requestAttestations(abi_encoded_request)
        tx = fn.build_transaction({
            "from": self.account.address,
            "nonce": self.w3.eth.get_transaction_count(self.account.address),
        })
        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        logger.info(f"requestAttestations sent: {Web3.to_hex(tx_hash)}")

        receipt = self.w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.receipt_timeout,
        )
        block_number = receipt["blockNumber"]
        if receipt["status"] == 0:
            logger.critical(f"requestAttestations reverted in block {block_number}")
            raise TransactionRevertedError(Web3.to_hex(tx_hash), block_number)

        block = self.w3.eth.get_block(block_number)
        offset = self.contract.functions.BUFFER_TIMESTAMP_OFFSET().call()
        window = self.contract.functions.BUFFER_WINDOW().call()
        round_id = compute_round_id(block["timestamp"], offset, window)

        logger.success(
            f"Request registered in round {round_id} (block {block_number})"
        )
        return RoundSubmission(
            round_id=round_id,
            tx_hash=Web3.to_hex(tx_hash),
            block_number=block_number,
            block_timestamp=block["timestamp"],
            abi_encoded_request=abi_encoded_request,
        )

    def last_finalized_round_id(self) -> int:
        return self.contract.functions.lastFinalizedRoundId().call()

    def check_finality(self, round_id: int) -> FinalityStatus:
        """Report whether *round_id* has been finalized."""
        status = FinalityStatus(
            round_id=round_id,
            last_finalized_round_id=self.last_finalized_round_id(),
        )
        if status.finalized:
            logger.info(
                f"Round {round_id} finalized "
                f"(last finalized: {status.last_finalized_round_id})"
            )
        else:
            logger.warning(
                f"Round {round_id} is not finalized yet "
                f"(last finalized: {status.last_finalized_round_id})"
            )
        return status

    def wait_for_finality(
        self,
        round_id: int,
        attempts: int = 5,
        delay: float = 30.0,
        backoff: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> FinalityStatus:
        """Poll ``check_finality`` with exponential backoff.

        Returns the last status observed, finalized or not.
        """
        status = self.check_finality(round_id)
        for _ in range(attempts - 1):
            if status.finalized:
                break
            logger.info(f"Retrying finality check for round {round_id} in {delay:.0f}s")
            sleep(delay)
            delay *= backoff
            status = self.check_finality(round_id)
        return status
