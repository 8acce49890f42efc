"""
XRPL payment with a standard payment reference.

Sends a Payment whose memo carries a 32-byte, zero-padded reference, then
asks the attestation service whether the transaction decreased the
sender's balance.  The service only answers once its indexer has seen the
ledger, so the check is polled: an initial delay, then bounded retries
with exponential backoff until the service reports ``VALID``.
"""
import time
from typing import Any, Callable, Dict, List, Optional

from loguru import logger
from pydantic import BaseModel
from web3 import Web3
from xrpl.clients import JsonRpcClient
from xrpl.models.transactions import Memo, Payment
from xrpl.transaction import autofill, sign, submit_and_wait
from xrpl.utils import str_to_hex
from xrpl.wallet import Wallet

from src.attestkit.config import AttestationSettings
from src.attestkit.encoding import hex_codec
from src.attestkit.errors import XRPLTransactionError
from src.attestkit.service.client import AttestationServiceClient
from src.attestkit.service.schemas import (
    BALANCE_DECREASING_TRANSACTION,
    BalanceDecreasingTransactionRequestBody,
    PreparedResponse,
    source_id,
)

MEMO_TYPE = "Text"
MEMO_FORMAT = "text/plain"
EXPLORER_URL = "https://testnet.xrpl.org/transactions/"


class XRPLAttestationResult(BaseModel):
    """Submitted transaction and the service's view of it."""

    tx_hash: str
    response: PreparedResponse
    standard_payment_reference: Optional[str] = None
    decoded_reference: Optional[str] = None


def build_memos(message: str) -> Optional[List[Memo]]:
    """Return the memo list for *message*, or ``None`` when it is empty.

    Raises:
        ValueError: If *message* is longer than 32 bytes.
    """
    if not message:
        return None
    return [
        Memo(
            memo_data=hex_codec.pad_hex(str_to_hex(message)),
            memo_type=str_to_hex(MEMO_TYPE),
            memo_format=str_to_hex(MEMO_FORMAT),
        )
    ]


def source_address_indicator(address: str) -> str:
    """keccak256 of the address string, as the verifier expects it."""
    return Web3.to_hex(Web3.solidity_keccak(["string"], [address]))


class XRPLPaymentHelper:
    """Sends memo payments and confirms them through the attestation service."""

    def __init__(
        self,
        settings: AttestationSettings,
        service: AttestationServiceClient,
        client: Optional[JsonRpcClient] = None,
        wallet: Optional[Wallet] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            settings: Supplies the XRPL endpoint, seed and polling knobs.
            service: Client used for the ``prepareResponse`` check.
            client: XRPL client; built from ``xrpl_rpc_url`` when omitted.
            wallet: Signing wallet; derived from ``xrpl_seed`` when omitted.
            sleep: Blocking sleep, replaceable in tests.

        Raises:
            ValueError: If neither *wallet* nor ``settings.xrpl_seed`` is set.
        """
        if wallet is None:
            if not settings.xrpl_seed:
                raise ValueError("XRPL_PRIVATE_KEY is required to send payments.")
            wallet = Wallet.from_seed(settings.xrpl_seed)

        self.settings = settings
        self.service = service
        self.client = client or JsonRpcClient(settings.xrpl_rpc_url)
        self.wallet = wallet
        self._sleep = sleep
        logger.info(f"XRPL helper ready. Sender: {wallet.address}")

    def send_payment(
        self,
        message: str = "",
        amount: int = 10,
        destination: str = "r9RLXvWuRro3RX33pk4xsN58tefYZ8Tvbj",
    ) -> str:
        """Sign and submit a Payment of *amount* drops; return its hash.

        Raises:
            XRPLTransactionError: If the validated result is not tesSUCCESS.
        """
        payment = Payment(
            account=self.wallet.address,
            amount=str(amount),
            destination=destination,
            memos=build_memos(message),
        )
        filled = autofill(payment, self.client)
        signed = sign(filled, self.wallet)
        tx_hash = signed.get_hash()
        logger.info(f"See transaction at {EXPLORER_URL}{tx_hash}")

        response = submit_and_wait(signed, self.client)
        engine_result = response.result.get("meta", {}).get("TransactionResult")
        if engine_result != "tesSUCCESS":
            logger.error(f"Payment {tx_hash} validated with {engine_result}")
            raise XRPLTransactionError(tx_hash, engine_result)

        logger.success(f"Payment {tx_hash} validated")
        return tx_hash

    def confirm_balance_decrease(self, tx_hash: str) -> PreparedResponse:
        """Poll ``prepareResponse`` until the service reports ``VALID``.

        Returns the last response, which may still be non-valid if the
        attempts ran out.
        """
        body: Dict[str, Any] = BalanceDecreasingTransactionRequestBody(
            transaction_id="0x" + tx_hash,
            source_address_indicator=source_address_indicator(self.wallet.address),
        ).to_wire()
        source = source_id("xrp", self.settings.use_testnet_attestations)

        delay = self.settings.observation_delay
        result = None
        for attempt in range(1, self.settings.poll_attempts + 1):
            if delay > 0:
                logger.info(f"Waiting {delay:.1f}s for the indexer (attempt {attempt})")
                self._sleep(delay)
            result = self.service.prepare_response(
                BALANCE_DECREASING_TRANSACTION, "xrp", source, body,
            )
            if result.is_valid:
                break
            delay = max(delay, 1.0) * self.settings.poll_backoff

        if not result.is_valid:
            logger.warning(
                f"{tx_hash} still {result.status} after "
                f"{self.settings.poll_attempts} attempts"
            )
        return result

    def send_and_attest(
        self,
        message: str = "",
        amount: int = 10,
        destination: str = "r9RLXvWuRro3RX33pk4xsN58tefYZ8Tvbj",
    ) -> XRPLAttestationResult:
        """Send a memo payment and decode the reference the service saw."""
        tx_hash = self.send_payment(message, amount, destination)
        response = self.confirm_balance_decrease(tx_hash)

        reference = response.response_body.get("standardPaymentReference")
        decoded = hex_codec.decode(reference) if reference else None
        if decoded is not None:
            logger.info(f"standardPaymentReference: {reference} -> {decoded!r}")

        return XRPLAttestationResult(
            tx_hash=tx_hash,
            response=response,
            standard_payment_reference=reference,
            decoded_reference=decoded,
        )
