"""
Attestation round-trip entry point.

Subcommands:
  address   Validate addresses through ``prepareResponse`` (AddressValidity).
  submit    Prepare a Payment request and register it with the coordinator.
  verify    Check finality, fetch the Merkle proof and verify it on-chain.
  xrpl-pay  Send an XRPL memo payment and confirm it via the service.

Usage::

    uv run main.py address --network xrp --address r9RLXvWuRro3RX33pk4xsN58tefYZ8Tvbj
    uv run main.py submit --tx-id 0x01c1...31d1 --in-utxo 8 --utxo 4
    uv run main.py verify --round 791508 --tx-id 0x01c1...31d1 --in-utxo 8 --utxo 4
    uv run main.py xrpl-pay --message "Hello world!"
"""
import argparse
import os
import sys

from dotenv import load_dotenv
from loguru import logger

from src.attestkit.utils.logger import setup_logger

load_dotenv()
setup_logger(level=os.getenv("LOG_LEVEL", "INFO"))

from eth_account import Account  # noqa: E402
from web3 import Web3  # noqa: E402

from src.attestkit.chain.state_connector import StateConnector  # noqa: E402
from src.attestkit.chain.verifier import PaymentVerifier  # noqa: E402
from src.attestkit.config import AttestationSettings  # noqa: E402
from src.attestkit.core.pipeline import AttestationPipeline  # noqa: E402
from src.attestkit.payments.xrpl_sender import XRPLPaymentHelper  # noqa: E402
from src.attestkit.service.client import AttestationServiceClient  # noqa: E402
from src.attestkit.service.schemas import (  # noqa: E402
    ADDRESS_VALIDITY,
    PAYMENT,
    AddressValidityRequestBody,
    PaymentRequestBody,
    source_id,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def build_pipeline(
    settings: AttestationSettings,
    service: AttestationServiceClient,
) -> AttestationPipeline:
    """Connect to the EVM chain and assemble the attestation pipeline."""
    w3 = Web3(Web3.HTTPProvider(settings.evm_rpc_url))
    account = (
        Account.from_key(settings.evm_private_key)
        if settings.evm_private_key else None
    )
    state_connector = StateConnector(
        w3,
        settings.state_connector_address,
        account=account,
        receipt_timeout=settings.receipt_timeout,
    )
    verifier = (
        PaymentVerifier(w3, settings.payment_verifier_address)
        if settings.payment_verifier_address else None
    )
    return AttestationPipeline(service, state_connector, verifier)


def payment_body(args: argparse.Namespace) -> dict:
    return PaymentRequestBody(
        transaction_id=args.tx_id, in_utxo=args.in_utxo, utxo=args.utxo,
    ).to_wire()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def run_address(args, settings, service) -> None:
    source = source_id(args.network, settings.use_testnet_attestations)
    for address in args.address:
        body = AddressValidityRequestBody(address_str=address).to_wire()
        result = service.prepare_response(ADDRESS_VALIDITY, args.network, source, body)
        logger.info(f"{address}: {result.status} {result.response_body}")


def run_submit(args, settings, service) -> None:
    pipeline = build_pipeline(settings, service)
    source = source_id(args.network, settings.use_testnet_attestations)
    submission = pipeline.submit(PAYMENT, args.network, source, payment_body(args))
    logger.success(f"Submitted. Round: {submission.round_id}")
    logger.info(f"abiEncodedRequest: {submission.abi_encoded_request}")


def run_verify(args, settings, service) -> None:
    pipeline = build_pipeline(settings, service)
    source = source_id(args.network, settings.use_testnet_attestations)
    if args.wait:
        pipeline.state_connector.wait_for_finality(
            args.round,
            attempts=settings.poll_attempts,
            backoff=settings.poll_backoff,
        )
    outcome = pipeline.verify_request(
        args.round, PAYMENT, args.network, source, payment_body(args),
    )
    logger.info(f"Round {outcome.round_id}: {outcome.status}")
    if outcome.status != "verified":
        sys.exit(2)


def run_xrpl_pay(args, settings, service) -> None:
    helper = XRPLPaymentHelper(settings, service)
    result = helper.send_and_attest(args.message, args.amount, args.destination)
    logger.info(f"Service status: {result.response.status}")
    logger.info(f"Reference: {result.standard_payment_reference}")
    logger.info(f"Decoded: {result.decoded_reference!r}")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def _add_payment_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--network", default="btc", help="Verifier network (btc, doge, xrp)")
    parser.add_argument("--tx-id", required=True, help="0x-prefixed transaction id")
    parser.add_argument("--in-utxo", default="0", help="Input UTXO index")
    parser.add_argument("--utxo", default="0", help="Output UTXO index")


def main() -> None:
    parser = argparse.ArgumentParser(description="Attestation round-trip tools")
    sub = parser.add_subparsers(dest="command", required=True)

    p_address = sub.add_parser("address", help="Check address validity")
    p_address.add_argument("--network", default="xrp")
    p_address.add_argument("--address", action="append", required=True)
    p_address.set_defaults(handler=run_address)

    p_submit = sub.add_parser("submit", help="Submit a Payment attestation request")
    _add_payment_args(p_submit)
    p_submit.set_defaults(handler=run_submit)

    p_verify = sub.add_parser("verify", help="Verify a Payment attestation proof")
    _add_payment_args(p_verify)
    p_verify.add_argument("--round", type=int, required=True, help="Round id from submit")
    p_verify.add_argument(
        "--wait", action="store_true",
        help="Poll until the round is finalized before verifying",
    )
    p_verify.set_defaults(handler=run_verify)

    p_xrpl = sub.add_parser("xrpl-pay", help="Send an XRPL memo payment and attest it")
    p_xrpl.add_argument("--message", default="")
    p_xrpl.add_argument("--amount", type=int, default=10, help="Amount in drops")
    p_xrpl.add_argument("--destination", default="r9RLXvWuRro3RX33pk4xsN58tefYZ8Tvbj")
    p_xrpl.set_defaults(handler=run_xrpl_pay)

    args = parser.parse_args()

    try:
        settings = AttestationSettings.from_env()
        with AttestationServiceClient(settings) as service:
            args.handler(args, settings, service)
    except Exception as e:
        logger.exception(f"{args.command} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
