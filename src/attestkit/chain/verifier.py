"""
On-chain proof verification.

The proof returned by the attestation service is JSON: integers arrive as
decimal strings and byte values as hex strings.  ``coerce_abi_value``
walks the verifier's ABI and converts each leaf to the Python type web3
expects, so the fetched pair reaches the contract exactly as served.
"""
from typing import Any, Dict

from loguru import logger
from web3 import Web3

from src.attestkit.chain.abis import PAYMENT_PROOF_INPUT, PAYMENT_VERIFICATION_ABI
from src.attestkit.service.schemas import ProofData


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Expected integer, got bool {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    return int(text, 16) if text.lower().startswith("0x") else int(text)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ValueError(f"Expected boolean, got {value!r}")


def coerce_abi_value(abi: Dict[str, Any], value: Any) -> Any:
    """Convert a JSON value to the Python value for ABI entry *abi*.

    Tuples become dicts keyed by component name; arrays are converted
    element-wise; ``(u)int*`` accepts decimal or ``0x`` strings.
    Other types (bytes, address, string) pass through unchanged.

    Raises:
        ValueError: If a value cannot be converted or a tuple field is
                    missing.
    """
    abi_type = abi["type"]

    if abi_type.endswith("]"):
        element = dict(abi, type=abi_type[:abi_type.rindex("[")])
        return [coerce_abi_value(element, v) for v in value]

    if abi_type == "tuple":
        result = {}
        for component in abi["components"]:
            name = component["name"]
            if name not in value:
                raise ValueError(f"Missing field '{name}' in {abi.get('name')}")
            result[name] = coerce_abi_value(component, value[name])
        return result

    if abi_type.startswith(("uint", "int")):
        return _to_int(value)

    if abi_type == "bool":
        return _to_bool(value)

    return value


class PaymentVerifier:
    """Relays a fetched proof to ``IPaymentVerification.verifyPayment``."""

    def __init__(self, w3: Web3, address: str):
        self.contract = w3.eth.contract(
            address=Web3.to_checksum_address(address),
            abi=PAYMENT_VERIFICATION_ABI,
        )

    def build_proof_argument(self, proof: ProofData) -> Dict[str, Any]:
        return coerce_abi_value(
            PAYMENT_PROOF_INPUT,
            {"merkleProof": proof.merkle_proof, "data": proof.response},
        )

    def verify_payment(self, proof: ProofData) -> bool:
        """Return the contract's verdict on *proof*.

        A revert inside the contract surfaces as web3's
        ``ContractLogicError`` with the contract-provided reason.
        """
        argument = self.build_proof_argument(proof)
        proved = self.contract.functions.verifyPayment(argument).call()
        if proved:
            logger.success("verifyPayment: proof accepted")
        else:
            logger.error("verifyPayment: proof rejected")
        return bool(proved)
