"""
Wire models for the attestation service.

Request bodies are attestation-type specific and serialise to the
service's camelCase field names (``model_dump(by_alias=True)``).
Response models keep unknown fields so that nothing the service returns
is lost on the way to the caller.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

PAYMENT = "Payment"
ADDRESS_VALIDITY = "AddressValidity"
BALANCE_DECREASING_TRANSACTION = "BalanceDecreasingTransaction"

STATUS_VALID = "VALID"


def source_id(chain: str, testnet: bool = True) -> str:
    """Return the source id label for *chain*, e.g. ``testXRP`` or ``BTC``."""
    code = chain.upper()
    return f"test{code}" if testnet else code


class _RequestBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class PaymentRequestBody(_RequestBody):
    """Payment check on a UTXO or account-based chain."""

    transaction_id: str = Field(..., alias="transactionId")
    in_utxo: str = Field("0", alias="inUtxo")
    utxo: str = Field("0", alias="utxo")


class AddressValidityRequestBody(_RequestBody):
    """Is *address_str* a well-formed address on the source chain?"""

    address_str: str = Field(..., alias="addressStr")


class BalanceDecreasingTransactionRequestBody(_RequestBody):
    """Did *transaction_id* decrease the balance of the indicated address?"""

    transaction_id: str = Field(..., alias="transactionId")
    source_address_indicator: str = Field(..., alias="sourceAddressIndicator")


class PreparedResponse(BaseModel):
    """Result of ``prepareResponse``.

    ``status`` is reported by the service (``VALID``, ``INVALID``, ...);
    ``response`` is only populated for valid requests.
    """

    model_config = ConfigDict(extra="allow")

    status: str
    response: Optional[Dict[str, Any]] = None

    @property
    def is_valid(self) -> bool:
        return self.status == STATUS_VALID

    @property
    def response_body(self) -> Dict[str, Any]:
        if not self.response:
            return {}
        return self.response.get("responseBody") or {}


class PreparedRequest(BaseModel):
    """Result of ``prepareRequest``; ``abi_encoded_request`` is opaque."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    status: Optional[str] = None
    abi_encoded_request: Optional[str] = Field(None, alias="abiEncodedRequest")


class ProofData(BaseModel):
    """Attestation response plus the Merkle proof that commits to it."""

    model_config = ConfigDict(populate_by_name=True)

    response: Dict[str, Any]
    merkle_proof: List[str] = Field(..., alias="merkleProof")
