"""
Attestation round trip.

Wires the service client, the coordinator and the verifier into the two
halves of the protocol:

  1. ``submit``: prepareRequest -> requestAttestations -> round id.
  2. ``verify``: finality check -> get-specific-proof -> verifyPayment.

``verify`` never asks for a proof before the round is finalized; the
proof does not exist until then.  Each half is strictly sequential and
nothing is retried.
"""
from typing import Any, Dict, Literal, Optional

from loguru import logger
from pydantic import BaseModel

from src.attestkit.chain.state_connector import (
    FinalityStatus,
    RoundSubmission,
    StateConnector,
)
from src.attestkit.chain.verifier import PaymentVerifier
from src.attestkit.service.client import AttestationServiceClient
from src.attestkit.service.schemas import ProofData

OutcomeStatus = Literal["not_finalized", "proof_unavailable", "verified", "rejected"]


class VerificationOutcome(BaseModel):
    """What happened when a round was checked and verified."""

    status: OutcomeStatus
    round_id: int
    last_finalized_round_id: int
    proof: Optional[ProofData] = None

    @property
    def verified(self) -> bool:
        return self.status == "verified"


class AttestationPipeline:
    """Sequential request/verify flow for a single attestation."""

    def __init__(
        self,
        service: AttestationServiceClient,
        state_connector: StateConnector,
        verifier: Optional[PaymentVerifier] = None,
    ):
        self.service = service
        self.state_connector = state_connector
        self.verifier = verifier

    def submit(
        self,
        attestation_type: str,
        network: str,
        source_id: str,
        request_body: Dict[str, Any],
    ) -> RoundSubmission:
        """Prepare the request and register it with the coordinator.

        Keep ``abi_encoded_request`` from the result: the proof is specific
        to those exact bytes, not just to the round.
        """
        prepared = self.service.prepare_request(
            attestation_type, network, source_id, request_body,
        )
        return self.state_connector.submit_request(prepared.abi_encoded_request)

    def verify(self, round_id: int, abi_encoded_request: str) -> VerificationOutcome:
        """Check finality, fetch the proof and verify it on-chain.

        Raises:
            ValueError: If the round is finalized but no verifier contract
                        was configured.
        """
        finality = self.state_connector.check_finality(round_id)
        if not finality.finalized:
            return self._not_finalized(finality)
        return self._verify_finalized(finality, abi_encoded_request)

    def verify_request(
        self,
        round_id: int,
        attestation_type: str,
        network: str,
        source_id: str,
        request_body: Dict[str, Any],
    ) -> VerificationOutcome:
        """Check finality, regenerate the request bytes, then verify.

        ``prepareRequest`` is deterministic for a given body, so this
        reproduces the bytes that were submitted earlier.  The service is
        not contacted for a round that is not finalized yet.
        """
        finality = self.state_connector.check_finality(round_id)
        if not finality.finalized:
            return self._not_finalized(finality)

        prepared = self.service.prepare_request(
            attestation_type, network, source_id, request_body,
        )
        return self._verify_finalized(finality, prepared.abi_encoded_request)

    @staticmethod
    def _not_finalized(finality: FinalityStatus) -> VerificationOutcome:
        return VerificationOutcome(
            status="not_finalized",
            round_id=finality.round_id,
            last_finalized_round_id=finality.last_finalized_round_id,
        )

    def _verify_finalized(
        self,
        finality: FinalityStatus,
        abi_encoded_request: str,
    ) -> VerificationOutcome:
        if self.verifier is None:
            raise ValueError("A PaymentVerifier is required to verify proofs.")

        round_id = finality.round_id
        proof = self.service.get_specific_proof(round_id, abi_encoded_request)
        if proof is None:
            return VerificationOutcome(
                status="proof_unavailable",
                round_id=round_id,
                last_finalized_round_id=finality.last_finalized_round_id,
            )

        proved = self.verifier.verify_payment(proof)
        logger.info(f"Round {round_id} verification: {'passed' if proved else 'failed'}")
        return VerificationOutcome(
            status="verified" if proved else "rejected",
            round_id=round_id,
            last_finalized_round_id=finality.last_finalized_round_id,
            proof=proof,
        )
