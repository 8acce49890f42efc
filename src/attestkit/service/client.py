"""
HTTP client for the attestation service.

Wraps the three POST endpoints used by the attestation round trip:

  - ``/verifier/{network}/{type}/prepareResponse``
  - ``/verifier/{network}/{type}/prepareRequest``
  - ``/attestation-client/api/proof/get-specific-proof``

There is no retry here.  Non-2xx responses raise ``httpx.HTTPStatusError``
and connection failures raise ``httpx.RequestError``; both reach the caller
unchanged.  A service-reported ``INVALID`` status is *not* an error for
``prepare_response``.
"""
from typing import Any, Dict, Optional

import httpx
from loguru import logger

from src.attestkit.config import AttestationSettings
from src.attestkit.encoding import hex_codec
from src.attestkit.errors import InvalidAttestationRequestError
from src.attestkit.service.schemas import (
    PreparedRequest,
    PreparedResponse,
    ProofData,
    STATUS_VALID,
)

PROOF_PATH = "/attestation-client/api/proof/get-specific-proof"


class AttestationServiceClient:
    """Thin synchronous client over ``httpx.Client``."""

    def __init__(
        self,
        settings: AttestationSettings,
        client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            settings: Supplies the base URL, API key and timeout.
            client: Pre-built ``httpx.Client``; one is created when omitted.
        """
        self._client = client or httpx.Client(
            base_url=settings.attestation_url,
            timeout=settings.http_timeout,
        )
        self._headers = {
            "X-API-KEY": settings.attestation_api_key,
            "Content-Type": "application/json",
        }

    def __enter__(self) -> "AttestationServiceClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        logger.debug(f"POST {path} body={body}")
        response = self._client.post(path, json=body, headers=self._headers)
        if response.is_error:
            logger.error(f"POST {path} failed: HTTP {response.status_code}")
        response.raise_for_status()
        data = response.json()
        logger.debug(f"POST {path} -> {data}")
        return data

    @staticmethod
    def _request_payload(
        attestation_type: str,
        source_id: str,
        request_body: Dict[str, Any],
    ) -> Dict[str, Any]:
        return {
            "attestationType": hex_codec.encode(attestation_type),
            "sourceId": hex_codec.encode(source_id),
            "requestBody": request_body,
        }

    def prepare_response(
        self,
        attestation_type: str,
        network: str,
        source_id: str,
        request_body: Dict[str, Any],
    ) -> PreparedResponse:
        """Ask the verifier to validate and decode a request.

        Args:
            attestation_type: Label such as ``"AddressValidity"``.
            network: Verifier route segment (``"xrp"``, ``"btc"``, ...).
            source_id: Source label such as ``"testXRP"``.
            request_body: Type-specific body with camelCase keys.

        Returns:
            The parsed response.  Check ``is_valid`` before reading
            ``response_body``.
        """
        path = f"/verifier/{network}/{attestation_type}/prepareResponse"
        data = self._post(
            path, self._request_payload(attestation_type, source_id, request_body)
        )
        result = PreparedResponse.model_validate(data)
        if result.is_valid:
            logger.success(f"{attestation_type} on {source_id}: VALID")
        else:
            logger.warning(f"{attestation_type} on {source_id}: {result.status}")
        return result

    def prepare_request(
        self,
        attestation_type: str,
        network: str,
        source_id: str,
        request_body: Dict[str, Any],
    ) -> PreparedRequest:
        """Obtain the ABI-encoded request for on-chain submission.

        Raises:
            InvalidAttestationRequestError: If the service did not return
                an ``abiEncodedRequest``.
        """
        path = f"/verifier/{network}/{attestation_type}/prepareRequest"
        data = self._post(
            path, self._request_payload(attestation_type, source_id, request_body)
        )
        result = PreparedRequest.model_validate(data)
        if not result.abi_encoded_request or result.status not in (None, STATUS_VALID):
            raise InvalidAttestationRequestError(attestation_type, result.status)

        logger.info(
            f"Prepared {attestation_type} request "
            f"({len(result.abi_encoded_request)} hex chars)"
        )
        return result

    def get_specific_proof(
        self,
        round_id: int,
        request_bytes: str,
    ) -> Optional[ProofData]:
        """Fetch the Merkle proof for one request in a finalized round.

        *request_bytes* must be the same ``abiEncodedRequest`` that was
        submitted on-chain.

        Returns:
            The proof, or ``None`` if the service has none for this request.
        """
        data = self._post(
            PROOF_PATH, {"roundId": round_id, "requestBytes": request_bytes}
        )
        payload = data.get("data") if isinstance(data, dict) else None
        if not payload or "merkleProof" not in payload or "response" not in payload:
            logger.warning(
                f"No proof for round {round_id} "
                f"(status={data.get('status') if isinstance(data, dict) else None})"
            )
            return None

        proof = ProofData.model_validate(payload)
        logger.success(
            f"Proof for round {round_id}: {len(proof.merkle_proof)} nodes"
        )
        return proof
