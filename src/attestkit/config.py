"""
Runtime configuration.

``AttestationSettings`` is built once per invocation (usually through
``from_env()`` after ``load_dotenv()``) and handed to each component's
constructor.  Nothing here is read from module-level globals.
"""
import os
from typing import Optional

from loguru import logger
from pydantic import BaseModel, Field, field_validator

COSTON_RPC_URL = "https://coston-api.flare.network/ext/C/rpc"
COSTON_STATE_CONNECTOR = "0x0c13aDA1C7143Cf0a0795FFaB93eEBb6FAD6e4e3"
XRPL_TESTNET_RPC_URL = "https://s.altnet.rippletest.net:51234"

# Environment variable -> settings field.
_ENV_FIELDS = {
    "ATTESTATION_URL": "attestation_url",
    "ATTESTATION_API_KEY": "attestation_api_key",
    "USE_TESTNET_ATTESTATIONS": "use_testnet_attestations",
    "XRPL_PRIVATE_KEY": "xrpl_seed",
    "XRPL_RPC_URL": "xrpl_rpc_url",
    "EVM_RPC_URL": "evm_rpc_url",
    "EVM_PRIVATE_KEY": "evm_private_key",
    "STATE_CONNECTOR_ADDRESS": "state_connector_address",
    "PAYMENT_VERIFIER_ADDRESS": "payment_verifier_address",
    "HTTP_TIMEOUT": "http_timeout",
    "OBSERVATION_DELAY": "observation_delay",
    "POLL_ATTEMPTS": "poll_attempts",
    "POLL_BACKOFF": "poll_backoff",
    "RECEIPT_TIMEOUT": "receipt_timeout",
}


class AttestationSettings(BaseModel):
    """Endpoints, credentials and timing knobs for one run."""

    attestation_url: str = Field(
        ..., description="Base URL of the attestation service",
    )
    attestation_api_key: str = Field(
        ..., description="Value sent in the X-API-KEY header",
    )
    use_testnet_attestations: bool = Field(
        True, description="Use test source ids (testXRP, testBTC, ...)",
    )

    xrpl_seed: Optional[str] = Field(
        None, description="XRPL wallet seed used to sign payments",
    )
    xrpl_rpc_url: str = XRPL_TESTNET_RPC_URL

    evm_rpc_url: str = COSTON_RPC_URL
    evm_private_key: Optional[str] = Field(
        None, description="Hex private key for coordinator transactions",
    )
    state_connector_address: str = COSTON_STATE_CONNECTOR
    payment_verifier_address: Optional[str] = None

    http_timeout: float = Field(30.0, gt=0)
    observation_delay: float = Field(
        10.0, ge=0,
        description="Seconds to wait before the first indexer check",
    )
    poll_attempts: int = Field(5, ge=1)
    poll_backoff: float = Field(
        2.0, ge=1.0,
        description="Multiplier applied to the delay between polls",
    )
    receipt_timeout: float = Field(120.0, gt=0)

    @field_validator("attestation_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def from_env(cls) -> "AttestationSettings":
        """Build settings from process environment variables.

        Unset variables fall back to field defaults.

        Raises:
            pydantic.ValidationError: If a required variable is missing or
                                      a value cannot be parsed.
        """
        values = {
            field: os.environ[env]
            for env, field in _ENV_FIELDS.items()
            if os.environ.get(env)
        }
        settings = cls(**values)
        logger.debug(
            f"Settings loaded: service={settings.attestation_url} "
            f"testnet={settings.use_testnet_attestations}"
        )
        return settings
