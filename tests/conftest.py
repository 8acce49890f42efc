import pytest

from src.attestkit.config import AttestationSettings

SERVICE_URL = "https://attestation.test"
API_KEY = "test-api-key"


@pytest.fixture
def settings() -> AttestationSettings:
    return AttestationSettings(
        attestation_url=SERVICE_URL,
        attestation_api_key=API_KEY,
        use_testnet_attestations=True,
        observation_delay=10.0,
        poll_attempts=3,
        poll_backoff=2.0,
    )
