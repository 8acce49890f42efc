"""
Minimal contract ABIs.

Only the entries the attestation round trip touches are listed.
"""

STATE_CONNECTOR_ABI = [
    {
        "type": "function",
        "name": "requestAttestations",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "_data", "type": "bytes"}],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "BUFFER_TIMESTAMP_OFFSET",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "BUFFER_WINDOW",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "lastFinalizedRoundId",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "_roundId", "type": "uint256"}],
    },
]

_PAYMENT_REQUEST_BODY = {
    "name": "requestBody",
    "type": "tuple",
    "components": [
        {"name": "transactionId", "type": "bytes32"},
        {"name": "inUtxo", "type": "uint256"},
        {"name": "utxo", "type": "uint256"},
    ],
}

_PAYMENT_RESPONSE_BODY = {
    "name": "responseBody",
    "type": "tuple",
    "components": [
        {"name": "blockNumber", "type": "uint64"},
        {"name": "blockTimestamp", "type": "uint64"},
        {"name": "sourceAddressHash", "type": "bytes32"},
        {"name": "receivingAddressHash", "type": "bytes32"},
        {"name": "intendedReceivingAddressHash", "type": "bytes32"},
        {"name": "spentAmount", "type": "int256"},
        {"name": "intendedSpentAmount", "type": "int256"},
        {"name": "receivedAmount", "type": "int256"},
        {"name": "intendedReceivedAmount", "type": "int256"},
        {"name": "standardPaymentReference", "type": "bytes32"},
        {"name": "oneToOne", "type": "bool"},
        {"name": "status", "type": "uint8"},
    ],
}

PAYMENT_PROOF_INPUT = {
    "name": "_proof",
    "type": "tuple",
    "components": [
        {"name": "merkleProof", "type": "bytes32[]"},
        {
            "name": "data",
            "type": "tuple",
            "components": [
                {"name": "attestationType", "type": "bytes32"},
                {"name": "sourceId", "type": "bytes32"},
                {"name": "votingRound", "type": "uint64"},
                {"name": "lowestUsedTimestamp", "type": "uint64"},
                _PAYMENT_REQUEST_BODY,
                _PAYMENT_RESPONSE_BODY,
            ],
        },
    ],
}

PAYMENT_VERIFICATION_ABI = [
    {
        "type": "function",
        "name": "verifyPayment",
        "stateMutability": "view",
        "inputs": [PAYMENT_PROOF_INPUT],
        "outputs": [{"name": "_proved", "type": "bool"}],
    },
]
