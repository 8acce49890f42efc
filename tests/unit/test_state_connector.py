"""
Tests for round derivation and finality checks on the coordinator.
"""
from unittest.mock import MagicMock

import pytest

from src.attestkit.chain.state_connector import (
    FinalityStatus,
    StateConnector,
    compute_round_id,
)
from src.attestkit.errors import TransactionRevertedError

CONTRACT_ADDRESS = "0x0c13aDA1C7143Cf0a0795FFaB93eEBb6FAD6e4e3"
OFFSET = 1658429955
WINDOW = 90


def make_connector(last_finalized=791507, account=None):
    w3 = MagicMock()
    connector = StateConnector(w3, CONTRACT_ADDRESS, account=account)
    functions = connector.contract.functions
    functions.lastFinalizedRoundId.return_value.call.return_value = last_finalized
    functions.BUFFER_TIMESTAMP_OFFSET.return_value.call.return_value = OFFSET
    functions.BUFFER_WINDOW.return_value.call.return_value = WINDOW
    return connector, w3


def make_account():
    account = MagicMock()
    account.address = "0x" + "ab" * 20
    account.sign_transaction.return_value.raw_transaction = b"signed"
    return account


class TestComputeRoundId:

    def test_floor_division(self):
        assert compute_round_id(1708671652, OFFSET, WINDOW) == 558241

    def test_window_boundary(self):
        assert compute_round_id(OFFSET + WINDOW - 1, OFFSET, WINDOW) == 0
        assert compute_round_id(OFFSET + WINDOW, OFFSET, WINDOW) == 1

    def test_monotonic_in_timestamp(self):
        rounds = [compute_round_id(ts, OFFSET, WINDOW) for ts in range(OFFSET, OFFSET + 1000, 7)]
        assert rounds == sorted(rounds)

    def test_rejects_non_positive_window(self):
        with pytest.raises(ValueError):
            compute_round_id(1708671652, OFFSET, 0)


class TestFinality:

    def test_target_after_last_finalized_is_not_finalized(self):
        connector, _ = make_connector(last_finalized=791507)

        status = connector.check_finality(791508)

        assert status == FinalityStatus(round_id=791508, last_finalized_round_id=791507)
        assert not status.finalized

    def test_target_equal_to_last_finalized_is_finalized(self):
        connector, _ = make_connector(last_finalized=791508)
        assert connector.check_finality(791508).finalized

    def test_wait_for_finality_polls_with_backoff(self):
        connector, _ = make_connector()
        connector.contract.functions.lastFinalizedRoundId.return_value.call.side_effect = [
            791506, 791507, 791508,
        ]
        sleeps = []

        status = connector.wait_for_finality(
            791508, attempts=5, delay=3.0, backoff=2.0, sleep=sleeps.append,
        )

        assert status.finalized
        assert sleeps == [3.0, 6.0]

    def test_wait_for_finality_gives_up_after_attempts(self):
        connector, _ = make_connector(last_finalized=1)
        sleeps = []

        status = connector.wait_for_finality(10, attempts=3, delay=1.0, sleep=sleeps.append)

        assert not status.finalized
        assert len(sleeps) == 2


class TestSubmitRequest:

    def test_derives_round_from_confirming_block(self):
        connector, w3 = make_connector(account=make_account())
        w3.eth.send_raw_transaction.return_value = b"\x12" * 32
        w3.eth.wait_for_transaction_receipt.return_value = {"blockNumber": 100, "status": 1}
        w3.eth.get_block.return_value = {"timestamp": 1708671652}

        submission = connector.submit_request("0xabcdef")

        assert submission.round_id == 558241
        assert submission.block_number == 100
        assert submission.tx_hash == "0x" + "12" * 32
        assert submission.abi_encoded_request == "0xabcdef"
        connector.contract.functions.requestAttestations.assert_called_once_with("0xabcdef")
        w3.eth.get_block.assert_called_once_with(100)

    def test_reads_constants_on_every_submission(self):
        connector, w3 = make_connector(account=make_account())
        w3.eth.send_raw_transaction.return_value = b"\x12" * 32
        w3.eth.wait_for_transaction_receipt.return_value = {"blockNumber": 100, "status": 1}
        w3.eth.get_block.return_value = {"timestamp": OFFSET + 900}
        window_call = connector.contract.functions.BUFFER_WINDOW.return_value.call
        window_call.side_effect = [90, 180]

        first = connector.submit_request("0x01")
        second = connector.submit_request("0x01")

        assert (first.round_id, second.round_id) == (10, 5)
        assert window_call.call_count == 2

    def test_reverted_receipt_raises(self):
        connector, w3 = make_connector(account=make_account())
        w3.eth.send_raw_transaction.return_value = b"\x12" * 32
        w3.eth.wait_for_transaction_receipt.return_value = {"blockNumber": 7, "status": 0}

        with pytest.raises(TransactionRevertedError) as exc:
            connector.submit_request("0xabcdef")

        assert exc.value.block_number == 7
        w3.eth.get_block.assert_not_called()

    def test_requires_account(self):
        connector, _ = make_connector()

        with pytest.raises(ValueError):
            connector.submit_request("0xabcdef")
