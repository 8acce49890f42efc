"""
Tests for the command-line entry point: dispatch and exit codes.

Network components are replaced on the ``main`` module; nothing leaves
the process.
"""
import importlib
import sys
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from src.attestkit.core.pipeline import VerificationOutcome
from src.attestkit.service.schemas import PreparedResponse

TX_ID = "0x01c17d143c03b459707f540fd5ee9f02a730c4cd114f310ef294b706ccf131d1"


@pytest.fixture
def cli(monkeypatch, tmp_path, settings):
    """Import ``main`` from a scratch directory and stub its collaborators."""
    monkeypatch.chdir(tmp_path)
    module = importlib.import_module("main")

    settings_cls = MagicMock()
    settings_cls.from_env.return_value = settings
    monkeypatch.setattr(module, "AttestationSettings", settings_cls)
    client_cls = MagicMock()
    monkeypatch.setattr(module, "AttestationServiceClient", client_cls)
    pipeline = MagicMock()
    monkeypatch.setattr(module, "build_pipeline", MagicMock(return_value=pipeline))

    return SimpleNamespace(
        main=module.main,
        settings_cls=settings_cls,
        service=client_cls.return_value.__enter__.return_value,
        pipeline=pipeline,
    )


def run(cli, monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["main.py", *argv])
    cli.main()


def outcome(status):
    return VerificationOutcome(status=status, round_id=791508, last_finalized_round_id=791507)


def test_verify_success_exits_cleanly(cli, monkeypatch):
    cli.pipeline.verify_request.return_value = outcome("verified")

    run(cli, monkeypatch, "verify", "--round", "791508", "--tx-id", TX_ID, "--in-utxo", "8")

    args, _ = cli.pipeline.verify_request.call_args
    assert args[:4] == (791508, "Payment", "btc", "testBTC")
    assert args[4] == {"transactionId": TX_ID, "inUtxo": "8", "utxo": "0"}
    cli.pipeline.state_connector.wait_for_finality.assert_not_called()


@pytest.mark.parametrize("status", ["not_finalized", "proof_unavailable", "rejected"])
def test_verify_unverified_outcome_exits_2(cli, monkeypatch, status):
    cli.pipeline.verify_request.return_value = outcome(status)

    with pytest.raises(SystemExit) as exc:
        run(cli, monkeypatch, "verify", "--round", "791508", "--tx-id", TX_ID)

    assert exc.value.code == 2


def test_verify_wait_polls_finality_first(cli, monkeypatch, settings):
    cli.pipeline.verify_request.return_value = outcome("verified")

    run(cli, monkeypatch, "verify", "--round", "791508", "--tx-id", TX_ID, "--wait")

    cli.pipeline.state_connector.wait_for_finality.assert_called_once_with(
        791508, attempts=settings.poll_attempts, backoff=settings.poll_backoff,
    )


def test_failure_is_logged_and_exits_1(cli, monkeypatch):
    cli.pipeline.submit.side_effect = RuntimeError("rpc unreachable")

    with pytest.raises(SystemExit) as exc:
        run(cli, monkeypatch, "submit", "--tx-id", TX_ID)

    assert exc.value.code == 1


def test_settings_error_exits_1(cli, monkeypatch):
    cli.settings_cls.from_env.side_effect = ValueError("ATTESTATION_URL missing")

    with pytest.raises(SystemExit) as exc:
        run(cli, monkeypatch, "address", "--address", "rAny")

    assert exc.value.code == 1


def test_address_checks_each_address(cli, monkeypatch):
    cli.service.prepare_response.return_value = PreparedResponse(status="INVALID")

    run(cli, monkeypatch, "address", "--address", "rOne", "--address", "Hello world!")

    calls = cli.service.prepare_response.call_args_list
    assert [c.args[3] for c in calls] == [{"addressStr": "rOne"}, {"addressStr": "Hello world!"}]
    assert all(c.args[:3] == ("AddressValidity", "xrp", "testXRP") for c in calls)
