"""
Tests for the aicraft-feed command line entry point.
"""
import json
import signal

import pytest
from unittest.mock import patch

from aicraft_sdk import cli
from aicraft_sdk.executor import FeedExecutor, TxPolicy
from tests.test_helpers import TEST_API_URL, TEST_PRIV_KEY, TEST_TOKEN, TEST_TX_HASH, TEST_BLOCK


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("AICRAFT_PRIVATE_KEY", "AICRAFT_BEARER_TOKEN", "AICRAFT_ACCOUNT_FILE",
                "AICRAFT_NETWORK", "AICRAFT_API_URL", "AICRAFT_CONFIRMATIONS"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def account_file(tmp_path):
    path = tmp_path / "account.json"
    path.write_text(json.dumps({"privateKey": TEST_PRIV_KEY, "bearerToken": TEST_TOKEN}))
    return str(path)


@pytest.fixture
def mock_rpc(mock_w3):
    """Route FeedExecutor.from_rpc to the mocked Web3 instance"""
    def from_rpc(rpc_url, contract_address, signer, policy=None, timeout=30, logger=None):
        fast = TxPolicy(
            max_priority_fee_gwei=policy.max_priority_fee_gwei,
            max_fee_gwei=policy.max_fee_gwei,
            confirmations=policy.confirmations,
            receipt_timeout=5,
            poll_interval=0.01,
        )
        return FeedExecutor(mock_w3, contract_address, signer, policy=fast)

    with patch("aicraft_sdk.cli.FeedExecutor.from_rpc", side_effect=from_rpc) as m:
        yield m


def _argv(account_file, *extra):
    return ["--account", account_file, "--api-url", TEST_API_URL, *extra]


def test_parser_maps_overrides():
    args = cli.build_parser().parse_args([
        "--contract", "0xabc", "--priority-fee-gwei", "2", "--feed-amount", "3"
    ])

    assert args.contract_address == "0xabc"
    assert args.max_priority_fee_gwei == "2"
    assert args.feed_amount == 3
    assert args.network is None


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--version"])

    assert exc_info.value.code == 0
    assert "aicraft-feed" in capsys.readouterr().out


def test_success_exit_code(account_file, mock_user_api, mock_order_api, mock_rpc, mock_w3, capsys):
    code = cli.main(_argv(account_file))

    assert code == cli.EXIT_OK
    summary = json.loads(capsys.readouterr().out)
    assert summary["success"] is True
    assert summary["transactionHash"] == TEST_TX_HASH
    assert summary["blockNumber"] == TEST_BLOCK
    assert summary["remainingVotes"] == 17

    rpc_url, contract, _signer = mock_rpc.call_args[0]
    assert rpc_url == "https://testnet-rpc.monad.xyz"
    assert contract == "0xd227d3bCE59b91380b7bc4A61A045B528B509439"
    assert mock_order_api.last_request.json()["chainID"] == "10143"


def test_cli_overrides_reach_order_and_policy(account_file, mock_user_api, mock_order_api,
                                               mock_rpc, mock_w3):
    code = cli.main(_argv(
        account_file, "--candidate-id", "cand-7", "--feed-amount", "2", "--max-fee-gwei", "40"
    ))

    assert code == cli.EXIT_OK
    body = mock_order_api.last_request.json()
    assert body["candidateID"] == "cand-7"
    assert body["feedAmount"] == 2
    tx_params = mock_w3.feed_fn.build_transaction.call_args[0][0]
    assert tx_params["maxFeePerGas"] == 40_000_000_000


def test_workflow_failure_exit_code(account_file, requests_mock, mock_rpc, capsys):
    requests_mock.get(f"{TEST_API_URL}/users/me", status_code=401)

    code = cli.main(_argv(account_file))

    assert code == cli.EXIT_FAILED
    out = capsys.readouterr().out
    summary = json.loads(out)
    assert summary["success"] is False
    assert summary["error"] == "Failed to fetch user data: 401"
    assert TEST_TOKEN not in out


def test_missing_account_is_config_error(tmp_path, capsys):
    code = cli.main(["--account", str(tmp_path / "nope.json")])

    assert code == cli.EXIT_CONFIG
    summary = json.loads(capsys.readouterr().out)
    assert summary["success"] is False
    assert "not found" in summary["error"]


def test_invalid_private_key_is_config_error(tmp_path, capsys):
    path = tmp_path / "account.json"
    path.write_text(json.dumps({"privateKey": "0xnot-a-key", "bearerToken": TEST_TOKEN}))

    code = cli.main(["--account", str(path)])

    assert code == cli.EXIT_CONFIG
    out = capsys.readouterr().out
    assert "Invalid private key" in out
    assert "0xnot-a-key" not in out


def test_unknown_network_is_config_error(account_file, capsys):
    code = cli.main(_argv(account_file, "--network", "mainnet"))

    assert code == cli.EXIT_CONFIG
    assert "Unknown network" in json.loads(capsys.readouterr().out)["error"]


def test_cancelled_exit_code(account_file, requests_mock, mock_rpc, capsys):
    user_route = requests_mock.get(f"{TEST_API_URL}/users/me", json={})
    real_build = cli.build_workflow

    def build_then_cancel(args, cancel_event):
        built = real_build(args, cancel_event)
        cancel_event.set()
        return built

    with patch("aicraft_sdk.cli.build_workflow", side_effect=build_then_cancel):
        code = cli.main(_argv(account_file))

    assert code == cli.EXIT_CANCELLED
    assert json.loads(capsys.readouterr().out)["errorKind"] == "WorkflowCancelled"
    assert not user_route.called


def test_signal_handlers_restored(account_file, mock_user_api, mock_order_api, mock_rpc):
    before = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)}

    cli.main(_argv(account_file))

    assert {sig: signal.getsignal(sig) for sig in before} == before
