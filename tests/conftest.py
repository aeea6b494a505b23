"""
Pytest fixtures for the AICraft SDK tests.
"""
import copy
import json
import time

import pytest
from unittest.mock import MagicMock
from web3 import Web3

from tests.test_helpers import (
    TEST_ADDRESS, TEST_CONTRACT, TEST_TX_HASH, TEST_BLOCK, TEST_API_URL
)

# ─────────────────────────────────────────────────────────────────────────
#  SAMPLE API PAYLOADS
# ─────────────────────────────────────────────────────────────────────────

REQUEST_DATA = {"candidateID": "67a9b5ccbb141fb88416656b", "amount": 1, "nonce": "abc"}

PAYMENT_RESPONSE = {
    "data": {
        "payment": {
            "params": {
                "candidateID": "67a9b5ccbb141fb88416656b",
                "feedAmount": "1",
                "requestID": "req-42",
                "requestData": json.dumps(REQUEST_DATA, indent=2),
                "userHashedMessage": "0x" + "11" * 65,
                "integritySignature": "0x" + "22" * 65,
            }
        }
    }
}

USER_RESPONSE = {
    "data": {
        "wallets": [{"_id": "w1", "address": TEST_ADDRESS}],
        "invitedBy": {"refCode": "r1"},
        "todayFeedCount": 3,
    }
}


@pytest.fixture(autouse=True)
def _fast_sleep(monkeypatch):
    """Make time.sleep instantaneous so confirmation polling doesn't slow the suite down"""
    monkeypatch.setattr(time, "sleep", lambda *_a, **_kw: None)


@pytest.fixture
def payment_response():
    return copy.deepcopy(PAYMENT_RESPONSE)


@pytest.fixture
def user_response():
    return copy.deepcopy(USER_RESPONSE)


@pytest.fixture
def mock_user_api(requests_mock, user_response):
    """Mock GET /users/me"""
    return requests_mock.get(f"{TEST_API_URL}/users/me", json=user_response, status_code=200)


@pytest.fixture
def mock_order_api(requests_mock, payment_response):
    """Mock POST /feeds/orders"""
    return requests_mock.post(f"{TEST_API_URL}/feeds/orders", json=payment_response, status_code=200)


@pytest.fixture
def mock_signer():
    """Signer double returning a fixed raw transaction"""
    signer = MagicMock()
    signer.address = TEST_ADDRESS
    signer.sign_transaction.return_value.raw_transaction = b"\x02signed"
    return signer


@pytest.fixture
def mock_receipt():
    return {
        "transactionHash": bytes.fromhex(TEST_TX_HASH[2:]),
        "blockNumber": TEST_BLOCK,
        "blockHash": bytes.fromhex("ab" * 32),
        "status": 1,
        "gasUsed": 85000,
        "from": TEST_ADDRESS,
        "to": TEST_CONTRACT,
        "logs": [],
    }


@pytest.fixture
def mock_w3(mock_receipt):
    """
    Web3 double with a feed contract.

    ``mock_w3.feed_fn`` is the bound ``feed(...)`` call; the chain head is
    one block past the receipt so two confirmations are already reached.
    """
    w3 = MagicMock(spec=Web3)
    eth = MagicMock()
    w3.eth = eth

    feed_fn = MagicMock()
    feed_fn.estimate_gas.return_value = 100000

    def build_tx(tx_params):
        return {**tx_params, "to": TEST_CONTRACT, "data": "0xfeed", "chainId": 10143, "value": 0}

    feed_fn.build_transaction.side_effect = build_tx

    contract = MagicMock()
    contract.functions.feed.return_value = feed_fn
    eth.contract.return_value = contract

    eth.get_transaction_count.return_value = 7
    eth.send_raw_transaction.return_value = bytes.fromhex(TEST_TX_HASH[2:])
    eth.wait_for_transaction_receipt.return_value = mock_receipt
    eth.block_number = TEST_BLOCK + 1

    w3.feed_fn = feed_fn
    w3.contract = contract
    return w3
