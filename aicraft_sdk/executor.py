"""
FeedExecutor - settles an order by calling the feed contract.
"""
import logging
import threading
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Any, Optional

import pydantic
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted
from web3.types import TxReceipt as Web3TxReceipt

from .abi import FEED_ABI
from .exceptions import (
    EstimationError, SubmissionError, TransactionRevertedError, ConfirmationTimeoutError
)
from .models import ContractCallArgs, TxReceipt
from .signer import Signer

# EIP-1559 fee-market transaction
TX_TYPE_DYNAMIC_FEE = 2

# Per-signer locks around nonce acquisition and broadcast
_nonce_locks: Dict[str, threading.Lock] = {}
_nonce_locks_guard = threading.RLock()


def _nonce_lock(address: str) -> threading.Lock:
    with _nonce_locks_guard:
        if address not in _nonce_locks:
            _nonce_locks[address] = threading.Lock()
        return _nonce_locks[address]


def apply_gas_buffer(estimate: int) -> int:
    """Gas limit for an estimate: 1.2x, truncated"""
    return int(estimate) * 12 // 10


@dataclass(frozen=True)
class TxPolicy:
    """
    Fee and confirmation policy for feed transactions.

    Fees are in gwei. ``receipt_timeout`` bounds the whole confirmation
    wait, in seconds.
    """
    max_priority_fee_gwei: Decimal = Decimal("1.5")
    max_fee_gwei: Decimal = Decimal("15")
    confirmations: int = 2
    receipt_timeout: float = 120
    poll_interval: float = 1.0

    def __post_init__(self):
        if self.confirmations < 1:
            raise ValueError("confirmations must be at least 1")
        if self.max_priority_fee_gwei > self.max_fee_gwei:
            raise ValueError("max_priority_fee_gwei cannot exceed max_fee_gwei")

    @property
    def max_priority_fee_wei(self) -> int:
        return Web3.to_wei(self.max_priority_fee_gwei, "gwei")

    @property
    def max_fee_wei(self) -> int:
        return Web3.to_wei(self.max_fee_gwei, "gwei")


class FeedExecutor:
    """
    Estimates, signs, broadcasts and confirms ``feed(...)`` calls.

    Each call to ``submit`` broadcasts at most one transaction; nothing is
    resubmitted on failure.
    """

    def __init__(
        self,
        w3: Web3,
        contract_address: str,
        signer: Signer,
        policy: Optional[TxPolicy] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the executor

        Args:
            w3: Connected Web3 instance
            contract_address: Feed contract address
            signer: Signer used for the transaction
            policy: Fee and confirmation policy (defaults to TxPolicy())
            logger: Optional logger instance to use for debug/info logging
        """
        self.w3 = w3
        self.signer = signer
        self.policy = policy or TxPolicy()
        self.logger = logger or logging.getLogger(__name__)
        self.contract_address = Web3.to_checksum_address(contract_address)
        self.contract = self.w3.eth.contract(address=self.contract_address, abi=FEED_ABI)

    @classmethod
    def from_rpc(
        cls,
        rpc_url: str,
        contract_address: str,
        signer: Signer,
        policy: Optional[TxPolicy] = None,
        timeout: int = 30,
        logger: Optional[logging.Logger] = None
    ) -> "FeedExecutor":
        """Create an executor talking to an HTTP JSON-RPC endpoint"""
        w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
        return cls(w3, contract_address, signer, policy=policy, logger=logger)

    @property
    def address(self) -> str:
        return Web3.to_checksum_address(self.signer.address)

    def _feed_call(self, args: ContractCallArgs):
        return self.contract.functions.feed(*args.as_tuple())

    def estimate_gas(self, args: ContractCallArgs) -> int:
        """
        Simulate the call and return the node's gas estimate

        Raises:
            EstimationError: If the node rejects the simulation; the revert
                reason and data are kept as returned
        """
        try:
            estimate = self._feed_call(args).estimate_gas({"from": self.address})
        except ContractLogicError as e:
            reason = getattr(e, "message", None) or str(e)
            self.logger.error(f"Gas estimation reverted: {reason} (data: {e.data})")
            raise EstimationError(
                f"Gas estimation failed: {reason}", reason=reason, data=e.data
            ) from e
        except Exception as e:
            reason, data = _rpc_error_details(e)
            self.logger.error(f"Gas estimation failed: {reason}")
            raise EstimationError(f"Gas estimation failed: {reason}", reason=reason, data=data) from e
        self.logger.debug(f"Estimated gas: {estimate}")
        return int(estimate)

    def build_transaction(self, args: ContractCallArgs, gas_limit: int, nonce: int) -> Dict[str, Any]:
        return self._feed_call(args).build_transaction({
            "from": self.address,
            "nonce": nonce,
            "gas": gas_limit,
            "type": TX_TYPE_DYNAMIC_FEE,
            "maxPriorityFeePerGas": self.policy.max_priority_fee_wei,
            "maxFeePerGas": self.policy.max_fee_wei,
        })

    def submit(self, args: ContractCallArgs) -> str:
        """
        Estimate gas, then sign and broadcast the feed transaction once

        The nonce is read from the node ("pending") right before signing.

        Returns:
            Transaction hash as a 0x-prefixed hex string

        Raises:
            EstimationError: If gas estimation fails
            SubmissionError: If the nonce lookup, signing or broadcast fails
        """
        gas_limit = apply_gas_buffer(self.estimate_gas(args))

        with _nonce_lock(self.address):
            try:
                nonce = self.w3.eth.get_transaction_count(self.address, "pending")
                tx = self.build_transaction(args, gas_limit, nonce)
            except Exception as e:
                self.logger.error(f"Failed to prepare transaction: {e}")
                raise SubmissionError(f"Failed to prepare transaction: {e}") from e

            try:
                signed_tx = self.signer.sign_transaction(tx)
            except Exception as e:
                self.logger.error(f"Transaction signing failed: {e}")
                raise SubmissionError(f"Failed to sign transaction: {e}") from e

            try:
                tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
            except Exception as e:
                self.logger.error(f"Failed to send transaction: {e}")
                raise SubmissionError(f"Failed to send transaction: {e}") from e

        hex_hash = Web3.to_hex(tx_hash)
        self.logger.info(f"Transaction submitted: {hex_hash} (nonce {nonce}, gas limit {gas_limit})")
        return hex_hash

    def wait_for_confirmation(self, tx_hash: str) -> TxReceipt:
        """
        Wait until the transaction is mined and buried under the configured depth

        Args:
            tx_hash: Hash returned by ``submit``

        Returns:
            Transaction receipt

        Raises:
            ConfirmationTimeoutError: If the depth is not reached within
                ``policy.receipt_timeout`` or the node cannot be queried
            TransactionRevertedError: If the transaction was mined with status 0
        """
        deadline = time.monotonic() + self.policy.receipt_timeout
        try:
            raw_receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self.policy.receipt_timeout,
                poll_latency=self.policy.poll_interval
            )
        except TimeExhausted as e:
            raise ConfirmationTimeoutError(
                f"Transaction {tx_hash} not mined within {self.policy.receipt_timeout}s",
                tx_hash=tx_hash
            ) from e
        except Exception as e:
            raise ConfirmationTimeoutError(
                f"Could not fetch receipt for {tx_hash}: {e}", tx_hash=tx_hash
            ) from e

        try:
            receipt = self._convert_receipt(raw_receipt)
        except (pydantic.ValidationError, TypeError, ValueError) as e:
            self.logger.error(f"Unreadable receipt for {tx_hash}: {e}")
            raise ConfirmationTimeoutError(
                f"Could not read receipt for {tx_hash}: {e}", tx_hash=tx_hash
            ) from e

        if not receipt.succeeded:
            self.logger.error(f"Transaction {tx_hash} reverted in block {receipt.block_number}")
            raise TransactionRevertedError(
                f"Transaction {tx_hash} reverted in block {receipt.block_number}", receipt=receipt
            )

        self._wait_for_depth(receipt, deadline)
        self.logger.info(
            f"Transaction {tx_hash} confirmed in block {receipt.block_number} "
            f"({self.policy.confirmations} confirmations)"
        )
        return receipt

    def execute(self, args: ContractCallArgs) -> TxReceipt:
        """Submit the feed transaction and wait for its confirmations"""
        return self.wait_for_confirmation(self.submit(args))

    def _wait_for_depth(self, receipt: TxReceipt, deadline: float) -> None:
        needed = self.policy.confirmations
        while True:
            try:
                latest = self.w3.eth.block_number
            except Exception as e:
                raise ConfirmationTimeoutError(
                    f"Could not read block number while confirming {receipt.tx_hash}: {e}",
                    tx_hash=receipt.tx_hash
                ) from e
            if latest - receipt.block_number + 1 >= needed:
                return
            if time.monotonic() >= deadline:
                raise ConfirmationTimeoutError(
                    f"Transaction {receipt.tx_hash} has {max(latest - receipt.block_number + 1, 0)} "
                    f"of {needed} confirmations after {self.policy.receipt_timeout}s",
                    tx_hash=receipt.tx_hash
                )
            time.sleep(self.policy.poll_interval)

    def _convert_receipt(self, web3_receipt: Web3TxReceipt) -> TxReceipt:
        """
        Convert Web3 receipt to our TxReceipt model

        Args:
            web3_receipt: The Web3 transaction receipt

        Returns:
            Our TxReceipt model
        """
        receipt_dict = dict(web3_receipt)

        # Convert bytes to hex strings
        for key, value in list(receipt_dict.items()):
            if isinstance(value, bytes):
                receipt_dict[key] = Web3.to_hex(value)
        receipt_dict["logs"] = [dict(log) for log in receipt_dict.get("logs", [])]

        return TxReceipt.model_validate(receipt_dict)


def _rpc_error_details(error: Exception):
    """Pull the message and revert data out of a JSON-RPC error, if present"""
    payload = getattr(error, "rpc_response", None)
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        payload = payload["error"]
    elif error.args and isinstance(error.args[0], dict):
        payload = error.args[0]
    else:
        return str(error), None
    return payload.get("message") or str(error), payload.get("data")
