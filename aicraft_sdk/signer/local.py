"""
Signer backed by a private key held in memory.
"""
from typing import Dict, Any

from eth_account import Account
from eth_account.signers.local import LocalAccount


class LocalSigner:
    """Signs transactions with an ``eth_account`` key. Never print the key."""

    def __init__(self, priv_key: str):
        if not priv_key:
            raise ValueError("priv_key must be provided")
        try:
            self._account: LocalAccount = Account.from_key(priv_key)
        except Exception:
            # The message from eth_account may echo the key
            raise ValueError("Invalid private key") from None

    @property
    def address(self) -> str:
        return self._account.address

    def sign_transaction(self, transaction_dict: Dict[str, Any]) -> Any:
        return self._account.sign_transaction(transaction_dict)

    def __repr__(self) -> str:
        return f"LocalSigner(address={self.address!r})"
