"""
Transaction signers for the AICraft SDK.
"""
from typing import Dict, Any, Protocol

from .local import LocalSigner


class Signer(Protocol):
    """Protocol for custom signers"""
    address: str

    def sign_transaction(self, transaction_dict: Dict[str, Any]) -> Any:
        """Sign transaction and return signed tx object"""
        ...


__all__ = ["Signer", "LocalSigner"]
