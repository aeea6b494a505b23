"""
Exceptions for the AICraft SDK.
"""
from typing import Any, Optional


class AicraftError(Exception):
    """Base exception for all AICraft SDK errors."""
    pass


class ConfigError(AicraftError):
    """Raised when account or network configuration is missing or invalid."""
    pass


class ApiError(AicraftError):
    """Raised when the AICraft REST API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class AuthError(ApiError):
    """Raised when the authenticated profile read fails."""
    pass


class OrderError(ApiError):
    """Raised when the order endpoint rejects the order."""
    pass


class MalformedResponseError(AicraftError):
    """Raised when an API response lacks the fields we need."""
    pass


class ValidationError(AicraftError):
    """Raised when a payment descriptor is missing a required field."""

    def __init__(self, message: str, field: str):
        self.field = field
        super().__init__(message)


class EncodingError(AicraftError):
    """Raised when a payment field cannot be converted to its contract type."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class EstimationError(AicraftError):
    """Raised when the node rejects the gas estimation (e.g. the call would revert)."""

    def __init__(self, message: str, reason: Optional[str] = None, data: Any = None):
        self.reason = reason
        self.data = data
        super().__init__(message)


class SubmissionError(AicraftError):
    """Raised when signing or broadcasting the transaction fails."""
    pass


class TransactionRevertedError(SubmissionError):
    """Raised when the transaction was mined but reverted."""

    def __init__(self, message: str, receipt: Any = None):
        self.receipt = receipt
        super().__init__(message)


class ConfirmationTimeoutError(AicraftError):
    """Raised when the transaction does not reach the confirmation depth in time."""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        super().__init__(message)


class WorkflowCancelled(AicraftError):
    """Raised when a run is cancelled before its next network or chain call."""
    pass
