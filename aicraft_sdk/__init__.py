"""
AICraft SDK - place feed orders and settle them on-chain.
"""
from .api import AicraftApiClient
from .builder import build_feed_args
from .config import AccountConfig, NetworkConfig, Settings, load_account
from .exceptions import (
    AicraftError, ConfigError, ApiError, AuthError, OrderError, MalformedResponseError,
    ValidationError, EncodingError, EstimationError, SubmissionError,
    TransactionRevertedError, ConfirmationTimeoutError, WorkflowCancelled
)
from .executor import FeedExecutor, TxPolicy, apply_gas_buffer
from .models import (
    DAILY_FEED_LIMIT, Identity, OrderTemplate, OrderRequest, ContractCallArgs,
    TxReceipt, Stage, WorkflowResult
)
from .signer import Signer, LocalSigner
from .version import __version__
from .workflow import FeedWorkflow

__all__ = [
    "AicraftApiClient",
    "build_feed_args",
    "AccountConfig",
    "NetworkConfig",
    "Settings",
    "load_account",
    "AicraftError",
    "ConfigError",
    "ApiError",
    "AuthError",
    "OrderError",
    "MalformedResponseError",
    "ValidationError",
    "EncodingError",
    "EstimationError",
    "SubmissionError",
    "TransactionRevertedError",
    "ConfirmationTimeoutError",
    "WorkflowCancelled",
    "FeedExecutor",
    "TxPolicy",
    "apply_gas_buffer",
    "DAILY_FEED_LIMIT",
    "Identity",
    "OrderTemplate",
    "OrderRequest",
    "ContractCallArgs",
    "TxReceipt",
    "Stage",
    "WorkflowResult",
    "Signer",
    "LocalSigner",
    "FeedWorkflow",
    "__version__",
]
