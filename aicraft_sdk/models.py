"""
Data models for the AICraft SDK.
"""
from enum import Enum
from typing import Dict, Any, Optional, List, Tuple

from pydantic import BaseModel, Field

# Daily feed quota enforced by the AICraft service
DAILY_FEED_LIMIT = 20


class Identity(BaseModel):
    """Account metadata read from ``GET /users/me``"""
    wallet_id: str
    ref_code: str
    today_feed_count: int = Field(..., ge=0)

    @property
    def remaining_votes(self) -> int:
        """Votes left today; negative when the server reports more feeds than the quota"""
        return DAILY_FEED_LIMIT - self.today_feed_count


class OrderTemplate(BaseModel):
    """The caller-chosen part of an order; the rest comes from the identity"""
    candidate_id: str
    chain_id: str
    feed_amount: int = Field(..., gt=0)

    def for_identity(self, identity: Identity) -> "OrderRequest":
        return OrderRequest(
            candidate_id=self.candidate_id,
            chain_id=self.chain_id,
            feed_amount=self.feed_amount,
            ref_code=identity.ref_code,
            wallet_id=identity.wallet_id,
        )


class OrderRequest(BaseModel):
    """Body of ``POST /feeds/orders``"""
    candidate_id: str = Field(..., alias="candidateID")
    chain_id: str = Field(..., alias="chainID")
    feed_amount: int = Field(..., alias="feedAmount", gt=0)
    ref_code: str = Field(..., alias="refCode")
    wallet_id: str = Field(..., alias="walletID")

    class Config:
        populate_by_name = True

    def to_payload(self) -> Dict[str, Any]:
        """Wire representation, keyed the way the API expects"""
        return self.model_dump(by_alias=True)


class ContractCallArgs(BaseModel):
    """Arguments of ``feed(string,uint256,string,string,bytes,bytes)``"""
    candidate_id: str
    feed_amount: int
    request_id: str
    request_data: str
    signature: bytes
    integrity_signature: bytes

    def as_tuple(self) -> Tuple[str, int, str, str, bytes, bytes]:
        """Positional arguments in contract order"""
        return (
            self.candidate_id,
            self.feed_amount,
            self.request_id,
            self.request_data,
            self.signature,
            self.integrity_signature,
        )


class TxReceipt(BaseModel):
    """Transaction receipt from the blockchain"""
    tx_hash: str = Field(..., alias="transactionHash")
    block_number: int = Field(..., alias="blockNumber")
    block_hash: str = Field(..., alias="blockHash")
    status: int
    gas_used: int = Field(..., alias="gasUsed")
    from_address: str = Field(..., alias="from")
    to_address: Optional[str] = Field(None, alias="to")
    logs: List[Dict[str, Any]]

    class Config:
        populate_by_name = True

    @property
    def succeeded(self) -> bool:
        return self.status == 1


class Stage(str, Enum):
    """States of a feed workflow run"""
    START = "start"
    IDENTITY_FETCHED = "identity_fetched"
    ORDER_PLACED = "order_placed"
    ARGS_BUILT = "args_built"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class WorkflowResult(BaseModel):
    """Outcome of a single workflow run"""
    success: bool
    stage: Stage
    failed_stage: Optional[Stage] = None
    error_kind: Optional[str] = None
    error: Optional[str] = None
    identity: Optional[Identity] = None
    order: Optional[Dict[str, Any]] = None
    tx_hash: Optional[str] = None
    receipt: Optional[TxReceipt] = None

    @property
    def remaining_votes(self) -> Optional[int]:
        return self.identity.remaining_votes if self.identity else None

    def summary(self) -> Dict[str, Any]:
        """
        JSON-safe report of the run.

        Returns:
            ``{"success": True, ...}`` with the tx hash and block number, or
            ``{"success": False, "error": message, ...}`` with the failing stage
        """
        out: Dict[str, Any] = {"success": self.success, "stage": self.stage.value}
        if self.identity is not None:
            out["walletID"] = self.identity.wallet_id
            out["remainingVotes"] = self.remaining_votes
        if self.order is not None:
            out["order"] = self.order
        if self.tx_hash:
            out["transactionHash"] = self.tx_hash
        if self.receipt is not None:
            out["blockNumber"] = self.receipt.block_number
        if not self.success:
            out["failedStage"] = self.failed_stage.value if self.failed_stage else None
            out["errorKind"] = self.error_kind
            out["error"] = self.error
        return out
