"""
FeedWorkflow - identity, order, transaction, confirmation.
"""
import logging
import threading
from typing import Any, Callable, Dict, Optional

from .api import AicraftApiClient
from .builder import build_feed_args
from .exceptions import AicraftError, WorkflowCancelled
from .executor import FeedExecutor
from .models import ContractCallArgs, OrderTemplate, Stage, WorkflowResult


class FeedWorkflow:
    """
    Runs one feed order end to end.

    The run moves through ``Stage`` in order and stops at the first error.
    Nothing is retried. Errors are reported in the returned WorkflowResult
    rather than raised, with the stage that was being attempted.

    Note that the order is created server-side before the transaction is
    signed; if the process dies in between, the order stays unsettled.
    """

    def __init__(
        self,
        api: AicraftApiClient,
        executor: FeedExecutor,
        builder: Callable[[Dict[str, Any]], ContractCallArgs] = build_feed_args,
        cancel_event: Optional[threading.Event] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the workflow

        Args:
            api: REST client for identity and orders
            executor: Chain executor for the feed transaction
            builder: Converts the order response to contract arguments
            cancel_event: When set, the run stops before its next network or
                chain call. A broadcast transaction is still confirmed.
            logger: Optional logger instance to use for debug/info logging
        """
        self.api = api
        self.executor = executor
        self.builder = builder
        self.cancel_event = cancel_event
        self.logger = logger or logging.getLogger(__name__)

    def _check_cancelled(self, before: Stage) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise WorkflowCancelled(f"Run cancelled before {before.value}")

    def run(self, template: OrderTemplate) -> WorkflowResult:
        """
        Execute the workflow

        Args:
            template: Candidate, chain and amount for the order

        Returns:
            WorkflowResult; ``success`` is False if any stage failed
        """
        state: Dict[str, Any] = {}
        attempting = Stage.IDENTITY_FETCHED
        try:
            self._check_cancelled(attempting)
            identity = self.api.get_identity()
            state["identity"] = identity
            if identity.remaining_votes <= 0:
                self.logger.warning(
                    f"No votes remaining today ({identity.today_feed_count} feeds already made)"
                )

            attempting = Stage.ORDER_PLACED
            self._check_cancelled(attempting)
            order = self.api.create_order(template.for_identity(identity))
            state["order"] = order

            attempting = Stage.ARGS_BUILT
            args = self.builder(order)

            attempting = Stage.SUBMITTED
            self._check_cancelled(attempting)
            tx_hash = self.executor.submit(args)
            state["tx_hash"] = tx_hash

            # Broadcast already happened; the wait is not cancellable
            attempting = Stage.CONFIRMED
            receipt = self.executor.wait_for_confirmation(tx_hash)
            state["receipt"] = receipt
        except AicraftError as e:
            self.logger.error(
                f"Feed workflow failed at {attempting.value}: {type(e).__name__}: {e}"
            )
            return WorkflowResult(
                success=False,
                stage=Stage.FAILED,
                failed_stage=attempting,
                error_kind=type(e).__name__,
                error=str(e),
                **state
            )

        self.logger.info(
            f"Feed confirmed: tx {receipt.tx_hash} in block {receipt.block_number}"
        )
        return WorkflowResult(success=True, stage=Stage.CONFIRMED, **state)
