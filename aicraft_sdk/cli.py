"""
Command line entry point: ``aicraft-feed``.

Exit codes: 0 success, 1 workflow failure, 2 configuration error, 130 cancelled.
"""
import argparse
import json
import logging
import signal
import sys
import threading
from typing import List, Optional

from .api import AicraftApiClient
from .config import Settings, load_account
from .exceptions import ConfigError
from .executor import FeedExecutor
from .signer import LocalSigner
from .version import __version__
from .workflow import FeedWorkflow

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2
EXIT_CANCELLED = 130

logger = logging.getLogger("aicraft_sdk.cli")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="aicraft-feed",
        description="Place an AICraft feed order and settle it on-chain"
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("--account", help="account JSON file with privateKey and bearerToken")
    ap.add_argument("--network", help="network name from networks.json")
    ap.add_argument("--api-url", help="AICraft API base URL")
    ap.add_argument("--rpc-url", help="JSON-RPC endpoint")
    ap.add_argument("--contract", dest="contract_address", help="feed contract address")
    ap.add_argument("--candidate-id", help="candidate to feed")
    ap.add_argument("--chain-id", help="chain ID sent with the order")
    ap.add_argument("--feed-amount", type=int, help="feed amount (positive integer)")
    ap.add_argument("--priority-fee-gwei", dest="max_priority_fee_gwei", help="max priority fee in gwei")
    ap.add_argument("--max-fee-gwei", help="max fee per gas in gwei")
    ap.add_argument("--confirmations", type=int, help="blocks to wait for")
    ap.add_argument("--receipt-timeout", type=float, help="confirmation wait limit in seconds")
    ap.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return ap


_OVERRIDE_FIELDS = (
    "api_url", "rpc_url", "contract_address", "candidate_id", "chain_id", "feed_amount",
    "max_priority_fee_gwei", "max_fee_gwei", "confirmations", "receipt_timeout",
)


def _print_summary(summary: dict) -> None:
    print(json.dumps(summary, indent=2, default=str))


def build_workflow(args: argparse.Namespace, cancel_event: threading.Event):
    """
    Assemble the workflow and its order template from the CLI arguments

    Raises:
        ConfigError: If configuration or a collaborator cannot be set up
    """
    account = load_account(args.account)
    settings = Settings.load(
        network=args.network,
        overrides={name: getattr(args, name) for name in _OVERRIDE_FIELDS}
    )
    try:
        signer = LocalSigner(account.private_key.get_secret_value())
        api = AicraftApiClient(
            account.bearer_token.get_secret_value(),
            api_url=settings.api_url,
            timeout=settings.http_timeout
        )
        executor = FeedExecutor.from_rpc(
            settings.rpc_url,
            settings.contract_address,
            signer,
            policy=settings.tx_policy(),
            timeout=settings.http_timeout
        )
    except ValueError as e:
        raise ConfigError(str(e)) from e

    logger.info(
        f"Feeding candidate {settings.candidate_id} on {settings.network} from {signer.address}"
    )
    workflow = FeedWorkflow(api, executor, cancel_event=cancel_event)
    return workflow, settings.order_template()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    cancel_event = threading.Event()
    try:
        workflow, template = build_workflow(args, cancel_event)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        _print_summary({"success": False, "error": str(e)})
        return EXIT_CONFIG

    def _on_signal(signum, _frame):
        logger.warning(f"Received signal {signum}, stopping before the next network call")
        cancel_event.set()

    previous = {sig: signal.signal(sig, _on_signal) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        result = workflow.run(template)
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    _print_summary(result.summary())
    if result.success:
        return EXIT_OK
    if result.error_kind == "WorkflowCancelled":
        return EXIT_CANCELLED
    return EXIT_FAILED


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
