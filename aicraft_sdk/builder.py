"""
Conversion of an order's payment descriptor into ``feed(...)`` call arguments.
"""
import json
import logging
import re
from typing import Dict, Any

from eth_utils import is_0x_prefixed, to_bytes

from .exceptions import ValidationError, EncodingError
from .models import ContractCallArgs

logger = logging.getLogger(__name__)

DECIMAL_DIGITS = re.compile(r"[0-9]+")

# Checked in this order; the first missing field is reported
REQUIRED_FIELDS = (
    "candidateID",
    "feedAmount",
    "requestID",
    "requestData",
    "userHashedMessage",
    "integritySignature",
)

UINT256_MAX = 2**256 - 1


def extract_params(payment: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return ``data.payment.params`` from an order response

    Raises:
        ValidationError: If any level of the path is absent
    """
    node: Any = payment
    for key in ("data", "payment", "params"):
        node = node.get(key) if isinstance(node, dict) else None
        if node is None:
            break
    if not isinstance(node, dict):
        raise ValidationError(
            "Missing payment params in order response: data.payment.params",
            field="data.payment.params"
        )
    return node


def check_required(params: Dict[str, Any]) -> None:
    for field in REQUIRED_FIELDS:
        value = params.get(field)
        if value is None or value == "":
            raise ValidationError(f"Missing required field in payment params: {field}", field=field)


def parse_uint256(value: Any, field: str = "feedAmount") -> int:
    """Parse a base-10 integer string into the uint256 range"""
    if isinstance(value, bool):
        raise EncodingError(f"{field} must be a base-10 integer, got {value!r}", field=field)
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        if not DECIMAL_DIGITS.fullmatch(text):
            raise EncodingError(f"{field} is not a base-10 integer: {value!r}", field=field)
        number = int(text, 10)
    if number < 0 or number > UINT256_MAX:
        raise EncodingError(f"{field} does not fit in uint256: {value!r}", field=field)
    return number


def hex_to_bytes(value: Any, field: str) -> bytes:
    """Decode a 0x-prefixed, even-length hex string"""
    if not isinstance(value, str) or not is_0x_prefixed(value):
        raise EncodingError(f"{field} must be a 0x-prefixed hex string", field=field)
    if len(value) % 2:
        raise EncodingError(f"{field} has an odd number of hex digits", field=field)
    try:
        return to_bytes(hexstr=value)
    except ValueError as e:
        raise EncodingError(f"{field} is not valid hex: {e}", field=field) from e


def _reject_constant(name: str):
    raise ValueError(f"{name} is not allowed")


def canonicalize_json(value: Any, field: str = "requestData") -> str:
    """
    Parse and re-serialize a JSON string

    The output is compact, keeps key order and non-ASCII text, so a value
    that was signed in that form is passed through unchanged.
    """
    if not isinstance(value, str):
        raise EncodingError(f"{field} must be a JSON-encoded string", field=field)
    try:
        parsed = json.loads(value, parse_constant=_reject_constant)
        return json.dumps(parsed, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except ValueError as e:
        raise EncodingError(f"{field} is not valid JSON: {e}", field=field) from e


def build_feed_args(payment: Dict[str, Any]) -> ContractCallArgs:
    """
    Validate a payment descriptor and convert it to contract call arguments

    Args:
        payment: Order response as returned by ``AicraftApiClient.create_order``

    Returns:
        ContractCallArgs in ``feed`` argument order

    Raises:
        ValidationError: Naming the first missing required field
        EncodingError: If a field cannot be converted to its contract type
    """
    params = extract_params(payment)
    check_required(params)

    args = ContractCallArgs(
        candidate_id=str(params["candidateID"]),
        feed_amount=parse_uint256(params["feedAmount"]),
        request_id=str(params["requestID"]),
        request_data=canonicalize_json(params["requestData"]),
        signature=hex_to_bytes(params["userHashedMessage"], "userHashedMessage"),
        integrity_signature=hex_to_bytes(params["integritySignature"], "integritySignature"),
    )
    logger.debug(
        f"Built feed args: candidate={args.candidate_id} amount={args.feed_amount} "
        f"request={args.request_id}"
    )
    return args
