"""
AicraftApiClient - REST client for the AICraft feed service.
"""
import logging
import urllib.parse
from typing import Dict, Any, Optional

import requests

from .exceptions import AuthError, OrderError, MalformedResponseError
from .models import Identity, OrderRequest

DEFAULT_API_URL = "https://api.aicraft.fun"


class AicraftApiClient:
    """
    Client for the AICraft REST API.

    This client handles:
    1. Reading the authenticated user's profile (wallet, referral code, feed count)
    2. Creating feed orders, which return the payment descriptor to settle on-chain

    Requests are made once; failed calls are not retried.
    """

    def __init__(
        self,
        bearer_token: str,
        api_url: str = DEFAULT_API_URL,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the API client

        Args:
            bearer_token: Bearer credential for the AICraft account
            api_url: Base URL of the API (e.g., "https://api.aicraft.fun")
            timeout: Timeout for HTTP requests in seconds
            session: Optional pre-configured requests session
            logger: Optional logger instance to use for debug/info logging

        Raises:
            ValueError: If the token is empty or the URL doesn't use https
                (unless it's localhost/127.0.0.1)
        """
        if not bearer_token:
            raise ValueError("bearer_token must be provided")

        parsed = urllib.parse.urlparse(api_url)
        host = parsed.netloc.split(':')[0]
        if parsed.scheme != 'https' and host not in ('localhost', '127.0.0.1'):
            raise ValueError(f"api_url must use https:// for security (got: {parsed.scheme}://)")

        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {bearer_token}"})

    def __repr__(self) -> str:
        return f"AicraftApiClient(api_url={self.api_url!r})"

    def get_identity(self) -> Identity:
        """
        Read the authenticated user's profile

        Returns:
            Identity with the first wallet, the inviter's referral code and
            today's feed count

        Raises:
            AuthError: If the request fails or returns a non-2xx status
            MalformedResponseError: If the payload lacks the expected fields
        """
        url = f"{self.api_url}/users/me"
        self.logger.debug(f"Fetching user profile from {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            self.logger.error(f"Profile request failed: {e}")
            raise AuthError(f"Failed to fetch user data: {e}") from e

        if not 200 <= response.status_code < 300:
            raise AuthError(
                f"Failed to fetch user data: {response.status_code}",
                status_code=response.status_code
            )

        body = self._json(response, "user data")
        identity = self._parse_identity(body)
        self.logger.info(
            f"Wallet ID: {identity.wallet_id}, referral code: {identity.ref_code}, "
            f"{identity.remaining_votes} votes remaining today"
        )
        return identity

    def create_order(self, order: OrderRequest) -> Dict[str, Any]:
        """
        Create a feed order

        Args:
            order: Fully populated order request

        Returns:
            The raw payment descriptor returned by the server; its shape is
            checked later by the transaction builder

        Raises:
            OrderError: If the request fails or returns a non-2xx status
            MalformedResponseError: If the body is not JSON
        """
        url = f"{self.api_url}/feeds/orders"
        payload = order.to_payload()
        self.logger.debug(f"Creating order: {payload}")
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            self.logger.error(f"Order request failed: {e}")
            raise OrderError(f"Order request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise OrderError(
                f"HTTP error! status: {response.status_code}",
                status_code=response.status_code
            )

        result = self._json(response, "order")
        self.logger.info("Order created")
        self.logger.debug(f"Order response: {self._sanitize_payload(result)}")
        return result

    def _json(self, response: requests.Response, what: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Invalid JSON in {what} response: {e}") from e

    def _sanitize_payload(self, payload: Any) -> Any:
        """
        Redact signature material from an order response for logging

        Args:
            payload: Order response to sanitize

        Returns:
            Copy of the payload safe for debug logs
        """
        if not isinstance(payload, dict):
            return {"type": str(type(payload))}
        try:
            params = payload["data"]["payment"]["params"]
        except (KeyError, TypeError):
            return payload
        if not isinstance(params, dict):
            return payload

        safe_params = params.copy()
        for field in ("userHashedMessage", "integritySignature"):
            if field in safe_params:
                safe_params[field] = f"[REDACTED - {len(str(safe_params[field]))} chars]"
        data = dict(payload["data"])
        data["payment"] = dict(data["payment"], params=safe_params)
        return dict(payload, data=data)

    def _parse_identity(self, body: Any) -> Identity:
        """
        Extract the identity fields from a ``/users/me`` body

        Wallet policy: an empty wallet list is an error; when several wallets
        are present the first one is used and a warning is logged.
        """
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise MalformedResponseError("User data response is missing 'data'")

        wallets = data.get("wallets")
        if not isinstance(wallets, list) or not wallets:
            raise MalformedResponseError("User data has no wallets (data.wallets is empty or missing)")
        if len(wallets) > 1:
            self.logger.warning(f"User has {len(wallets)} wallets, using the first one")
        first = wallets[0]
        wallet_id = first.get("_id") if isinstance(first, dict) else None
        if not wallet_id:
            raise MalformedResponseError("User data is missing data.wallets[0]._id")

        invited_by = data.get("invitedBy")
        ref_code = invited_by.get("refCode") if isinstance(invited_by, dict) else None
        if not ref_code:
            raise MalformedResponseError("User data is missing data.invitedBy.refCode")

        feed_count = data.get("todayFeedCount")
        if isinstance(feed_count, bool) or not isinstance(feed_count, int) or feed_count < 0:
            raise MalformedResponseError(
                f"User data has an invalid data.todayFeedCount: {feed_count!r}"
            )

        return Identity(wallet_id=str(wallet_id), ref_code=str(ref_code), today_feed_count=feed_count)
