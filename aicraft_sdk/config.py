"""
Configuration for the AICraft SDK: account secrets, networks and run settings.
"""
import importlib.resources
import json
import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import Dict, Any, Optional, Mapping

import pydantic
from pydantic import BaseModel, Field, SecretStr

from .api import DEFAULT_API_URL
from .exceptions import ConfigError
from .executor import TxPolicy
from .models import OrderTemplate

logger = logging.getLogger(__name__)

DEFAULT_NETWORK = "monad-testnet"
DEFAULT_ACCOUNT_FILE = "account.json"
DEFAULT_CANDIDATE_ID = "67a9b5ccbb141fb88416656b"

# Settings fields that can be set from the environment
ENV_VARS = {
    "api_url": "AICRAFT_API_URL",
    "rpc_url": "AICRAFT_RPC_URL",
    "contract_address": "AICRAFT_CONTRACT_ADDRESS",
    "candidate_id": "AICRAFT_CANDIDATE_ID",
    "chain_id": "AICRAFT_CHAIN_ID",
    "feed_amount": "AICRAFT_FEED_AMOUNT",
    "max_priority_fee_gwei": "AICRAFT_MAX_PRIORITY_FEE_GWEI",
    "max_fee_gwei": "AICRAFT_MAX_FEE_GWEI",
    "confirmations": "AICRAFT_CONFIRMATIONS",
    "receipt_timeout": "AICRAFT_RECEIPT_TIMEOUT",
    "http_timeout": "AICRAFT_HTTP_TIMEOUT",
}


def _error_fields(error: pydantic.ValidationError) -> str:
    # Field names only; input values may be secrets
    return ", ".join(".".join(str(p) for p in err["loc"]) for err in error.errors())


class NetworkConfig:
    """Networks bundled with the package in ``networks.json``"""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        if cls._networks_cache is None:
            text = importlib.resources.files("aicraft_sdk").joinpath("networks.json").read_text()
            cls._networks_cache = json.loads(text)
        return cls._networks_cache

    @classmethod
    def get_network(cls, name: str) -> Dict[str, Any]:
        """
        Look up a network by name

        Raises:
            ConfigError: If the network is unknown
        """
        networks = cls.load_networks()
        if name not in networks:
            raise ConfigError(
                f"Unknown network: {name} (available: {', '.join(sorted(networks))})"
            )
        return networks[name]


class AccountConfig(BaseModel):
    """Account secrets; never logged or printed"""
    private_key: SecretStr = Field(..., alias="privateKey")
    bearer_token: SecretStr = Field(..., alias="bearerToken")

    class Config:
        populate_by_name = True


def load_account(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None
) -> AccountConfig:
    """
    Load account secrets

    The file (``privateKey``/``bearerToken`` keys) is read from ``path``,
    ``$AICRAFT_ACCOUNT_FILE`` or ``account.json``. ``$AICRAFT_PRIVATE_KEY``
    and ``$AICRAFT_BEARER_TOKEN`` override the file and make it optional.

    Raises:
        ConfigError: If the file is unreadable or a secret is missing
    """
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    env_key = environ.get("AICRAFT_PRIVATE_KEY")
    env_token = environ.get("AICRAFT_BEARER_TOKEN")
    account_path = Path(path or environ.get("AICRAFT_ACCOUNT_FILE") or DEFAULT_ACCOUNT_FILE)

    if account_path.exists():
        try:
            with open(account_path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read account file {account_path}: {type(e).__name__}") from None
        if not isinstance(data, dict):
            raise ConfigError(f"Account file {account_path} must contain a JSON object")
        values.update({k: data[k] for k in ("privateKey", "bearerToken") if data.get(k)})
    elif not (env_key and env_token) or path:
        raise ConfigError(f"Account file not found: {account_path}")

    if env_key:
        values["privateKey"] = env_key
    if env_token:
        values["bearerToken"] = env_token

    try:
        return AccountConfig(**values)
    except pydantic.ValidationError as e:
        raise ConfigError(f"Account config is missing: {_error_fields(e)}") from None


class Settings(BaseModel):
    """Run settings; defaults come from the selected network"""
    network: str = DEFAULT_NETWORK
    api_url: str = DEFAULT_API_URL
    rpc_url: str
    contract_address: str
    chain_id: str
    candidate_id: str = DEFAULT_CANDIDATE_ID
    feed_amount: int = Field(1, gt=0)
    max_priority_fee_gwei: Decimal = Field(Decimal("1.5"), ge=0)
    max_fee_gwei: Decimal = Field(Decimal("15"), gt=0)
    confirmations: int = Field(2, ge=1)
    receipt_timeout: float = Field(120, gt=0)
    http_timeout: int = Field(30, gt=0)

    @classmethod
    def load(
        cls,
        network: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None
    ) -> "Settings":
        """
        Build settings from network defaults, ``AICRAFT_*`` variables and overrides

        Later sources win: network entry, then environment, then ``overrides``
        (``None`` values are ignored).

        Raises:
            ConfigError: If the network is unknown or a value is invalid
        """
        environ = os.environ if environ is None else environ
        network = network or environ.get("AICRAFT_NETWORK") or DEFAULT_NETWORK
        net = NetworkConfig.get_network(network)

        values: Dict[str, Any] = {
            "network": network,
            "rpc_url": net["rpc"],
            "contract_address": net["feedContract"],
            "chain_id": str(net["chainId"]),
        }
        for field, var in ENV_VARS.items():
            if environ.get(var):
                values[field] = environ[var]
        values.update({k: v for k, v in (overrides or {}).items() if v is not None})

        try:
            settings = cls(**values)
        except pydantic.ValidationError as e:
            raise ConfigError(f"Invalid settings: {_error_fields(e)}") from None
        logger.debug(f"Loaded settings for {network}: {settings.model_dump()}")
        return settings

    def tx_policy(self) -> TxPolicy:
        try:
            return TxPolicy(
                max_priority_fee_gwei=self.max_priority_fee_gwei,
                max_fee_gwei=self.max_fee_gwei,
                confirmations=self.confirmations,
                receipt_timeout=self.receipt_timeout,
            )
        except ValueError as e:
            raise ConfigError(f"Invalid transaction policy: {e}") from e

    def order_template(self) -> OrderTemplate:
        return OrderTemplate(
            candidate_id=self.candidate_id,
            chain_id=self.chain_id,
            feed_amount=self.feed_amount,
        )
