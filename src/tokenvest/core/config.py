"""
TokenVest Configuration

Supports testnet and mainnet with separate configurations.

SECURITY NOTICE:
- The contract owner and token contract MUST be provided via environment
  variables on mainnet
- Never commit API keys to version control
"""

from __future__ import annotations

import logging
import os
from enum import Enum

logger = logging.getLogger(__name__)


class NetworkType(Enum):
    TESTNET = "testnet"
    MAINNET = "mainnet"


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def _get_int(env_var: str, default: int) -> int:
    raw = os.getenv(env_var, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{env_var} must be an integer, got {raw!r}") from exc


def _get_required(env_var: str, network: str, testnet_default: str) -> str:
    """Get a required setting from environment, with mainnet enforcement.

    On mainnet, a missing value raises ConfigurationError.
    On testnet, a missing value falls back to a fixed default with a warning.
    """
    value = os.getenv(env_var, "").strip()
    if value:
        return value

    if network.lower() == NetworkType.MAINNET.value:
        raise ConfigurationError(f"CRITICAL: {env_var} environment variable required for mainnet.")

    logger.warning(
        "%s not set, using testnet default %r",
        env_var,
        testnet_default,
        extra={"event": "config.default_used", "env_var": env_var},
    )
    return testnet_default


# Get network type from environment variable
NETWORK = os.getenv("TOKENVEST_NETWORK", "testnet")  # Default to testnet for safety

OWNER_ID = _get_required("TOKENVEST_OWNER_ID", NETWORK, "owner.testnet")
TOKEN_CONTRACT = _get_required("TOKENVEST_TOKEN_CONTRACT", NETWORK, "token.testnet")
TOTAL_SUPPLY = _get_int("TOKENVEST_TOTAL_SUPPLY", 1_000_000_000 * 10**18)
TRANSFER_URL = os.getenv("TOKENVEST_TRANSFER_URL", "http://localhost:3030").strip()
TRANSFER_TIMEOUT = _get_int("TOKENVEST_TRANSFER_TIMEOUT", 30)
TRANSFER_WORKERS = _get_int("TOKENVEST_TRANSFER_WORKERS", 4)
TRANSFER_API_KEY = os.getenv("TOKENVEST_TRANSFER_API_KEY", "").strip()
LEDGER_PATH = os.getenv("TOKENVEST_LEDGER_PATH", "").strip()
API_PORT = _get_int("TOKENVEST_API_PORT", 8095)
LOG_LEVEL = os.getenv("TOKENVEST_LOG_LEVEL", "INFO").strip().upper()
LOG_FILE = os.getenv("TOKENVEST_LOG_FILE", "").strip()

if TOTAL_SUPPLY <= 0:
    raise ConfigurationError("TOKENVEST_TOTAL_SUPPLY must be a positive integer")
if TRANSFER_WORKERS <= 0:
    raise ConfigurationError("TOKENVEST_TRANSFER_WORKERS must be a positive integer")


class TestnetConfig:
    """Testnet Configuration (for local testing before mainnet)"""

    NETWORK_TYPE = NetworkType.TESTNET
    OWNER_ID = OWNER_ID
    TOKEN_CONTRACT = TOKEN_CONTRACT
    TOTAL_SUPPLY = TOTAL_SUPPLY
    TRANSFER_URL = TRANSFER_URL
    TRANSFER_TIMEOUT = TRANSFER_TIMEOUT
    TRANSFER_WORKERS = TRANSFER_WORKERS
    TRANSFER_API_KEY = TRANSFER_API_KEY
    LEDGER_PATH = LEDGER_PATH or os.path.join(os.getcwd(), "data_testnet", "vesting_ledger.json")
    API_PORT = API_PORT
    LOG_LEVEL = LOG_LEVEL
    LOG_FILE = LOG_FILE
    ENVIRONMENT = "testnet"


class MainnetConfig:
    """Mainnet Configuration (production)"""

    NETWORK_TYPE = NetworkType.MAINNET
    OWNER_ID = OWNER_ID
    TOKEN_CONTRACT = TOKEN_CONTRACT
    TOTAL_SUPPLY = TOTAL_SUPPLY
    TRANSFER_URL = TRANSFER_URL
    TRANSFER_TIMEOUT = TRANSFER_TIMEOUT
    TRANSFER_WORKERS = TRANSFER_WORKERS
    TRANSFER_API_KEY = TRANSFER_API_KEY
    LEDGER_PATH = LEDGER_PATH or os.path.join(os.getcwd(), "data", "vesting_ledger.json")
    API_PORT = API_PORT
    LOG_LEVEL = LOG_LEVEL
    LOG_FILE = LOG_FILE
    ENVIRONMENT = "production"


if NETWORK.lower() == NetworkType.MAINNET.value:
    Config = MainnetConfig
    if not TRANSFER_URL.startswith("https://"):
        logger.warning(
            "Mainnet transfer service is not using HTTPS: %s",
            TRANSFER_URL,
            extra={"event": "config.insecure_transfer_url"},
        )
else:
    Config = TestnetConfig

# Export config
__all__ = [
    "Config",
    "ConfigurationError",
    "NetworkType",
    "TestnetConfig",
    "MainnetConfig",
]
