"""
Tests for environment-driven configuration.

The config module reads the environment at import time, so each test reloads
it after adjusting the environment and reloads it again on teardown.
"""

import importlib

import pytest

import tokenvest.core.config as config_module

TOKENVEST_VARS = [
    "TOKENVEST_NETWORK",
    "TOKENVEST_OWNER_ID",
    "TOKENVEST_TOKEN_CONTRACT",
    "TOKENVEST_TOTAL_SUPPLY",
    "TOKENVEST_TRANSFER_URL",
    "TOKENVEST_TRANSFER_TIMEOUT",
    "TOKENVEST_TRANSFER_WORKERS",
    "TOKENVEST_TRANSFER_API_KEY",
    "TOKENVEST_LEDGER_PATH",
    "TOKENVEST_API_PORT",
    "TOKENVEST_LOG_LEVEL",
    "TOKENVEST_LOG_FILE",
]


def _reload_error():
    # Reloading redefines ConfigurationError, so match on the class name.
    with pytest.raises(Exception) as exc_info:
        importlib.reload(config_module)
    assert type(exc_info.value).__name__ == "ConfigurationError"
    return exc_info.value


@pytest.fixture
def clean_env(monkeypatch):
    for var in TOKENVEST_VARS:
        monkeypatch.delenv(var, raising=False)
    yield monkeypatch
    monkeypatch.undo()
    importlib.reload(config_module)


def test_testnet_defaults(clean_env):
    config = importlib.reload(config_module)

    assert config.Config is config.TestnetConfig
    assert config.Config.OWNER_ID == "owner.testnet"
    assert config.Config.TOKEN_CONTRACT == "token.testnet"
    assert config.Config.TOTAL_SUPPLY == 10**27
    assert config.Config.TRANSFER_WORKERS == 4
    assert config.Config.API_PORT == 8095
    assert config.Config.LEDGER_PATH.endswith("vesting_ledger.json")
    assert config.Config.ENVIRONMENT == "testnet"


def test_environment_overrides(clean_env, tmp_path):
    ledger_path = str(tmp_path / "ledger.json")
    clean_env.setenv("TOKENVEST_OWNER_ID", "treasury.near")
    clean_env.setenv("TOKENVEST_TOTAL_SUPPLY", "1000000000000000000000000000000")
    clean_env.setenv("TOKENVEST_TRANSFER_WORKERS", "8")
    clean_env.setenv("TOKENVEST_LEDGER_PATH", ledger_path)
    clean_env.setenv("TOKENVEST_LOG_LEVEL", "debug")

    config = importlib.reload(config_module)

    assert config.Config.OWNER_ID == "treasury.near"
    assert config.Config.TOTAL_SUPPLY == 10**30
    assert config.Config.TRANSFER_WORKERS == 8
    assert config.Config.LEDGER_PATH == ledger_path
    assert config.Config.LOG_LEVEL == "DEBUG"


def test_mainnet_requires_owner(clean_env):
    clean_env.setenv("TOKENVEST_NETWORK", "mainnet")
    clean_env.setenv("TOKENVEST_TOKEN_CONTRACT", "token.near")

    error = _reload_error()
    assert "TOKENVEST_OWNER_ID" in str(error)


def test_mainnet_selects_mainnet_config(clean_env):
    clean_env.setenv("TOKENVEST_NETWORK", "mainnet")
    clean_env.setenv("TOKENVEST_OWNER_ID", "owner.near")
    clean_env.setenv("TOKENVEST_TOKEN_CONTRACT", "token.near")
    clean_env.setenv("TOKENVEST_TRANSFER_URL", "https://rpc.mainnet.near.org")

    config = importlib.reload(config_module)

    assert config.Config is config.MainnetConfig
    assert config.Config.ENVIRONMENT == "production"


@pytest.mark.parametrize(
    "var, value",
    [
        ("TOKENVEST_TOTAL_SUPPLY", "lots"),
        ("TOKENVEST_TOTAL_SUPPLY", "0"),
        ("TOKENVEST_TRANSFER_WORKERS", "-1"),
        ("TOKENVEST_API_PORT", "http"),
    ],
)
def test_invalid_values_rejected(clean_env, var, value):
    clean_env.setenv(var, value)

    _reload_error()
