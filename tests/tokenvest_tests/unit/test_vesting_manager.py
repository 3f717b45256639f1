"""
Unit tests for the VestingManager facade.

Tests cover:
- Investor creation through the facade, including decimal string amounts
- Listing records in insertion order
- Distribution passes driven by an injected clock
- Wiring from a Config class
"""

from unittest.mock import MagicMock

import pytest

from vesting_helpers import OWNER, TOKEN_CONTRACT, TOTAL_SUPPLY, ImmediateExecutor, epoch
from tokenvest.blockchain.token_transfer_client import TokenTransferClient
from tokenvest.blockchain.transfer_coordinator import TransferState
from tokenvest.blockchain.vesting_ledger import JsonFileStore
from tokenvest.blockchain.vesting_manager import VestingManager, build_vesting_manager
from tokenvest.core.vesting_exceptions import UnauthorizedError, ValidationError


class TestAddInvestor:
    def test_returns_serialized_record(self, manager):
        record = manager.add_investor(OWNER, "alice.near", "2024-01-15", 12, 1, 1200)

        assert record == {
            "start_date": "2024-01-15",
            "vesting_periods": 12,
            "cycle_months": 1,
            "remaining_payouts": 12,
            "total_amount": "1200",
            "paid_amount": "0",
            "last_payment_date": "2024-01-15",
        }

    def test_accepts_decimal_string_amount(self, manager):
        record = manager.add_investor(OWNER, "alice.near", "2024-01-15", 12, 1, "1000000000000000")
        assert record["total_amount"] == "1000000000000000"

    def test_non_decimal_amount_rejected(self, manager):
        with pytest.raises(ValidationError):
            manager.add_investor(OWNER, "alice.near", "2024-01-15", 12, 1, "12.5")

    def test_owner_checked_before_amount_parsing(self, manager):
        with pytest.raises(UnauthorizedError):
            manager.add_investor("mallory.near", "alice.near", "2024-01-15", 12, 1, "lots")

    def test_owner_and_supply_exposed(self, manager):
        assert manager.owner_id == OWNER
        assert manager.total_supply == TOTAL_SUPPLY
        assert manager.token_contract == TOKEN_CONTRACT


def test_get_all_investors_in_insertion_order(manager):
    manager.add_investor(OWNER, "carol.near", "2024-01-15", 12, 1, 1200)
    manager.add_investor(OWNER, "alice.near", "2024-01-15", 12, 1, 1200)
    manager.add_investor(OWNER, "bob.near", "2024-01-15", 12, 1, 1200)

    investors = manager.get_all_investors()

    assert [account for account, _ in investors] == ["carol.near", "alice.near", "bob.near"]
    assert investors[0][1]["total_amount"] == "1200"


def test_get_investor(manager):
    manager.add_investor(OWNER, "alice.near", "2024-01-15", 12, 1, 1200)

    assert manager.get_investor("alice.near")["remaining_payouts"] == 12
    assert manager.get_investor("nobody.near") is None


def test_empty_ledger_distributes_nothing(manager, transfer_service):
    assert manager.distribute_tokens() == []
    assert transfer_service.requests == []


def test_monthly_vesting_with_remainder(manager, clock, transfer_service):
    manager.add_investor(OWNER, "alice.near", "2024-01-15", 3, 1, 1000)

    for month in (1, 2, 3):
        clock.set(epoch(2024, month, 15))
        tickets = manager.distribute_tokens()
        assert [t.state for t in tickets] == [TransferState.COMMITTED]

    clock.set(epoch(2024, 6, 1))
    assert manager.distribute_tokens() == []

    record = manager.get_investor("alice.near")
    assert transfer_service.amounts == [333, 333, 334]
    assert record["paid_amount"] == "1000"
    assert record["remaining_payouts"] == 0


def test_not_due_before_start_date(manager, clock, transfer_service):
    manager.add_investor(OWNER, "alice.near", "2024-03-01", 12, 1, 1200)

    clock.set(epoch(2024, 2, 29))
    assert manager.distribute_tokens() == []

    clock.set(epoch(2024, 3, 1, hour=0))
    assert len(manager.distribute_tokens()) == 1
    assert transfer_service.amounts == [100]


def test_explicit_time_overrides_clock(manager, transfer_service):
    manager.add_investor(OWNER, "alice.near", "2025-01-01", 12, 1, 1200)

    assert manager.distribute_tokens() == []
    assert len(manager.distribute_tokens(now=epoch(2025, 1, 1))) == 1


def test_failed_transfer_retried_on_next_pass(manager, clock, transfer_service):
    manager.add_investor(OWNER, "alice.near", "2024-01-15", 12, 1, 1200)
    transfer_service.failing.add("alice.near")

    [ticket] = manager.distribute_tokens()
    assert ticket.state is TransferState.UNCHANGED
    assert manager.get_investor("alice.near")["paid_amount"] == "0"

    transfer_service.failing.clear()
    clock.set(epoch(2024, 1, 16))
    [ticket] = manager.distribute_tokens()

    assert ticket.state is TransferState.COMMITTED
    assert manager.get_investor("alice.near")["paid_amount"] == "100"


def test_shutdown_closes_transfer_client():
    service = MagicMock()
    manager = VestingManager(OWNER, TOTAL_SUPPLY, TOKEN_CONTRACT, service, executor=ImmediateExecutor())

    manager.shutdown()

    service.close.assert_called_once_with()


def test_empty_token_contract_rejected(transfer_service):
    with pytest.raises(ValueError):
        VestingManager(OWNER, TOTAL_SUPPLY, "", transfer_service)


class _StubConfig:
    OWNER_ID = OWNER
    TOKEN_CONTRACT = TOKEN_CONTRACT
    TOTAL_SUPPLY = TOTAL_SUPPLY
    TRANSFER_URL = "http://rpc.local"
    TRANSFER_TIMEOUT = 5
    TRANSFER_WORKERS = 2
    TRANSFER_API_KEY = ""
    LEDGER_PATH = ""


def test_build_from_config_uses_memory_store():
    manager = build_vesting_manager(_StubConfig)
    try:
        assert isinstance(manager.coordinator._transfer_service, TokenTransferClient)
        assert manager.coordinator._transfer_service.endpoint == (
            "http://rpc.local/contracts/token.near/ft_transfer"
        )
        assert len(manager.ledger) == 0
    finally:
        manager.shutdown()


def test_build_from_config_reloads_ledger_file(tmp_path):
    class FileConfig(_StubConfig):
        LEDGER_PATH = str(tmp_path / "vesting.json")

    first = build_vesting_manager(FileConfig)
    first.add_investor(OWNER, "alice.near", "2024-01-15", 12, 1, 1200)
    first.shutdown()

    second = build_vesting_manager(FileConfig)
    try:
        assert isinstance(second.ledger._store, JsonFileStore)
        assert [account for account, _ in second.get_all_investors()] == ["alice.near"]
    finally:
        second.shutdown()
