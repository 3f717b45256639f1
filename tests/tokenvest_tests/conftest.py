import sys
from pathlib import Path

import pytest

# Make vesting_helpers importable from the unit test modules.
sys.path.insert(0, str(Path(__file__).resolve().parent))

from vesting_helpers import (  # noqa: E402
    OWNER,
    TOKEN_CONTRACT,
    TOTAL_SUPPLY,
    FakeTransferService,
    ImmediateExecutor,
    ManualClock,
    epoch,
)
from tokenvest.blockchain.transfer_coordinator import TransferCoordinator  # noqa: E402
from tokenvest.blockchain.vesting_ledger import CreationPolicy, VestingLedger  # noqa: E402
from tokenvest.blockchain.vesting_manager import VestingManager  # noqa: E402


@pytest.fixture
def clock():
    return ManualClock(epoch(2024, 1, 15))


@pytest.fixture
def transfer_service():
    return FakeTransferService()


@pytest.fixture
def ledger():
    return VestingLedger(CreationPolicy(owner_id=OWNER, total_supply=TOTAL_SUPPLY))


@pytest.fixture
def coordinator(ledger, transfer_service):
    return TransferCoordinator(ledger, transfer_service, executor=ImmediateExecutor())


@pytest.fixture
def manager(clock, transfer_service):
    vesting_manager = VestingManager(
        owner_id=OWNER,
        total_supply=TOTAL_SUPPLY,
        token_contract=TOKEN_CONTRACT,
        transfer_service=transfer_service,
        time_provider=clock.now,
        executor=ImmediateExecutor(),
    )
    yield vesting_manager
    vesting_manager.shutdown()
