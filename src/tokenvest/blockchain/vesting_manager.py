from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Any, Callable

from tokenvest.blockchain.payout_scheduler import PayoutScheduler
from tokenvest.blockchain.token_transfer_client import TokenTransferClient, TransferService
from tokenvest.blockchain.transfer_coordinator import TransferCoordinator, TransferTicket
from tokenvest.blockchain.vesting_ledger import (
    CreationPolicy,
    InMemoryStore,
    JsonFileStore,
    OrderedStore,
    VestingLedger,
)
from tokenvest.core import vesting_metrics

logger = logging.getLogger("tokenvest.blockchain.vesting_manager")


class VestingManager:
    """
    The vesting contract: owner, supply ceiling, token contract and ledger.

    Exposes the three outer operations: ``add_investor``,
    ``get_all_investors`` and ``distribute_tokens``.
    """

    def __init__(
        self,
        owner_id: str,
        total_supply: int,
        token_contract: str,
        transfer_service: TransferService,
        store: OrderedStore | None = None,
        time_provider: Callable[[], int] | None = None,
        executor: Executor | None = None,
        max_workers: int = 4,
    ):
        if not token_contract:
            raise ValueError("Token contract address cannot be empty.")
        self.token_contract = token_contract
        self.transfer_service = transfer_service
        self.ledger = VestingLedger(CreationPolicy(owner_id=owner_id, total_supply=total_supply), store)
        self.scheduler = PayoutScheduler(time_provider=time_provider)
        self.coordinator = TransferCoordinator(
            self.ledger, transfer_service, executor=executor, max_workers=max_workers
        )
        vesting_metrics.update_investor_count(len(self.ledger))
        logger.info(
            "VestingManager initialized for token contract %s",
            token_contract,
            extra={"event": "vesting.manager_initialized", "investors": len(self.ledger)},
        )

    @property
    def owner_id(self) -> str:
        return self.ledger.policy.owner_id

    @property
    def total_supply(self) -> int:
        return self.ledger.policy.total_supply

    def add_investor(
        self,
        caller: str,
        account_id: str,
        start_date: str,
        vesting_periods: int,
        cycle_months: int,
        total_amount: int | str,
    ) -> dict[str, Any]:
        """
        Creates a vesting record. ``total_amount`` may be a decimal string.
        """
        record = self.ledger.create(
            caller,
            account_id,
            start_date,
            vesting_periods,
            cycle_months,
            _coerce_amount(total_amount),
        )
        vesting_metrics.update_investor_count(len(self.ledger))
        return record.to_json()

    def get_all_investors(self) -> list[tuple[str, dict[str, Any]]]:
        return [(account_id, record.to_json()) for account_id, record in self.ledger.list_all()]

    def get_investor(self, account_id: str) -> dict[str, Any] | None:
        record = self.ledger.get(account_id)
        return record.to_json() if record else None

    def distribute_tokens(self, now: int | None = None) -> list[TransferTicket]:
        """
        Run one distribution pass and dispatch every due payout.

        Returns once the transfers are submitted; the ledger changes later as
        each one is confirmed.
        """
        plans = self.scheduler.plan_due_payouts(self.ledger.list_all(), now=now)
        tickets = [self.coordinator.dispatch(plan.account_id, plan.amount, plan.speculative) for plan in plans]
        if tickets:
            logger.info(
                "Dispatched %d payouts",
                len(tickets),
                extra={"event": "vesting.distribution", "dispatched": len(tickets)},
            )
        return tickets

    def shutdown(self) -> None:
        self.coordinator.shutdown()
        close = getattr(self.transfer_service, "close", None)
        if callable(close):
            close()


def _coerce_amount(value: Any) -> Any:
    # Unparseable values fall through so the ledger reports them after the owner check.
    if isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit():
            return int(text)
    return value


def build_vesting_manager(config: Any) -> VestingManager:
    """Wire a VestingManager from a Config class (see tokenvest.core.config)."""
    transfer_client = TokenTransferClient(
        base_url=config.TRANSFER_URL,
        token_contract=config.TOKEN_CONTRACT,
        timeout=config.TRANSFER_TIMEOUT,
        api_key=config.TRANSFER_API_KEY or None,
    )
    store: OrderedStore = JsonFileStore(config.LEDGER_PATH) if config.LEDGER_PATH else InMemoryStore()
    return VestingManager(
        owner_id=config.OWNER_ID,
        total_supply=config.TOTAL_SUPPLY,
        token_contract=config.TOKEN_CONTRACT,
        transfer_service=transfer_client,
        store=store,
        max_workers=config.TRANSFER_WORKERS,
    )
