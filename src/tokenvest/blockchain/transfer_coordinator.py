"""
Transfer Coordinator - commit-on-confirm payouts for the vesting ledger

Each due payout becomes a TransferTicket that moves through
PENDING -> DISPATCHED -> COMMITTED | UNCHANGED:
- dispatch() submits the token transfer to a worker pool and returns at once
- the continuation writes the speculative record only after a confirmed transfer
- a failed transfer leaves the ledger untouched and is logged; the next
  distribution pass recomputes the same payout
- a ledger write that fails after a confirmed transfer is logged as
  vesting.commit_failed and counted; the ticket ends UNCHANGED

There is no per-account in-flight guard. Two overlapping passes built from the
same stored record can both commit.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from concurrent.futures import CancelledError, Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from functools import partial

from tokenvest.blockchain.token_transfer_client import TransferRequest, TransferService
from tokenvest.blockchain.vesting_ledger import VestingLedger, VestingRecord
from tokenvest.core import vesting_metrics
from tokenvest.core.vesting_exceptions import StorageError, TransferStateError

logger = logging.getLogger(__name__)


class TransferState(str, Enum):
    PENDING = "pending"
    DISPATCHED = "dispatched"
    COMMITTED = "committed"
    UNCHANGED = "unchanged"


_TRANSITIONS = {
    TransferState.PENDING: {TransferState.DISPATCHED},
    TransferState.DISPATCHED: {TransferState.COMMITTED, TransferState.UNCHANGED},
    TransferState.COMMITTED: set(),
    TransferState.UNCHANGED: set(),
}


@dataclass
class TransferTicket:
    """One installment payout and where it is in the confirmation cycle."""

    id: str
    account_id: str
    amount: int
    speculative: VestingRecord
    memo: str | None = None
    state: TransferState = TransferState.PENDING
    error: str | None = None
    created_at: float = field(default_factory=time.time)
    resolved_at: float | None = None

    @property
    def is_resolved(self) -> bool:
        return self.state in (TransferState.COMMITTED, TransferState.UNCHANGED)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "amount": str(self.amount),
            "state": self.state.value,
            "error": self.error,
            "created_at": self.created_at,
            "resolved_at": self.resolved_at,
        }


class TransferCoordinator:
    # Resolved tickets kept for inspection
    MAX_TICKET_HISTORY = 1000

    def __init__(
        self,
        ledger: VestingLedger,
        transfer_service: TransferService,
        executor: Executor | None = None,
        max_workers: int = 4,
    ):
        self._ledger = ledger
        self._transfer_service = transfer_service
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ft-transfer")
        self._lock = threading.RLock()
        self._tickets: dict[str, TransferTicket] = {}
        self._in_flight: dict[str, threading.Event] = {}

    def dispatch(
        self,
        account_id: str,
        amount: int,
        speculative: VestingRecord,
        memo: str | None = None,
    ) -> TransferTicket:
        """
        Start the transfer of ``amount`` to ``account_id``.

        Returns as soon as the transfer is submitted; ``speculative`` is
        written to the ledger only when the transfer succeeds.
        """
        ticket = TransferTicket(
            id=uuid.uuid4().hex,
            account_id=account_id,
            amount=amount,
            speculative=speculative,
            memo=memo,
        )
        with self._lock:
            self._tickets[ticket.id] = ticket
            self._trim_history()

        request = TransferRequest(receiver=account_id, amount=amount, memo=memo)
        self._transition(ticket, TransferState.DISPATCHED)
        vesting_metrics.record_dispatched()
        logger.info(
            "Dispatched transfer of %d to %s",
            amount,
            account_id,
            extra={"event": "vesting.transfer_dispatched", "ticket_id": ticket.id},
        )

        done = threading.Event()
        with self._lock:
            self._in_flight[ticket.id] = done
        try:
            future = self._executor.submit(self._transfer_service.transfer, request)
        except RuntimeError as exc:
            # Executor already shut down; the transfer never left.
            with self._lock:
                self._in_flight.pop(ticket.id, None)
            done.set()
            return self.resolve(ticket, succeeded=False, error=f"transfer not submitted: {exc}")
        future.add_done_callback(partial(self._on_transfer_done, ticket))
        return ticket

    def _on_transfer_done(self, ticket: TransferTicket, future: Future) -> None:
        try:
            error = future.exception()
        except CancelledError as exc:
            error = exc
        try:
            self.resolve(ticket, succeeded=error is None, error=error)
        except Exception:
            logger.exception(
                "Transfer continuation failed",
                extra={"event": "vesting.continuation_error", "ticket_id": ticket.id},
            )
        finally:
            with self._lock:
                done = self._in_flight.pop(ticket.id, None)
            if done is not None:
                done.set()

    def resolve(
        self,
        ticket: TransferTicket,
        succeeded: bool,
        error: BaseException | str | None = None,
    ) -> TransferTicket:
        """
        Continuation for a dispatched ticket.

        On success the ticket's speculative record replaces the stored one.
        On failure the ledger is not touched. If the ledger write fails after a
        confirmed transfer the ticket ends UNCHANGED with the commit error.
        """
        if succeeded:
            with self._lock:
                self._check_transition(ticket, TransferState.COMMITTED)
                try:
                    self._ledger.put(ticket.account_id, ticket.speculative)
                except StorageError as exc:
                    self._transition(ticket, TransferState.UNCHANGED)
                    ticket.error = f"commit failed after confirmed transfer: {exc}"
                    commit_error = exc
                else:
                    commit_error = None
                    self._transition(ticket, TransferState.COMMITTED)
            if commit_error is not None:
                vesting_metrics.record_commit_failed(ticket.amount)
                logger.error(
                    "Transfer of %d to %s confirmed but not recorded: %s",
                    ticket.amount,
                    ticket.account_id,
                    commit_error,
                    extra={
                        "event": "vesting.commit_failed",
                        "ticket_id": ticket.id,
                        "amount": str(ticket.amount),
                    },
                )
                return ticket
            vesting_metrics.record_committed(ticket.amount)
            logger.info(
                "Transfer of %d to %s confirmed",
                ticket.amount,
                ticket.account_id,
                extra={
                    "event": "vesting.transfer_committed",
                    "ticket_id": ticket.id,
                    "remaining_payouts": ticket.speculative.remaining_payouts,
                },
            )
        else:
            with self._lock:
                self._transition(ticket, TransferState.UNCHANGED)
                ticket.error = str(error) if error is not None else "transfer failed"
            vesting_metrics.record_unchanged()
            logger.warning(
                "Transfer of %d to %s failed: %s",
                ticket.amount,
                ticket.account_id,
                ticket.error,
                extra={"event": "vesting.transfer_failed", "ticket_id": ticket.id},
            )
        return ticket

    def _check_transition(self, ticket: TransferTicket, target: TransferState) -> None:
        if target not in _TRANSITIONS[ticket.state]:
            raise TransferStateError(
                f"Cannot move transfer {ticket.id} from {ticket.state.value} to {target.value}",
                details={"ticket_id": ticket.id, "state": ticket.state.value},
            )

    def _transition(self, ticket: TransferTicket, target: TransferState) -> None:
        with self._lock:
            self._check_transition(ticket, target)
            ticket.state = target
            if ticket.is_resolved:
                ticket.resolved_at = time.time()

    def _trim_history(self) -> None:
        if len(self._tickets) <= self.MAX_TICKET_HISTORY:
            return
        for ticket_id in [tid for tid, t in self._tickets.items() if t.is_resolved]:
            del self._tickets[ticket_id]
            if len(self._tickets) <= self.MAX_TICKET_HISTORY // 2:
                break

    def tickets(self) -> list[TransferTicket]:
        with self._lock:
            return list(self._tickets.values())

    def get_ticket(self, ticket_id: str) -> TransferTicket | None:
        with self._lock:
            return self._tickets.get(ticket_id)

    def pending_count(self) -> int:
        with self._lock:
            return sum(1 for t in self._tickets.values() if not t.is_resolved)

    def wait_for_pending(self, timeout: float | None = None) -> bool:
        """Block until every in-flight transfer has resolved; False on timeout."""
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._lock:
            events = list(self._in_flight.values())
        for event in events:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            if not event.wait(remaining):
                return False
        return True

    def shutdown(self, wait_for_transfers: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait_for_transfers)
        logger.info("TransferCoordinator shutdown complete")
