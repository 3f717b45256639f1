from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable

from tokenvest.blockchain.vesting_calendar import (
    Date,
    advance_by_cycle,
    current_date,
    date_key,
    format_date,
    parse_date,
)
from tokenvest.blockchain.vesting_ledger import VestingRecord

logger = logging.getLogger("tokenvest.blockchain.payout_scheduler")


@dataclass(frozen=True)
class PayoutPlan:
    account_id: str
    amount: int
    due_date: str
    previous: VestingRecord
    speculative: VestingRecord

    @property
    def is_final(self) -> bool:
        return self.speculative.remaining_payouts == 0


def next_due_date(record: VestingRecord) -> Date:
    """
    Due date of the next unpaid installment.

    The first installment falls on the start date; each later one is one
    cycle after the last confirmed payment.
    """
    if record.remaining_payouts == record.initial_payouts:
        return parse_date(record.start_date)
    year, month, day = parse_date(record.last_payment_date)
    return advance_by_cycle(year, month, day, record.cycle_months)


def installment_amount(record: VestingRecord) -> int:
    # The final installment absorbs the integer division remainder.
    if record.remaining_payouts == 1:
        return record.total_amount - record.paid_amount
    return record.total_amount // record.vesting_periods * record.cycle_months


def plan_payout(account_id: str, record: VestingRecord, today: Date) -> PayoutPlan | None:
    """
    Build the payout for one record, or None when nothing is due.

    Pure: the returned speculative record is not written anywhere.
    """
    if record.is_fully_paid:
        return None

    due = next_due_date(record)
    if date_key(*due) > date_key(*today):
        return None

    amount = installment_amount(record)
    first_installment = record.remaining_payouts == record.initial_payouts
    speculative = record.evolve(
        remaining_payouts=record.remaining_payouts - 1,
        paid_amount=record.paid_amount + amount,
        last_payment_date=record.last_payment_date if first_installment else format_date(*due),
    )
    return PayoutPlan(
        account_id=account_id,
        amount=amount,
        due_date=format_date(*due),
        previous=record,
        speculative=speculative,
    )


class PayoutScheduler:
    def __init__(self, time_provider: Callable[[], int] | None = None):
        self._time_provider = time_provider or (lambda: int(time.time()))

    def _current_time(self) -> int:
        timestamp = self._time_provider()
        try:
            return int(timestamp)
        except (TypeError, ValueError) as exc:
            raise ValueError("time_provider must return an integer timestamp") from exc

    def today(self, now: int | None = None) -> Date:
        return current_date(self._current_time() if now is None else now)

    def plan_due_payouts(
        self, entries: Iterable[tuple[str, VestingRecord]], now: int | None = None
    ) -> list[PayoutPlan]:
        """Evaluate every entry once, in the order given, and return the due payouts."""
        today = self.today(now)
        plans: list[PayoutPlan] = []
        for account_id, record in entries:
            plan = plan_payout(account_id, record, today)
            if plan is None:
                continue
            logger.debug(
                "Payout of %d due for %s (due %s)",
                plan.amount,
                account_id,
                plan.due_date,
            )
            plans.append(plan)
        logger.info("Distribution pass on %s found %d due payouts", format_date(*today), len(plans))
        return plans
