"""
Vesting payout instrumentation for TokenVest.

Provides Prometheus metrics that track dispatched, committed and failed
payouts, with helper functions that are safe to call from transfer
continuations running on worker threads.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge

payout_events = Counter(
    "tokenvest_payout_events_total",
    "Total number of payout state transitions",
    ["state"],
)

tokens_committed_counter = Counter(
    "tokenvest_tokens_committed_total", "Total tokens paid out by confirmed transfers"
)

tokens_unrecorded_counter = Counter(
    "tokenvest_tokens_unrecorded_total",
    "Tokens sent by confirmed transfers that could not be written to the ledger",
)

investors_gauge = Gauge("tokenvest_investors", "Number of vesting records in the ledger")


def record_dispatched() -> None:
    payout_events.labels(state="dispatched").inc()


def record_committed(amount: int) -> None:
    """Count a confirmed payout and the tokens it moved."""
    payout_events.labels(state="committed").inc()
    if amount > 0:
        tokens_committed_counter.inc(amount)


def record_unchanged() -> None:
    payout_events.labels(state="unchanged").inc()


def update_investor_count(count: int) -> None:
    investors_gauge.set(count)


def record_commit_failed(amount: int) -> None:
    """Count a confirmed transfer whose ledger write failed."""
    payout_events.labels(state="commit_failed").inc()
    if amount > 0:
        tokens_unrecorded_counter.inc(amount)
