"""Shared test doubles for the vesting tests."""

import threading
from concurrent.futures import Executor, Future
from datetime import datetime, timezone

from tokenvest.core.vesting_exceptions import TransferError

OWNER = "owner.near"
TOKEN_CONTRACT = "token.near"
TOTAL_SUPPLY = 1_234_567_891_011_121


def epoch(year: int, month: int, day: int, hour: int = 12) -> int:
    """UTC timestamp for the given day (midday by default)."""
    return int(datetime(year, month, day, hour, tzinfo=timezone.utc).timestamp())


class ManualClock:
    def __init__(self, start_time: int):
        self.current_time = start_time

    def now(self) -> int:
        return self.current_time

    def set(self, timestamp: int) -> None:
        self.current_time = timestamp


class ImmediateExecutor(Executor):
    """Runs submitted work in the calling thread."""

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


class DeferredExecutor(Executor):
    """Holds submitted work until ``run_all`` is called."""

    def __init__(self):
        self.queued = []

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        self.queued.append((future, fn, args, kwargs))
        return future

    def run_all(self) -> None:
        queued, self.queued = self.queued, []
        for future, fn, args, kwargs in queued:
            try:
                future.set_result(fn(*args, **kwargs))
            except Exception as exc:
                future.set_exception(exc)


class FakeTransferService:
    """Records every transfer; fails for accounts listed in ``failing``."""

    def __init__(self):
        self.requests = []
        self.failing: set[str] = set()
        self._lock = threading.Lock()

    def transfer(self, request):
        with self._lock:
            self.requests.append(request)
        if request.receiver in self.failing:
            raise TransferError(f"ft_transfer to {request.receiver} rejected")

    @property
    def amounts(self) -> list[int]:
        return [request.amount for request in self.requests]
