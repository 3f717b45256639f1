"""
Vesting ledger: one VestingRecord per beneficiary over an ordered store.

The ledger enforces the creation rules (owner check, date, cycle, vesting and
supply bounds). After creation a record is only replaced through ``put``,
which the transfer coordinator calls once a transfer is confirmed.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, replace
from typing import Any, Iterator

from tokenvest.blockchain.vesting_calendar import is_valid_date_format
from tokenvest.core.vesting_exceptions import (
    CorruptedDataError,
    InvalidDateError,
    StorageError,
    SupplyCeilingExceededError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VestingRecord:
    start_date: str
    vesting_periods: int
    cycle_months: int
    remaining_payouts: int
    total_amount: int
    paid_amount: int
    last_payment_date: str

    @property
    def initial_payouts(self) -> int:
        return self.vesting_periods // self.cycle_months

    @property
    def is_fully_paid(self) -> bool:
        return self.remaining_payouts == 0

    def evolve(self, **changes: Any) -> "VestingRecord":
        return replace(self, **changes)

    def to_json(self) -> dict[str, Any]:
        """Render the record with monetary fields as decimal strings."""
        data = asdict(self)
        data["total_amount"] = str(self.total_amount)
        data["paid_amount"] = str(self.paid_amount)
        return data

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "VestingRecord":
        try:
            return cls(
                start_date=str(data["start_date"]),
                vesting_periods=int(data["vesting_periods"]),
                cycle_months=int(data["cycle_months"]),
                remaining_payouts=int(data["remaining_payouts"]),
                total_amount=_parse_amount(data["total_amount"]),
                paid_amount=_parse_amount(data["paid_amount"]),
                last_payment_date=str(data["last_payment_date"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise CorruptedDataError(
                f"Malformed vesting record: {exc}", details={"record": data}
            ) from exc


def _parse_amount(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("amount must be a decimal string")
    if isinstance(value, int):
        return value
    text = str(value)
    if not text.isdigit():
        raise ValueError(f"amount {text!r} is not a decimal string")
    return int(text)


@dataclass(frozen=True)
class CreationPolicy:
    """Who may create investments and the ceiling each one must respect."""

    owner_id: str
    total_supply: int


# ==================== Stores ====================


class OrderedStore(ABC):
    """Ordered key-value map from account id to VestingRecord."""

    @abstractmethod
    def get(self, account_id: str) -> VestingRecord | None: ...

    @abstractmethod
    def put(self, account_id: str, record: VestingRecord) -> None: ...

    @abstractmethod
    def items(self) -> list[tuple[str, VestingRecord]]: ...

    def __contains__(self, account_id: object) -> bool:
        return isinstance(account_id, str) and self.get(account_id) is not None

    def __len__(self) -> int:
        return len(self.items())

    def __iter__(self) -> Iterator[str]:
        return iter([account_id for account_id, _ in self.items()])


class InMemoryStore(OrderedStore):
    """Insertion-ordered store; overwriting a key keeps its position."""

    def __init__(self) -> None:
        self._records: dict[str, VestingRecord] = {}
        self._lock = threading.RLock()

    def get(self, account_id: str) -> VestingRecord | None:
        with self._lock:
            return self._records.get(account_id)

    def put(self, account_id: str, record: VestingRecord) -> None:
        with self._lock:
            self._records[account_id] = record

    def items(self) -> list[tuple[str, VestingRecord]]:
        with self._lock:
            return list(self._records.items())


class JsonFileStore(InMemoryStore):
    """In-memory store mirrored to a JSON file on every write."""

    def __init__(self, path: str) -> None:
        super().__init__()
        self._path = path
        if os.path.exists(path):
            self._load()

    @property
    def path(self) -> str:
        return self._path

    def put(self, account_id: str, record: VestingRecord) -> None:
        with self._lock:
            previous = self._records.get(account_id)
            self._records[account_id] = record
            try:
                self._save()
            except OSError as exc:
                if previous is None:
                    del self._records[account_id]
                else:
                    self._records[account_id] = previous
                raise StorageError(
                    f"Failed to persist vesting ledger to {self._path}: {exc}",
                    details={"account_id": account_id},
                    recoverable=True,
                ) from exc

    def _save(self) -> None:
        data = {account_id: record.to_json() for account_id, record in self._records.items()}
        directory = os.path.dirname(os.path.abspath(self._path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self._path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _load(self) -> None:
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise CorruptedDataError(
                f"Vesting ledger file {self._path} is not valid JSON",
                details={"path": self._path},
            ) from exc
        except OSError as exc:
            raise StorageError(
                f"Failed to read vesting ledger file {self._path}: {exc}",
                details={"path": self._path},
            ) from exc

        if not isinstance(data, dict):
            raise CorruptedDataError(
                f"Vesting ledger file {self._path} must hold a JSON object",
                details={"path": self._path},
            )
        for account_id, record in data.items():
            self._records[account_id] = VestingRecord.from_json(record)
        logger.info("Loaded %d vesting records from %s", len(self._records), self._path)


# ==================== Ledger ====================


class VestingLedger:
    def __init__(self, policy: CreationPolicy, store: OrderedStore | None = None):
        if not policy.owner_id:
            raise ValueError("Owner id cannot be empty.")
        if isinstance(policy.total_supply, bool) or not isinstance(policy.total_supply, int) or policy.total_supply <= 0:
            raise ValueError("Total supply must be a positive integer.")
        self.policy = policy
        self._store = store if store is not None else InMemoryStore()

    def create(
        self,
        caller: str,
        account_id: str,
        start_date: str,
        vesting_periods: int,
        cycle_months: int,
        total_amount: int,
        policy: CreationPolicy | None = None,
    ) -> VestingRecord:
        """
        Validate and insert a new vesting record for ``account_id``.

        Every rule is checked before the store is touched, so a rejected call
        leaves the ledger as it was. An existing record for the same account
        is replaced.
        """
        policy = policy or self.policy

        if caller != policy.owner_id:
            raise UnauthorizedError(
                "Only the contract owner can add an investor.",
                details={"caller": caller},
            )
        if not account_id:
            raise ValidationError("Account id cannot be empty.")
        if not is_valid_date_format(start_date):
            raise InvalidDateError(
                "Invalid date format. Please use YYYY-MM-DD format.",
                details={"start_date": start_date},
            )
        if not _is_positive_int(cycle_months):
            raise ValidationError("Cycle must be a positive integer.", details={"cycle_months": cycle_months})
        if not _is_positive_int(vesting_periods):
            raise ValidationError(
                "Vesting must be a positive integer.", details={"vesting_periods": vesting_periods}
            )
        if vesting_periods < cycle_months:
            raise ValidationError(
                "Vesting must span at least one full cycle.",
                details={"vesting_periods": vesting_periods, "cycle_months": cycle_months},
            )
        if not _is_positive_int(total_amount):
            raise ValidationError(
                "Total amount must be a positive integer.", details={"total_amount": str(total_amount)}
            )
        if total_amount > policy.total_supply:
            raise SupplyCeilingExceededError(
                "Total amount cannot exceed total supply.",
                details={"total_amount": str(total_amount), "total_supply": str(policy.total_supply)},
            )

        record = VestingRecord(
            start_date=start_date,
            vesting_periods=vesting_periods,
            cycle_months=cycle_months,
            remaining_payouts=vesting_periods // cycle_months,
            total_amount=total_amount,
            paid_amount=0,
            last_payment_date=start_date,
        )
        if account_id in self._store:
            logger.warning(
                "Replacing existing vesting record",
                extra={"event": "vesting.record_replaced", "account_id": account_id},
            )
        self._store.put(account_id, record)
        logger.info(
            "Vesting record created for %s",
            account_id,
            extra={
                "event": "vesting.record_created",
                "account_id": account_id,
                "payouts": record.remaining_payouts,
                "total_amount": str(total_amount),
            },
        )
        return record

    def list_all(self) -> list[tuple[str, VestingRecord]]:
        return self._store.items()

    def get(self, account_id: str) -> VestingRecord | None:
        return self._store.get(account_id)

    def put(self, account_id: str, record: VestingRecord) -> None:
        self._store.put(account_id, record)

    def __contains__(self, account_id: object) -> bool:
        return account_id in self._store

    def __len__(self) -> int:
        return len(self._store)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0
