"""
Vesting-specific exception hierarchy for TokenVest.

Provides typed exceptions for ledger, scheduling and transfer operations so
callers can tell validation failures from storage and transfer failures.
"""

from __future__ import annotations
from typing import Optional, Any, Dict


class VestingError(Exception):
    """Base exception for all vesting-related errors.

    Attributes:
        message: Human-readable error description
        details: Additional context about the error
        recoverable: Whether the operation can be retried
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable


# ==================== Validation Errors ====================


class ValidationError(VestingError):
    """Raised when an investment fails the creation rules.

    Nothing is written to the ledger when this is raised.
    """
    pass


class InvalidDateError(ValidationError):
    """Raised when a start date is not a valid YYYY-MM-DD calendar date."""
    pass


class SupplyCeilingExceededError(ValidationError):
    """Raised when an investment's total amount is above the total supply."""
    pass


# ==================== Authorization Errors ====================


class UnauthorizedError(VestingError):
    """Raised when the caller is not the contract owner."""
    pass


# ==================== Storage Errors ====================


class StorageError(VestingError):
    """Raised when ledger storage operations fail."""
    pass


class CorruptedDataError(StorageError):
    """Raised when stored vesting data is corrupted or invalid."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("recoverable", False)
        super().__init__(message, **kwargs)


# ==================== Transfer Errors ====================


class TransferError(VestingError):
    """Raised when the external token transfer fails."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("recoverable", True)
        super().__init__(message, **kwargs)
        self.status_code = status_code


class TransferStateError(VestingError):
    """Raised on an illegal transfer ticket transition (e.g. resolving twice)."""
    pass
