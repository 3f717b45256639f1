"""
TokenVest - Token Vesting Ledger and Payout Scheduler

Manages fixed token entitlements released in equal periodic installments and
coordinates the external transfers that pay them out.

Main Components:
- Blockchain: vesting calendar, ledger, payout scheduler, transfer coordination
- Core: configuration, logging, exceptions, metrics, HTTP API
- CLI: operator commands against a running node
"""

__version__ = "0.1.0"
__author__ = "TokenVest Development Team"

__all__ = []
