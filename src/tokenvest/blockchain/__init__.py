"""
TokenVest Blockchain Module

Vesting components that sit between the contract owner and the token ledger:
- Calendar arithmetic for installment due dates
- Ledger of beneficiary vesting records
- Payout scheduling with exact remainder handling
- Commit-on-confirm coordination of external token transfers
"""

__all__ = []
