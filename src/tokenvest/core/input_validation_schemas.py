from __future__ import annotations

from pydantic import BaseModel, Field, conint, constr


class InvestmentInput(BaseModel):
    account_id: constr(min_length=1, max_length=64)
    start_date: constr(min_length=10, max_length=10)
    vesting_periods: conint(gt=0, le=255)
    cycle_months: conint(gt=0, le=255)
    # Decimal string so amounts above 2**53 survive JSON clients
    total_amount: str = Field(pattern=r"^[0-9]{1,39}$")
