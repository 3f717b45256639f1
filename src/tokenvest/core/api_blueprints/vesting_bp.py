"""
Vesting API Blueprint

Endpoints:
- GET /investors - List every vesting record
- GET /investors/<account_id> - Fetch one vesting record
- POST /investors - Create a vesting record (contract owner only)
- POST /distribute - Run one distribution pass
- GET /transfers - Recent payout transfers and their states
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, request
from pydantic import ValidationError as PydanticValidationError

from tokenvest.core.api_blueprints.base import (
    error_response,
    get_caller_id,
    get_vesting_manager,
    success_response,
)
from tokenvest.core.input_validation_schemas import InvestmentInput
from tokenvest.core.vesting_exceptions import UnauthorizedError, ValidationError

logger = logging.getLogger(__name__)

vesting_bp = Blueprint("vesting", __name__)


@vesting_bp.route("/investors", methods=["GET"])
def list_investors() -> tuple[Any, int]:
    manager = get_vesting_manager()
    investors = [
        {"account_id": account_id, **record}
        for account_id, record in manager.get_all_investors()
    ]
    return success_response({"investors": investors, "count": len(investors)})


@vesting_bp.route("/investors/<account_id>", methods=["GET"])
def get_investor(account_id: str) -> tuple[Any, int]:
    record = get_vesting_manager().get_investor(account_id)
    if record is None:
        return error_response(
            f"No vesting record for {account_id}",
            status=404,
            code="not_found",
            context={"account_id": account_id},
        )
    return success_response({"account_id": account_id, **record})


@vesting_bp.route("/investors", methods=["POST"])
def add_investor() -> tuple[Any, int]:
    """Create a vesting record.

    Request Body (InvestmentInput):
        account_id, start_date (YYYY-MM-DD), vesting_periods, cycle_months,
        total_amount (decimal string)

    Headers:
        X-Account-Id: identity of the caller; must be the contract owner

    Returns:
        201 with the stored record, 400 on invalid input, 403 for non-owners
    """
    payload = request.get_json(silent=True) or {}
    try:
        model = InvestmentInput.model_validate(payload)
    except PydanticValidationError as exc:
        return error_response(
            "Invalid investment request",
            status=400,
            code="invalid_payload",
            context={"errors": exc.errors(include_url=False, include_context=False)},
        )

    manager = get_vesting_manager()
    try:
        record = manager.add_investor(
            caller=get_caller_id(),
            account_id=model.account_id,
            start_date=model.start_date,
            vesting_periods=model.vesting_periods,
            cycle_months=model.cycle_months,
            total_amount=model.total_amount,
        )
    except UnauthorizedError as exc:
        return error_response(exc.message, status=403, code="unauthorized", context=exc.details)
    except ValidationError as exc:
        return error_response(exc.message, status=400, code="invalid_investment", context=exc.details)

    return success_response({"account_id": model.account_id, "investment": record}, status=201)


@vesting_bp.route("/distribute", methods=["POST"])
def distribute() -> tuple[Any, int]:
    tickets = get_vesting_manager().distribute_tokens()
    return success_response(
        {"dispatched": len(tickets), "transfers": [ticket.to_dict() for ticket in tickets]},
        status=202,
    )


@vesting_bp.route("/transfers", methods=["GET"])
def list_transfers() -> tuple[Any, int]:
    tickets = get_vesting_manager().coordinator.tickets()
    return success_response({"transfers": [ticket.to_dict() for ticket in tickets]})
