"""
Client for the external fungible-token contract.

The vesting contract never moves tokens itself; it asks the token contract to
run ``ft_transfer`` from the vesting account to the beneficiary. A call
returns normally on success and raises TransferError otherwise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import requests

from tokenvest.core.vesting_exceptions import TransferError

logger = logging.getLogger(__name__)

# One yocto unit must be attached to ft_transfer calls.
ATTACHED_DEPOSIT = 1
TRANSFER_GAS = 30_000_000_000_000


@dataclass(frozen=True)
class TransferRequest:
    receiver: str
    amount: int
    memo: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "receiver_id": self.receiver,
            "amount": str(self.amount),
            "memo": self.memo,
        }


class TransferService(Protocol):
    def transfer(self, request: TransferRequest) -> None: ...


class TokenTransferClient:
    """Calls ``ft_transfer`` on the token contract over HTTP."""

    def __init__(
        self,
        base_url: str,
        token_contract: str,
        timeout: float = 30.0,
        api_key: str | None = None,
        session: requests.Session | None = None,
    ):
        if not base_url:
            raise ValueError("Transfer service URL cannot be empty.")
        if not token_contract:
            raise ValueError("Token contract address cannot be empty.")
        self.base_url = base_url.rstrip("/")
        self.token_contract = token_contract
        self.timeout = timeout
        self.api_key = api_key
        self._session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/contracts/{self.token_contract}/ft_transfer"

    def transfer(self, request: TransferRequest) -> None:
        body = {
            "args": request.to_payload(),
            "deposit": str(ATTACHED_DEPOSIT),
            "gas": str(TRANSFER_GAS),
        }
        headers = {}
        if self.api_key:
            headers["X-API-Key"] = self.api_key

        logger.debug("ft_transfer request: %s -> %s", request.amount, request.receiver)
        try:
            response = self._session.post(self.endpoint, json=body, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransferError(
                f"ft_transfer to {request.receiver} failed: {exc}",
                details={"receiver": request.receiver, "amount": str(request.amount)},
            ) from exc

        if not 200 <= response.status_code < 300:
            raise TransferError(
                f"ft_transfer to {request.receiver} returned {response.status_code}",
                status_code=response.status_code,
                details={"receiver": request.receiver, "amount": str(request.amount)},
            )

    def close(self) -> None:
        self._session.close()
