"""
Base utilities for API Blueprints

Provides common dependencies and helper functions shared across blueprints.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

from flask import g, jsonify, request

if TYPE_CHECKING:
    from tokenvest.blockchain.vesting_manager import VestingManager

logger = logging.getLogger(__name__)

# Identity of the caller, set by the authenticating gateway in front of the API
CALLER_HEADER = "X-Account-Id"


def get_api_context() -> Dict[str, Any]:
    """Get the API context stored in Flask's g object during request setup."""
    return g.get("api_context", {})


def get_vesting_manager() -> "VestingManager":
    """Get the vesting manager instance from context."""
    return get_api_context()["vesting_manager"]


def get_caller_id() -> str:
    return request.headers.get(CALLER_HEADER, "").strip()


def success_response(payload: Dict[str, Any], status: int = 200) -> Tuple[Any, int]:
    """Return a success payload with consistent structure."""
    body = {"success": True, **payload}
    return jsonify(body), status


def error_response(
    message: str,
    status: int = 400,
    code: str = "bad_request",
    context: Optional[Dict[str, Any]] = None,
) -> Tuple[Any, int]:
    """Return an error payload and log it with its context."""
    details = {"code": code, "status": status, **(context or {})}
    if status >= 500:
        logger.error("API error: %s", message, extra={"event": "api.error", **details})
    else:
        logger.warning("API request rejected: %s", message, extra={"event": "api.rejected", **details})
    body: Dict[str, Any] = {"success": False, "error": message, "code": code}
    if context and "errors" in context:
        body["errors"] = context["errors"]
    return jsonify(body), status
