"""
Core API Blueprint

Handles operational endpoints: health and Prometheus metrics.
"""

from __future__ import annotations

import time
from typing import Any, Dict, Tuple

from flask import Blueprint, Response, jsonify
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from tokenvest.core.api_blueprints.base import get_vesting_manager

core_bp = Blueprint("core", __name__)


@core_bp.route("/health", methods=["GET"])
def health_check() -> Tuple[Dict[str, Any], int]:
    """Health check endpoint for Docker and monitoring."""
    manager = get_vesting_manager()
    return (
        jsonify(
            {
                "status": "healthy",
                "timestamp": time.time(),
                "investors": len(manager.ledger),
                "pending_transfers": manager.coordinator.pending_count(),
            }
        ),
        200,
    )


@core_bp.route("/metrics", methods=["GET"])
def metrics() -> Response:
    """Prometheus exposition of the vesting metrics."""
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
