"""
TokenVest API Blueprints

Usage:
    from tokenvest.core.api_blueprints import register_blueprints
    register_blueprints(app, vesting_manager)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flask import Flask, g

from tokenvest.core.api_blueprints.core_bp import core_bp
from tokenvest.core.api_blueprints.vesting_bp import vesting_bp

if TYPE_CHECKING:
    from tokenvest.blockchain.vesting_manager import VestingManager

__all__ = [
    "core_bp",
    "vesting_bp",
    "register_blueprints",
    "ALL_BLUEPRINTS",
]

logger = logging.getLogger(__name__)

ALL_BLUEPRINTS = [core_bp, vesting_bp]


def register_blueprints(app: Flask, vesting_manager: "VestingManager") -> None:
    """
    Register all API blueprints with the Flask app.

    Sets up a before_request handler that injects the vesting manager into
    Flask's g object, then registers every blueprint.
    """
    api_context = {"vesting_manager": vesting_manager}

    @app.before_request
    def inject_api_context() -> None:
        g.api_context = api_context

    for bp in ALL_BLUEPRINTS:
        app.register_blueprint(bp)
    logger.debug("Registered %d API blueprints", len(ALL_BLUEPRINTS))
