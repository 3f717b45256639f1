"""
TokenVest HTTP API

Builds the Flask application around a VestingManager and runs it.
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Flask

from tokenvest.blockchain.vesting_manager import VestingManager, build_vesting_manager
from tokenvest.core.api_blueprints import register_blueprints

logger = logging.getLogger(__name__)

MAX_JSON_BYTES = 64 * 1024


def create_app(vesting_manager: VestingManager) -> Flask:
    app = Flask("tokenvest")
    app.config["MAX_CONTENT_LENGTH"] = MAX_JSON_BYTES
    register_blueprints(app, vesting_manager)
    app.extensions["vesting_manager"] = vesting_manager
    return app


def run_server(config: Any, host: str = "0.0.0.0", port: int | None = None) -> None:
    """Build a manager from ``config`` and serve the API until interrupted."""
    manager = build_vesting_manager(config)
    app = create_app(manager)
    port = port or config.API_PORT
    logger.info(
        "Starting TokenVest API on %s:%d",
        host,
        port,
        extra={"event": "api.start", "network": config.NETWORK_TYPE.value},
    )
    try:
        app.run(host=host, port=port)
    finally:
        manager.shutdown()
