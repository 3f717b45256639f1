"""
Main CLI entry point for TokenVest.
"""

from __future__ import annotations

import logging
import os
import sys

import click

from tokenvest.cli.vesting_commands import distribute, investors, transfers

logger = logging.getLogger(__name__)


@click.group()
@click.option(
    "--node-url",
    default=lambda: os.getenv("TOKENVEST_NODE_URL", "http://localhost:8095"),
    show_default="http://localhost:8095",
    help="TokenVest API base URL",
)
@click.option("--caller", envvar="TOKENVEST_CALLER", help="Account id sent as the caller identity")
@click.option("--timeout", default=30.0, type=float, help="Request timeout in seconds")
@click.option("--json-output", is_flag=True, help="Print raw JSON responses")
@click.pass_context
def cli(ctx: click.Context, node_url: str, caller: str | None, timeout: float, json_output: bool):
    """TokenVest vesting ledger commands."""
    ctx.ensure_object(dict)
    ctx.obj.update(node_url=node_url, caller=caller, timeout=timeout, json_output=json_output)


@cli.command("serve")
@click.option("--host", default="0.0.0.0", help="Interface to bind")
@click.option("--port", default=None, type=int, help="Port (defaults to TOKENVEST_API_PORT)")
def serve(host: str, port: int | None):
    """Run the vesting API using environment configuration."""
    from tokenvest.core.config import Config
    from tokenvest.core.logging_config import setup_from_config
    from tokenvest.core.node_api import run_server

    setup_from_config(Config)
    run_server(Config, host=host, port=port)


cli.add_command(investors)
cli.add_command(distribute)
cli.add_command(transfers)


def main():
    return cli(obj={})


if __name__ == "__main__":
    sys.exit(main() or 0)
