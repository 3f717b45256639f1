#!/usr/bin/env python3
"""
TokenVest Vesting CLI Commands

Provides CLI equivalents for the vesting API endpoints:
- Investor listing and creation
- Distribution trigger
- Transfer status
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

import click
import requests
from rich import box
from rich.console import Console
from rich.table import Table

logger = logging.getLogger(__name__)
console = Console()


def _handle_cli_error(exc: Exception, exit_code: int = 1) -> None:
    """Centralized CLI error handler for consistent messaging/exit codes."""
    logger.error("CLI error: %s", exc, exc_info=True)
    console.print(f"[bold red]Error:[/] {exc}")
    sys.exit(exit_code)


class VestingClient:
    """Client for vesting API operations."""

    def __init__(
        self,
        node_url: str,
        timeout: float = 30.0,
        caller: str | None = None,
    ):
        self.node_url = node_url.rstrip("/")
        self.timeout = timeout
        self.caller = caller

    def _request(self, method: str, endpoint: str, **kwargs) -> dict[str, Any]:
        """Make HTTP request to a vesting endpoint."""
        url = f"{self.node_url}/{endpoint.lstrip('/')}"
        logger.debug("Vesting request: %s %s", method, url)
        headers = kwargs.pop("headers", {})
        if self.caller:
            headers.setdefault("X-Account-Id", self.caller)
        try:
            response = requests.request(method, url, timeout=self.timeout, headers=headers, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error("Vesting API error: %s", e)
            raise click.ClickException(f"Vesting API error: {e}")

        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.status_code >= 400:
            message = data.get("error") or f"HTTP {response.status_code}"
            raise click.ClickException(f"Vesting API error: {message}")
        logger.debug("Vesting response: status=%d", response.status_code)
        return data

    def list_investors(self) -> dict[str, Any]:
        return self._request("GET", "/investors")

    def add_investor(
        self,
        account_id: str,
        start_date: str,
        vesting_periods: int,
        cycle_months: int,
        total_amount: str,
    ) -> dict[str, Any]:
        payload = {
            "account_id": account_id,
            "start_date": start_date,
            "vesting_periods": vesting_periods,
            "cycle_months": cycle_months,
            "total_amount": total_amount,
        }
        return self._request("POST", "/investors", json=payload)

    def distribute(self) -> dict[str, Any]:
        return self._request("POST", "/distribute")

    def list_transfers(self) -> dict[str, Any]:
        return self._request("GET", "/transfers")


def _client(ctx: click.Context) -> VestingClient:
    return VestingClient(
        ctx.obj["node_url"],
        timeout=ctx.obj.get("timeout", 30.0),
        caller=ctx.obj.get("caller"),
    )


@click.group()
def investors():
    """Vesting record commands."""
    pass


@investors.command("list")
@click.pass_context
def investors_list(ctx: click.Context):
    """
    Show every vesting record.

    Example:
        tokenvest investors list
    """
    try:
        with console.status("[bold cyan]Fetching investors..."):
            data = _client(ctx).list_investors()

        if ctx.obj.get("json_output"):
            click.echo(json.dumps(data, indent=2))
            return

        table = Table(box=box.ROUNDED, title="Vesting Schedules")
        for column in ("Account", "Start", "Vesting", "Cycle", "Remaining", "Paid / Total", "Last Payment"):
            table.add_column(column)
        for entry in data.get("investors", []):
            table.add_row(
                entry["account_id"],
                entry["start_date"],
                str(entry["vesting_periods"]),
                str(entry["cycle_months"]),
                str(entry["remaining_payouts"]),
                f"{entry['paid_amount']} / {entry['total_amount']}",
                entry["last_payment_date"],
            )
        console.print(table)
    except (click.ClickException, KeyError) as exc:
        _handle_cli_error(exc)


@investors.command("add")
@click.argument("account_id")
@click.option("--start-date", required=True, help="First payout date, YYYY-MM-DD")
@click.option("--vesting", "vesting_periods", required=True, type=click.IntRange(1, 255), help="Vesting periods")
@click.option("--cycle", "cycle_months", required=True, type=click.IntRange(1, 255), help="Months between payouts")
@click.option("--amount", "total_amount", required=True, help="Total amount in the smallest token unit")
@click.pass_context
def investors_add(
    ctx: click.Context,
    account_id: str,
    start_date: str,
    vesting_periods: int,
    cycle_months: int,
    total_amount: str,
):
    """
    Create a vesting record (contract owner only).

    Example:
        tokenvest --caller owner.near investors add alice.near \\
            --start-date 2024-01-01 --vesting 12 --cycle 1 --amount 1200
    """
    try:
        data = _client(ctx).add_investor(account_id, start_date, vesting_periods, cycle_months, total_amount)
        if ctx.obj.get("json_output"):
            click.echo(json.dumps(data, indent=2))
            return
        payouts = data.get("investment", {}).get("remaining_payouts")
        console.print(f"[bold green]Vesting record created[/] for {account_id} ({payouts} payouts)")
    except click.ClickException as exc:
        _handle_cli_error(exc)


@click.command("distribute")
@click.pass_context
def distribute(ctx: click.Context):
    """
    Run one distribution pass on the node.

    Example:
        tokenvest distribute
    """
    try:
        data = _client(ctx).distribute()
        if ctx.obj.get("json_output"):
            click.echo(json.dumps(data, indent=2))
            return
        console.print(f"[bold green]Dispatched {data.get('dispatched', 0)} transfers")
    except click.ClickException as exc:
        _handle_cli_error(exc)


@click.command("transfers")
@click.pass_context
def transfers(ctx: click.Context):
    """Show recent payout transfers and their states."""
    try:
        data = _client(ctx).list_transfers()
        if ctx.obj.get("json_output"):
            click.echo(json.dumps(data, indent=2))
            return
        table = Table(box=box.SIMPLE)
        for column in ("Ticket", "Account", "Amount", "State", "Error"):
            table.add_column(column)
        for entry in data.get("transfers", []):
            table.add_row(
                entry["id"][:12],
                entry["account_id"],
                entry["amount"],
                entry["state"],
                entry.get("error") or "",
            )
        console.print(table)
    except (click.ClickException, KeyError) as exc:
        _handle_cli_error(exc)
