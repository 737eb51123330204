"""
Command line entry point for the Inverse Arena client.
"""

import asyncio
import logging
import sys
from dataclasses import asdict
from typing import Optional

import click
from dotenv import load_dotenv

from .actions import TxOutcome
from .aggregator import MIN_CREATOR_STAKE_USDC
from .client import InverseArenaClient
from .config import ArenaConfig
from .mapper import ROUND_SPEED_SECONDS
from .polling import LatestValue, PollStatus
from .validation import format_currency_input, sanitize_numeric_input, validate_stake_amount


class ColoredFormatter(logging.Formatter):
    """Colored formatter for client logs."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }

    # Component colors
    COMPONENT_COLORS = {
        'aggregator': '\033[94m',    # Blue
        'actions': '\033[93m',       # Yellow
        'transactions': '\033[95m',  # Magenta
        'allowance': '\033[95m',
        'reader': '\033[96m',        # Cyan
        'connection': '\033[92m',    # Green
        'polling': '\033[90m',       # Dark gray
    }

    RESET = '\033[0m'
    BOLD = '\033[1m'

    def format(self, record):
        level_color = self.COLORS.get(record.levelname, '')

        component_name = record.name.split('.')[-1] if '.' in record.name else record.name
        component_color = self.COMPONENT_COLORS.get(component_name, '')

        timestamp = self.formatTime(record)

        if level_color or component_color:
            formatted = f"{self.BOLD}{level_color}[{record.levelname}]{self.RESET} "
            formatted += f"{component_color}[{component_name}]{self.RESET} "
            formatted += f"{timestamp} - {record.getMessage()}"
        else:
            formatted = f"[{record.levelname}] [{component_name}] {timestamp} - {record.getMessage()}"

        return formatted


def setup_logging(verbose: bool = False):
    """Setup colored logging on the root logger."""
    formatter = ColoredFormatter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    root_logger.addHandler(console_handler)

    # Quiet noisy libraries
    for name in ('urllib3', 'asyncio', 'web3', 'aiohttp'):
        logging.getLogger(name).setLevel(logging.WARNING)


def _run(coro_factory):
    """Load config, open a client and run ``coro_factory(client)`` to completion."""
    load_dotenv()
    config = ArenaConfig.from_env()

    async def _main():
        async with InverseArenaClient(config) as client:
            return await coro_factory(client)

    try:
        return asyncio.run(_main())
    except KeyboardInterrupt:
        click.echo("\n\033[93m[INFO] Interrupted\033[0m", err=True)
        return None


def _echo_outcome(outcome: Optional[TxOutcome]) -> None:
    # None when the command was interrupted before the write finished
    if outcome is None:
        return
    if outcome.ok:
        line = f"\033[92m✓ {outcome.action} confirmed\033[0m tx={outcome.tx_hash}"
        if outcome.approved:
            line += " (token approval issued)"
        if outcome.pool_id is not None:
            line += f" pool_id={outcome.pool_id}"
        click.echo(line)
    else:
        click.echo(f"\033[31m✗ {outcome.action}: {outcome.error.message}\033[0m")
        sys.exit(1)


def _on_state(state) -> None:
    click.echo(f"  … {state.value}", err=True)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose):
    """Inverse Arena ledger client."""
    setup_logging(verbose)


@cli.command()
@click.option("--limit", "-n", type=int, default=None, help="Number of recent arenas to list.")
def arenas(limit):
    """List the most recent arenas, newest first."""
    views = _run(lambda client: client.aggregator.list_recent_arenas(limit))
    for view in views or []:
        featured = " *" if view.is_featured else ""
        click.echo(
            f"{view.number:>6}  {view.status:<8} {view.players_joined}/{view.max_players:<4} "
            f"{view.round_speed:<4} {view.stake}{featured}"
        )


@cli.command()
def stats():
    """Show the network-wide rollup."""
    view = _run(lambda client: client.aggregator.fetch_global_stats())
    if view:
        for key, value in asdict(view).items():
            click.echo(f"{key}: {value}")


@cli.command()
@click.argument("address")
def profile(address):
    """Show an address's arenas and finished-game history."""
    view = _run(lambda client: client.aggregator.fetch_profile_arenas(address))
    if not view:
        return
    click.echo("Arenas:")
    for row in view.arenas:
        click.echo(f"  {row.name:<12} {row.status:<10} {row.participants:<7} {row.stake}")
    click.echo("History:")
    for row in view.history:
        click.echo(f"  {row.arena:<6} {row.result:<10} {row.rounds:<10} {row.pnl}")


@cli.command()
@click.argument("address")
def creator(address):
    """Show creator stake and active pool count for an address."""
    status = _run(lambda client: client.aggregator.fetch_creator_status(address))
    if status:
        click.echo(f"stake: {status.stake:.2f} USDC")
        click.echo(f"active pools: {status.active_pools}")
        click.echo(f"can create pools: {status.has_enough_stake}")


@cli.command()
@click.option("--interval", type=float, default=None, help="Seconds between polls.")
def watch(interval):
    """Poll global stats until interrupted."""

    def _print(value: LatestValue) -> None:
        if value.status is PollStatus.SUCCESS:
            view = value.data
            click.echo(
                f"pools={view.total_pools} total={view.global_pool_total:.2f} USDC "
                f"survivors={view.live_survivors} load={view.network_load}"
            )
        else:
            click.echo(f"\033[33mpoll failed: {value.error}\033[0m", err=True)

    async def _watch(client):
        async with client.poll(client.aggregator.fetch_global_stats, _print, interval):
            await asyncio.Event().wait()

    _run(_watch)


@cli.command()
@click.option("--stake", "stake_amount", type=float, required=True, help="Entry fee in USDC.")
@click.option("--speed", type=click.Choice(sorted(ROUND_SPEED_SECONDS)), default="1M", help="Round speed.")
@click.option("--capacity", type=int, required=True, help="Maximum number of players.")
def create(stake_amount, speed, capacity):
    """Create a new arena hosted by the configured wallet."""
    _echo_outcome(_run(lambda client: client.actions.create_pool(stake_amount, speed, capacity, on_state=_on_state)))


@cli.command()
@click.argument("pool_id", type=int)
def join(pool_id):
    """Join an arena, approving the entry fee if needed."""
    _echo_outcome(_run(lambda client: client.actions.join_pool(pool_id, on_state=_on_state)))


@cli.command()
@click.argument("pool_id", type=int)
@click.argument("choice", type=click.Choice(["Heads", "Tails"]))
def choose(pool_id, choice):
    """Submit a choice for the current round."""
    _echo_outcome(_run(lambda client: client.actions.submit_choice(pool_id, choice, on_state=_on_state)))


@cli.command()
@click.argument("pool_id", type=int)
def claim(pool_id):
    """Claim winnings from a finished arena."""
    _echo_outcome(_run(lambda client: client.actions.claim_winnings(pool_id, on_state=_on_state)))


@cli.command()
@click.argument("pool_id", type=int)
def refund(pool_id):
    """Claim a refund from a cancelled arena."""
    _echo_outcome(_run(lambda client: client.actions.claim_refund(pool_id, on_state=_on_state)))


@cli.command()
@click.argument("amount")
def stake(amount):
    """Deposit creator stake (USDC)."""
    amount = format_currency_input(sanitize_numeric_input(amount), "USDC")
    is_valid, error = validate_stake_amount(amount, "USDC", MIN_CREATOR_STAKE_USDC, float("inf"))
    if not is_valid:
        raise click.BadParameter(error, param_hint="AMOUNT")
    _echo_outcome(_run(lambda client: client.actions.deposit_creator_stake(float(amount), on_state=_on_state)))


@cli.command()
def unstake():
    """Withdraw creator stake. The ledger slashes it if you host active pools."""
    _echo_outcome(_run(lambda client: client.actions.withdraw_creator_stake(on_state=_on_state)))


if __name__ == "__main__":
    cli()
