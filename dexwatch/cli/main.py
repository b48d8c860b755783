"""
dexwatch CLI entry point.

Usage:
    # Run the sampling loop until interrupted
    python -m dexwatch.cli.main

    # Run a single tick
    python -m dexwatch.cli.main --once

    # Show configuration and recorded opportunities
    python -m dexwatch.cli.main --status
"""

import signal
import sys
import threading
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from dexwatch.arb.evaluator import from_smallest_units
from dexwatch.core.config import BotConfig, get_settings, load_bot_config
from dexwatch.core.errors import DexwatchError
from dexwatch.core.logging import setup_logging, get_logger
from dexwatch.core.timeutil import format_timestamp
from dexwatch.services.persistence import create_opportunity_store
from dexwatch.services.scheduler import (
    ArbitrageScheduler,
    CycleResult,
    create_arbitrage_scheduler,
)

console = Console()
logger = get_logger("cli")


def display_cycle(result: CycleResult, quote_decimals: int) -> None:
    """Display one tick's quotes and outcome in the terminal."""
    if result.snapshot is not None:
        table = Table(title=f"Quotes @ {format_timestamp(result.snapshot.taken_at, 'display')}")
        table.add_column("Venue", style="cyan")
        table.add_column("Output", justify="right")
        table.add_column("Status")

        for quote in result.snapshot:
            if quote.valid:
                table.add_row(
                    quote.venue_id,
                    str(from_smallest_units(quote.output_amount, quote_decimals)),
                    "[green]ok[/green]",
                )
            else:
                table.add_row(quote.venue_id, "-", f"[red]{quote.error}[/red]")

        console.print(table)

    evaluation = result.evaluation
    if evaluation is not None and evaluation.found:
        console.print(
            f"[bold green]Opportunity:[/bold green] buy on {evaluation.buy_venue} -> "
            f"sell on {evaluation.sell_venue}, net profit {evaluation.profit}"
        )
    elif evaluation is not None:
        console.print(f"[yellow]No opportunity:[/yellow] {evaluation.reason}")

    if result.error:
        console.print(f"[bold red]Error:[/bold red] {result.error}")


def show_status(config: BotConfig) -> None:
    """Show configuration and recent opportunities."""
    settings = get_settings()
    bot = config.settings

    console.print("\n[bold]dexwatch Status[/bold]\n")

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Environment", settings.dexwatch_env)
    table.add_row("Database", settings.database_url)
    table.add_row("RPC", config.rpc_url)
    table.add_row("Venues", ", ".join(config.venues))
    table.add_row("Trade size", str(bot.trade_size))
    table.add_row("Min profit", str(bot.min_profit))
    table.add_row("Cost estimate", str(bot.cost_estimate))
    table.add_row("Refresh rate", f"{bot.refresh_rate}s")
    table.add_row("Quote timeout", f"{bot.quote_timeout}s")

    console.print(table)
    console.print()

    with create_opportunity_store(settings) as store:
        recent = store.list_recent(limit=10)
        total = store.count()

    if recent:
        table = Table(title=f"Recent Opportunities ({total} total)")
        table.add_column("ID", justify="right")
        table.add_column("Time")
        table.add_column("Buy", style="cyan")
        table.add_column("Sell", style="cyan")
        table.add_column("Profit", justify="right", style="green")

        for opp in recent:
            table.add_row(
                str(opp.id),
                format_timestamp(opp.observed_at, "display"),
                opp.buy_venue,
                opp.sell_venue,
                str(opp.profit),
            )

        console.print(table)
    else:
        console.print("[yellow]No opportunities recorded yet[/yellow]")


def run_scheduled(scheduler: ArbitrageScheduler) -> None:
    """Run the loop until SIGINT/SIGTERM."""
    console.print("[bold]Starting dexwatch...[/bold]")
    console.print("Press Ctrl+C to stop\n")

    stop_event = threading.Event()

    def shutdown(signum, frame):
        console.print("\n[yellow]Shutting down...[/yellow]")
        stop_event.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    scheduler.start()
    try:
        while not stop_event.is_set():
            stop_event.wait(1)
    finally:
        scheduler.stop()


@click.command()
@click.option("--once", is_flag=True, help="Run a single tick and exit")
@click.option("--status", is_flag=True, help="Show configuration and recorded opportunities")
@click.option("--config", "config_path", type=click.Path(), default=None, help="Path to config.yaml")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def main(once: bool, status: bool, config_path: Optional[str], verbose: bool) -> None:
    """dexwatch - cross-venue DEX price discrepancy monitor"""

    log_level = "DEBUG" if verbose else None
    setup_logging(log_level=log_level)

    try:
        config = load_bot_config(config_path)
        logger.info(f"Config loaded: {len(config.venues)} venues, every {config.settings.refresh_rate}s")

        if status:
            show_status(config)
            return

        scheduler = create_arbitrage_scheduler(config)
    except DexwatchError as e:
        logger.error(f"Startup failed: {e.message}", extra={"details": e.details})
        console.print(f"[bold red]Startup failed:[/bold red] {e.message}")
        sys.exit(1)

    if once:
        try:
            result = scheduler.run_cycle()
        finally:
            scheduler.stop()
        display_cycle(result, config.settings.quote_decimals)
        return

    run_scheduled(scheduler)


if __name__ == "__main__":
    main()
