"""CLI entry point for the bankroll ledger."""

from __future__ import annotations

import click

from .core.config import Settings, load_settings
from .core.errors import LedgerError


def _engine(ctx: click.Context):
    from .engine import LedgerEngine
    from .storage.store import JsonFileLedgerStore

    settings: Settings = ctx.obj["settings"]
    store = JsonFileLedgerStore(
        settings.ledger_path,
        default_initial_bankroll=settings.default_initial_bankroll,
    )
    return LedgerEngine(store, settings)


@click.group()
@click.option("--config", default=None, help="Config file path (TOML)")
@click.option("--ledger", "ledger_file", default=None, help="Ledger JSON file override")
@click.pass_context
def main(ctx: click.Context, config: str | None, ledger_file: str | None) -> None:
    """Bankroll ledger."""
    from .observability.logger import setup_logging

    overrides: dict = {}
    if ledger_file:
        overrides["data_dir"] = "."
        overrides["ledger_file"] = ledger_file
    try:
        settings = load_settings(config, overrides)
    except LedgerError as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(settings.observability.log_level, settings.observability.log_format)
    ctx.obj = {"settings": settings}


@main.command()
@click.pass_context
def summary(ctx: click.Context) -> None:
    """Show bankroll statistics."""
    engine = _engine(ctx)
    stats = engine.stats()

    click.echo(f"\n{'=' * 50}")
    click.echo("BANKROLL SUMMARY")
    click.echo(f"{'=' * 50}")
    click.echo(f"  Initial bankroll: {stats.initial_bankroll:>12.2f}")
    click.echo(f"  Current bankroll: {stats.current_bankroll:>12.2f}")
    click.echo(f"  Profit / loss:    {stats.total_profit_loss:>+12.2f}")
    click.echo(f"  Invested:         {stats.total_invested:>12.2f}")
    click.echo(f"  Withdrawn:        {stats.total_withdrawn:>12.2f}")
    click.echo(f"  Resolved wagers:  {stats.resolved_count:>12}")
    click.echo(f"  Win rate:         {stats.win_rate:>11.1f}%")
    click.echo(f"  ROI:              {stats.roi:>+11.2f}%")
    click.echo(f"  Avg winning odd:  {stats.average_odd:>12.2f}")
    click.echo(f"  Max drawdown:     {stats.max_drawdown:>11.2f}%")

    click.echo("\n  Stake ladder:")
    for tier in engine.stake_ladder():
        click.echo(f"    {tier.units:>4g}U = {tier.value:.2f}")
    click.echo(f"{'=' * 50}\n")


@main.command()
@click.option("--limit", default=20, type=int, help="Number of most recent points")
@click.pass_context
def history(ctx: click.Context, limit: int) -> None:
    """Show the bankroll trajectory."""
    engine = _engine(ctx)
    points = engine.projection()
    for point in points[-limit:]:
        marker = "*" if point.is_new_day else " "
        label = ""
        if point.wager is not None:
            label = f"{point.wager.status.value:<4} {point.wager.details}"
        elif point.withdrawal is not None:
            label = f"withdrawal {point.withdrawal.amount:.2f}"
        click.echo(
            f"{marker} {point.index:>5} {point.date:%Y-%m-%d %H:%M} "
            f"{point.value:>12.2f}  {label}"
        )


@main.command()
@click.option("--year", default=None, type=int, help="Year filter (default: current)")
@click.pass_context
def performance(ctx: click.Context, year: int | None) -> None:
    """Show profit per market and league."""
    engine = _engine(ctx)
    points = engine.market_performance(year)
    if not points:
        click.echo("No resolved wagers in range.")
        return
    click.echo(f"    {'Name':<24} {'Profit':>10} {'Invested':>10} {'ROI':>8} {'#':>5}")
    click.echo(f"    {'-' * 61}")
    for p in points:
        click.echo(
            f"    {p.name:<24} {p.profit:>+10.2f} {p.invested:>10.2f} "
            f"{p.roi:>+7.1f}% {p.count:>5}"
        )


@main.command()
@click.option("--year", default=None, type=int, help="Year filter (default: current)")
@click.pass_context
def calendar(ctx: click.Context, year: int | None) -> None:
    """Show profit per day."""
    engine = _engine(ctx)
    days = engine.daily_profit(year)
    if not days:
        click.echo("No resolved wagers in range.")
        return
    for day in days:
        click.echo(
            f"    {day.date}  {day.profit:>+10.2f}  {day.unit_profit:>+8.2f}U  ({day.count})"
        )


@main.command("add-wager")
@click.option("--market", required=True, help="Market label")
@click.option("--league", default="N/A", help="League label")
@click.option("--details", default="", help="e.g. 'T1 vs Gen.G'")
@click.option("--bet-type", default="N/A", help="Bet type")
@click.option("--stake", required=True, type=float, help="Stake in currency")
@click.option("--odd", required=True, type=float, help="Decimal odd")
@click.pass_context
def add_wager(
    ctx: click.Context,
    market: str,
    league: str,
    details: str,
    bet_type: str,
    stake: float,
    odd: float,
) -> None:
    """Record a new pending wager."""
    engine = _engine(ctx)
    try:
        wager = engine.add_wager({
            "market": market,
            "league": league,
            "details": details,
            "betType": bet_type,
            "stakeValue": stake,
            "odd": odd,
        })
    except LedgerError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Added {wager.id} ({wager.units:.2f}U)")


@main.command()
@click.argument("wager_id")
@click.argument("outcome", type=click.Choice(["won", "lost"]))
@click.pass_context
def settle(ctx: click.Context, wager_id: str, outcome: str) -> None:
    """Mark a pending wager as won or lost."""
    engine = _engine(ctx)
    try:
        wager = engine.settle_wager(wager_id, outcome)
    except LedgerError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"{wager.id}: {wager.status.value} ({wager.profit_loss:+.2f})")


@main.command()
@click.argument("amount", type=float)
@click.pass_context
def withdraw(ctx: click.Context, amount: float) -> None:
    """Record a withdrawal."""
    engine = _engine(ctx)
    try:
        engine.add_withdrawal(amount)
    except LedgerError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Current bankroll: {engine.stats().current_bankroll:.2f}")


@main.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_(ctx: click.Context, path: str) -> None:
    """Replace the ledger with an exported JSON file."""
    import asyncio

    engine = _engine(ctx)
    try:
        ledger = asyncio.run(engine.import_file(path))
    except LedgerError as exc:
        raise click.ClickException(f"Import failed: {exc}") from exc
    click.echo(
        f"Imported {len(ledger.wagers)} wagers and {len(ledger.withdrawals)} withdrawals."
    )


@main.command()
@click.argument("path", type=click.Path(dir_okay=False))
@click.pass_context
def export(ctx: click.Context, path: str) -> None:
    """Export the ledger (.json) or its wagers (.csv)."""
    engine = _engine(ctx)
    target = engine.export_file(path)
    click.echo(f"Exported to {target}")


if __name__ == "__main__":
    main()
