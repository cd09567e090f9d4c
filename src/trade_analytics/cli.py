"""CLI entry point for trade analytics."""

from __future__ import annotations

from pathlib import Path

import click

from .core.config import Settings, load_settings
from .core.errors import ConfigError, ParseError


def _bootstrap(config: str | None) -> Settings:
    """Load settings and configure logging for one command."""
    from .observability.logger import setup_logging

    try:
        settings = load_settings(config)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(settings.observability.log_level, settings.observability.log_format)
    return settings


def _load(path: str, settings: Settings):
    """Parse *path*, turning fatal parse errors into a CLI error."""
    import asyncio

    from .ingest.loader import load_trade_file
    from .ingest.parser import TradeFileParser
    from .observability.logger import parse_context

    parser = TradeFileParser(settings.parser)
    try:
        with parse_context(Path(path).name):
            return asyncio.run(load_trade_file(path, parser))
    except ParseError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
def main() -> None:
    """Broker trade-history analytics."""


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", default=None, help="Config file path (TOML)")
@click.option("--json", "as_json", is_flag=True, help="Print the full statistics bundle as JSON")
def analyze(path: str, config: str | None, as_json: bool) -> None:
    """Parse a trade history export and print performance statistics."""
    from .journal.export import TradeExporter
    from .journal.stats import compute_statistics

    settings = _bootstrap(config)
    result = _load(path, settings)
    bundle = compute_statistics(
        result.trades,
        currency=result.currency or settings.default_currency,
        config=settings.stats,
    )

    if as_json:
        click.echo(TradeExporter().bundle_to_json(bundle))
        return

    _print_summary(bundle, result)


def _print_summary(bundle, result) -> None:
    """Print a formatted statistics summary."""
    from .journal.export import format_ratio

    ccy = bundle.currency
    click.echo(f"\n{'=' * 60}")
    click.echo("TRADE STATISTICS")
    click.echo(f"{'=' * 60}")
    if result.account.account_number or result.account.name:
        click.echo(f"  Account:         {result.account.account_number or '?'} ({result.account.name or '?'})")
    click.echo(f"  Trades:          {bundle.total_trades}")
    click.echo(f"  Net P&L:         {bundle.net_pnl:+,.2f} {ccy}")
    click.echo(f"  Gross P&L:       {bundle.total_pnl:+,.2f} {ccy}")
    click.echo(f"  Win Rate:        {bundle.win_rate:.1f}%")
    click.echo(
        f"  W/L/BE:          {bundle.winning_trades}/{bundle.losing_trades}/{bundle.breakeven_trades}"
    )
    click.echo(f"  Profit Factor:   {format_ratio(bundle.profit_factor)}")
    click.echo(f"  Risk/Reward:     {format_ratio(bundle.risk_reward_ratio)}")
    click.echo(f"  Expectancy:      {bundle.expectancy:+,.2f} {ccy}")
    click.echo(f"  Avg Win / Loss:  {bundle.avg_win:+,.2f} / {bundle.avg_loss:+,.2f}")
    click.echo(f"  Best / Worst:    {bundle.best_trade:+,.2f} / {bundle.worst_trade:+,.2f}")
    click.echo(
        f"  Max Drawdown:    {bundle.max_drawdown:,.2f} {ccy} ({bundle.max_drawdown_percent:.1f}%)"
    )
    click.echo(f"  Streaks (W/L):   {bundle.max_win_streak}/{bundle.max_lose_streak}")
    click.echo(f"  Avg Hold:        {bundle.avg_holding_time.formatted}")
    click.echo(f"  Total Pips:      {bundle.total_pips:+,.1f}")

    if bundle.symbol_performance:
        click.echo("\n  Top Symbols:")
        click.echo(f"    {'Symbol':<12} {'Trades':>7} {'P&L':>12} {'WinRate':>8}")
        click.echo(f"    {'-' * 42}")
        for sym in bundle.symbol_performance:
            click.echo(
                f"    {sym.label:<12} {sym.count:>7} {sym.profit:>+12,.2f} {sym.win_rate:>7.1f}%"
            )

    if result.warnings:
        click.echo(f"\n  Skipped rows:    {result.skipped_rows} ({len(result.warnings)} with errors)")
    click.echo(f"\n{'=' * 60}\n")


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", default=None, help="Config file path (TOML)")
@click.option("--format", "fmt", type=click.Choice(["csv", "json"]), default="csv")
def trades(path: str, config: str | None, fmt: str) -> None:
    """Print the normalized trades of an export."""
    from .journal.export import TradeExporter
    from .journal.stats import sort_chronologically

    settings = _bootstrap(config)
    result = _load(path, settings)
    ordered = sort_chronologically(result.trades)

    exporter = TradeExporter()
    if fmt == "json":
        click.echo(exporter.to_json(ordered))
    else:
        click.echo(exporter.to_csv(ordered), nl=False)


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--month", required=True, help="Month to summarize (YYYY-MM)")
@click.option("--config", default=None, help="Config file path (TOML)")
def calendar(path: str, month: str, config: str | None) -> None:
    """Print daily P&L and the summary for one month."""
    from .journal.calendar import daily_pnl, monthly_summary

    try:
        year, mon = (int(part) for part in month.split("-"))
    except ValueError:
        raise click.BadParameter("expected YYYY-MM", param_hint="--month") from None

    settings = _bootstrap(config)
    result = _load(path, settings)
    days = daily_pnl(result.trades)
    summary = monthly_summary(days, year, mon)

    click.echo(f"\n{year}-{mon:02d}")
    click.echo(f"  {'Date':<12} {'Trades':>7} {'P&L':>12} {'Pips':>9} {'W/L':>7}")
    for d in days:
        if d.day.year == year and d.day.month == mon:
            click.echo(
                f"  {d.day.isoformat():<12} {d.trades:>7} {d.profit:>+12,.2f} "
                f"{d.pips:>+9.1f} {d.wins:>3}/{d.losses:<3}"
            )
    click.echo(
        f"\n  Total: {summary.total_profit:+,.2f} over {summary.total_trades} trades; "
        f"{summary.profit_days} profit days, {summary.loss_days} loss days"
    )
