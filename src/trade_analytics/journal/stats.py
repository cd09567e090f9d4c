"""Statistics engine: ordered trades → immutable statistics bundle.

Pure functions, no state kept between calls.  Path-dependent metrics
(equity curve, drawdown, streaks, pips curve) are computed over the
trades sorted ascending by close time; the sort is stable, so trades
closing at the same instant keep their input order.

Ratio metrics never raise or return NaN.  Division by a zero loss total
yields ``math.inf`` when there are wins and ``0.0`` when there are none;
consumers must render ``inf`` distinctly (see
:func:`trade_analytics.journal.export.format_ratio`).

Usage::

    bundle = compute_statistics(result.trades, currency=result.currency or "USD")
    print(bundle.net_pnl, bundle.max_drawdown, bundle.profit_factor)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from trade_analytics.core.config import StatsConfig

from .calendar import DayPnL, daily_pnl
from .distributions import (
    BucketPerformance,
    Histogram,
    SymbolPerformance,
    day_of_week_performance,
    hourly_performance,
    pnl_histogram,
    symbol_performance,
)
from .pips import PipsPoint, pips_curve, total_pips
from .record import Trade

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EquityPoint:
    time: datetime
    equity: float
    trade: Trade


@dataclass(frozen=True)
class HoldingTime:
    seconds: float = 0.0

    @property
    def hours(self) -> int:
        return int(self.seconds // 3600)

    @property
    def minutes(self) -> int:
        return int((self.seconds % 3600) // 60)

    @property
    def formatted(self) -> str:
        return f"{self.hours}h {self.minutes}m"


@dataclass(frozen=True)
class StatisticsBundle:
    """Snapshot of every derived metric for one trade collection.

    Percentages (``win_rate``, ``max_drawdown_percent``) are on a 0-100
    scale.  Profit figures are in ``currency``.
    """

    currency: str

    # Core
    total_trades: int
    total_pnl: float  # Gross, before commission and swap
    net_pnl: float
    win_rate: float
    profit_factor: float

    # Counts
    winning_trades: int
    losing_trades: int
    breakeven_trades: int

    # Averages
    avg_trade: float
    avg_win: float
    avg_loss: float  # Negative or zero

    # Extremes
    best_trade: float
    worst_trade: float
    max_drawdown: float
    max_drawdown_percent: float

    # Streaks
    max_win_streak: int
    max_lose_streak: int

    # Ratios
    risk_reward_ratio: float
    expectancy: float

    # Time
    avg_holding_time: HoldingTime

    # Curves and distributions
    equity_curve: tuple[EquityPoint, ...]
    pnl_distribution: Histogram
    day_of_week_performance: tuple[BucketPerformance, ...]
    hourly_performance: tuple[BucketPerformance, ...]
    symbol_performance: tuple[SymbolPerformance, ...]

    # Pips and calendar
    total_pips: float
    pips_curve: tuple[PipsPoint, ...]
    daily_pnl: tuple[DayPnL, ...]


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

def sort_chronologically(trades: Sequence[Trade]) -> list[Trade]:
    """Stable ascending sort by close time."""
    return sorted(trades, key=lambda t: t.close_time)


def safe_ratio(numerator: float, denominator: float) -> float:
    """``numerator / denominator`` with the infinite / zero sentinels.

    Both arguments are magnitudes (non-negative).
    """
    if denominator == 0:
        return math.inf if numerator > 0 else 0.0
    return numerator / denominator


def equity_curve(sorted_trades: Sequence[Trade]) -> tuple[EquityPoint, ...]:
    """Running cumulative net profit, one point per trade."""
    points = []
    equity = 0.0
    for trade in sorted_trades:
        equity += trade.profit
        points.append(EquityPoint(time=trade.close_time, equity=equity, trade=trade))
    return tuple(points)


def max_drawdown(curve: Sequence[EquityPoint]) -> tuple[float, float]:
    """Largest peak-to-trough decline as ``(absolute, percent)``.

    The running peak starts at the first equity point.  Percent drawdown
    is only measured while the peak is positive.
    """
    if not curve:
        return 0.0, 0.0

    peak = curve[0].equity
    worst = 0.0
    worst_pct = 0.0
    for point in curve:
        if point.equity > peak:
            peak = point.equity
        drawdown = peak - point.equity
        worst = max(worst, drawdown)
        if peak > 0:
            worst_pct = max(worst_pct, drawdown / peak * 100)
    return worst, worst_pct


def max_streaks(sorted_trades: Sequence[Trade]) -> tuple[int, int]:
    """Longest ``(win, lose)`` runs.  Break-even trades end both."""
    best_win = best_lose = 0
    win = lose = 0
    for trade in sorted_trades:
        if trade.profit > 0:
            win += 1
            lose = 0
        elif trade.profit < 0:
            lose += 1
            win = 0
        else:
            win = lose = 0
        best_win = max(best_win, win)
        best_lose = max(best_lose, lose)
    return best_win, best_lose


def average_holding_time(trades: Sequence[Trade]) -> HoldingTime:
    """Mean open→close duration over trades with both times parsed."""
    timed = [t for t in trades if t.has_parsed_times]
    if not timed:
        return HoldingTime()
    return HoldingTime(sum(t.hold_duration_seconds for t in timed) / len(timed))


# ---------------------------------------------------------------------------
# Bundle
# ---------------------------------------------------------------------------

def compute_statistics(
    trades: Sequence[Trade],
    *,
    currency: str = "USD",
    config: StatsConfig | None = None,
) -> StatisticsBundle:
    """Compute the full statistics bundle for *trades*.

    Input order does not matter; trades are sorted by close time
    internally.
    """
    cfg = config or StatsConfig()
    ordered = sort_chronologically(trades)
    profits = [t.profit for t in ordered]

    wins = [p for p in profits if p > 0]
    losses = [p for p in profits if p < 0]
    n = len(profits)

    gross_wins = sum(wins)
    gross_losses = abs(sum(losses))
    avg_win = gross_wins / len(wins) if wins else 0.0
    avg_loss = sum(losses) / len(losses) if losses else 0.0
    win_rate = len(wins) / n * 100 if n else 0.0
    win_fraction = win_rate / 100

    curve = equity_curve(ordered)
    dd, dd_pct = max_drawdown(curve)
    win_streak, lose_streak = max_streaks(ordered)
    net = sum(profits)

    bundle = StatisticsBundle(
        currency=currency,
        total_trades=n,
        total_pnl=sum(t.gross_profit for t in ordered),
        net_pnl=net,
        win_rate=win_rate,
        profit_factor=safe_ratio(gross_wins, gross_losses),
        winning_trades=len(wins),
        losing_trades=len(losses),
        breakeven_trades=n - len(wins) - len(losses),
        avg_trade=net / n if n else 0.0,
        avg_win=avg_win,
        avg_loss=avg_loss,
        best_trade=max(profits) if profits else 0.0,
        worst_trade=min(profits) if profits else 0.0,
        max_drawdown=dd,
        max_drawdown_percent=dd_pct,
        max_win_streak=win_streak,
        max_lose_streak=lose_streak,
        risk_reward_ratio=safe_ratio(avg_win, abs(avg_loss)),
        expectancy=win_fraction * avg_win - (1 - win_fraction) * abs(avg_loss),
        avg_holding_time=average_holding_time(ordered),
        equity_curve=curve,
        pnl_distribution=pnl_histogram(profits, max_bins=cfg.max_histogram_bins),
        day_of_week_performance=day_of_week_performance(ordered),
        hourly_performance=hourly_performance(ordered),
        symbol_performance=symbol_performance(trades, top_n=cfg.top_symbols),
        total_pips=total_pips(ordered),
        pips_curve=pips_curve(ordered),
        daily_pnl=daily_pnl(ordered),
    )
    logger.debug(
        "Computed statistics for %d trades: net=%.2f max_dd=%.2f", n, net, dd
    )
    return bundle
