"""Daily P&L aggregation for calendar views.

Groups trades by close date and summarizes a month of trading days.
Rendering the calendar itself is left to the caller.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from .pips import trade_pips
from .record import Trade


@dataclass(frozen=True)
class DayPnL:
    day: date
    profit: float
    pips: float
    trades: int
    wins: int
    losses: int


@dataclass(frozen=True)
class MonthSummary:
    year: int
    month: int
    total_profit: float
    total_trades: int
    profit_days: int
    loss_days: int

    @property
    def trading_days(self) -> int:
        """Days that closed with a non-zero result."""
        return self.profit_days + self.loss_days


@dataclass
class _DayStats:
    profit: float = 0.0
    pips: float = 0.0
    trades: int = 0
    wins: int = 0
    losses: int = 0

    def record(self, trade: Trade) -> None:
        self.profit += trade.profit
        self.pips += trade_pips(trade)
        self.trades += 1
        if trade.profit > 0:
            self.wins += 1
        elif trade.profit < 0:
            self.losses += 1


def daily_pnl(trades: Iterable[Trade]) -> tuple[DayPnL, ...]:
    """Per-day results keyed on close date, in date order."""
    days: dict[date, _DayStats] = {}
    for trade in trades:
        days.setdefault(trade.close_time.date(), _DayStats()).record(trade)
    return tuple(
        DayPnL(day=d, profit=s.profit, pips=s.pips, trades=s.trades, wins=s.wins, losses=s.losses)
        for d, s in sorted(days.items())
    )


def monthly_summary(days: Sequence[DayPnL], year: int, month: int) -> MonthSummary:
    total_profit = 0.0
    total_trades = profit_days = loss_days = 0
    for d in days:
        if d.day.year != year or d.day.month != month:
            continue
        total_profit += d.profit
        total_trades += d.trades
        if d.profit > 0:
            profit_days += 1
        elif d.profit < 0:
            loss_days += 1
    return MonthSummary(
        year=year,
        month=month,
        total_profit=total_profit,
        total_trades=total_trades,
        profit_days=profit_days,
        loss_days=loss_days,
    )
