"""Pip-based price movement.

A pip is the symbol-specific minimum price increment.  Pips express a
trade's price move independently of lot size and account currency.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from trade_analytics.core.enums import Side

from .record import Trade

DEFAULT_PIP_SIZE = 0.0001
_INDEX_MARKERS = ("US30", "US500", "NAS", "DAX", "SPX")


@dataclass(frozen=True)
class PipsPoint:
    """One point of the cumulative pips curve."""

    time: datetime
    pips: float        # Cumulative, rounded to 0.1
    trade_pips: float
    symbol: str


def round_half_up(value: float, places: int = 1) -> float:
    """Round halves towards +inf, e.g. ``2.25 -> 2.3`` and ``-2.25 -> -2.2``."""
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


def pip_size(symbol: str | None) -> float:
    """Minimum price increment for *symbol*.

    JPY pairs move in 0.01, gold in 0.1, cash indices in whole points,
    everything else in 0.0001.
    """
    if not symbol:
        return DEFAULT_PIP_SIZE
    upper = symbol.upper()
    if "JPY" in upper:
        return 0.01
    if "XAU" in upper:
        return 0.1
    if any(marker in upper for marker in _INDEX_MARKERS):
        return 1.0
    return DEFAULT_PIP_SIZE


def trade_pips(trade: Trade) -> float:
    """Signed pips captured by *trade*, rounded to one decimal.

    A zero open or close price is treated as missing and yields 0.
    """
    if not trade.open_price or not trade.close_price or not trade.symbol:
        return 0.0
    direction = 1 if trade.side is Side.BUY else -1
    pips = (trade.close_price - trade.open_price) / pip_size(trade.symbol) * direction
    return round_half_up(pips)


def total_pips(trades: Sequence[Trade]) -> float:
    return sum(trade_pips(t) for t in trades)


def pips_curve(sorted_trades: Sequence[Trade]) -> tuple[PipsPoint, ...]:
    """Cumulative pips in the given (chronological) order."""
    points = []
    cumulative = 0.0
    for trade in sorted_trades:
        pips = trade_pips(trade)
        cumulative += pips
        points.append(PipsPoint(
            time=trade.close_time,
            pips=round_half_up(cumulative),
            trade_pips=pips,
            symbol=trade.symbol,
        ))
    return tuple(points)
