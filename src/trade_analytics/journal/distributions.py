"""Profit distributions and time/symbol bucketed performance.

Breaks results down by profit bin, day of week, hour of day, and symbol
to reveal where an account makes and loses money.  Every bucket reports
profit sum, trade count, and win rate; empty buckets are kept so the
day and hour series always have 7 and 24 entries.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from .record import Trade

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass(frozen=True)
class Histogram:
    """Uniform-width profit histogram.

    ``edges`` has one more element than ``centers`` and ``counts``.
    """

    centers: tuple[float, ...] = ()
    counts: tuple[int, ...] = ()
    edges: tuple[float, ...] = ()

    @property
    def bin_count(self) -> int:
        return len(self.counts)


@dataclass(frozen=True)
class BucketPerformance:
    label: str
    profit: float
    count: int
    wins: int

    @property
    def win_rate(self) -> float:
        """Percentage of winning trades; 0 for an empty bucket."""
        return self.wins / self.count * 100 if self.count else 0.0


@dataclass(frozen=True)
class SymbolPerformance(BucketPerformance):
    volume: float = 0.0


@dataclass
class _BucketStats:
    """Accumulator for a bucket."""

    profit: float = 0.0
    count: int = 0
    wins: int = 0
    volume: float = 0.0

    def record(self, trade: Trade) -> None:
        self.profit += trade.profit
        self.count += 1
        self.volume += trade.volume
        if trade.profit > 0:
            self.wins += 1


def bin_count_for(n: int, max_bins: int = 20) -> int:
    """``min(max_bins, ceil(sqrt(n)))``."""
    if n <= 0:
        return 0
    return min(max_bins, math.ceil(math.sqrt(n)))


def pnl_histogram(profits: Sequence[float], *, max_bins: int = 20) -> Histogram:
    """Bin profits uniformly between their minimum and maximum.

    The maximum lands in the last bin.  When all profits are equal the
    range has zero width and every value is counted in the first bin.
    """
    if not profits:
        return Histogram()

    low, high = min(profits), max(profits)
    n_bins = bin_count_for(len(profits), max_bins)
    width = (high - low) / n_bins

    counts = [0] * n_bins
    for p in profits:
        index = int((p - low) / width) if width > 0 else 0
        counts[min(index, n_bins - 1)] += 1

    edges = tuple(low + i * width for i in range(n_bins + 1))
    centers = tuple((edges[i] + edges[i + 1]) / 2 for i in range(n_bins))
    return Histogram(centers=centers, counts=tuple(counts), edges=edges)


def day_of_week_performance(trades: Sequence[Trade]) -> tuple[BucketPerformance, ...]:
    """Seven buckets keyed on close time.

    Ordered Monday first, following ``datetime.weekday()``; index 6 is
    Sunday.  Consumers expecting a Sunday-first week must rotate.
    """
    buckets = [_BucketStats() for _ in DAY_NAMES]
    for trade in trades:
        buckets[trade.close_time.weekday()].record(trade)
    return tuple(
        BucketPerformance(label=name, profit=b.profit, count=b.count, wins=b.wins)
        for name, b in zip(DAY_NAMES, buckets)
    )


def hourly_performance(trades: Sequence[Trade]) -> tuple[BucketPerformance, ...]:
    """Twenty-four buckets keyed on open hour."""
    buckets = [_BucketStats() for _ in range(24)]
    for trade in trades:
        buckets[trade.open_time.hour].record(trade)
    return tuple(
        BucketPerformance(label=f"{hour}:00", profit=b.profit, count=b.count, wins=b.wins)
        for hour, b in enumerate(buckets)
    )


def symbol_performance(
    trades: Sequence[Trade], *, top_n: int = 10
) -> tuple[SymbolPerformance, ...]:
    """Most-traded symbols, ties kept in first-appearance order."""
    by_symbol: dict[str, _BucketStats] = {}
    for trade in trades:
        by_symbol.setdefault(trade.symbol, _BucketStats()).record(trade)

    ranked = sorted(by_symbol.items(), key=lambda item: item[1].count, reverse=True)
    return tuple(
        SymbolPerformance(
            label=symbol, profit=b.profit, count=b.count, wins=b.wins, volume=b.volume
        )
        for symbol, b in ranked[:top_n]
    )
