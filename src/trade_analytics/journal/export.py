"""Trade export: CSV/JSON output, statistics serialization, periodic reports.

Exports normalized trades and statistics bundles in plain formats for
the view layer, spreadsheets, and archival.

Usage::

    exporter = TradeExporter()
    csv_str = exporter.to_csv(trades)
    json_str = exporter.to_json(trades)
    payload = exporter.bundle_to_dict(bundle)
    report = exporter.periodic_report(trades, period="monthly")
"""

from __future__ import annotations

import csv
import io
import json
import logging
import math
from collections import defaultdict
from dataclasses import fields
from datetime import datetime
from typing import Any

from trade_analytics.core.enums import ReportPeriod, TradeOutcome

from .distributions import BucketPerformance
from .pips import trade_pips
from .record import Trade
from .stats import StatisticsBundle, safe_ratio

logger = logging.getLogger(__name__)

INFINITY_TEXT = "inf"

# Default CSV columns
_CSV_COLUMNS = [
    "ticket",
    "symbol",
    "side",
    "volume",
    "open_time",
    "open_price",
    "close_time",
    "close_price",
    "stop_loss",
    "take_profit",
    "gross_profit",
    "commission",
    "swap",
    "net_profit",
    "pips",
    "outcome",
    "hold_duration",
]

# Bundle fields that may hold math.inf
_RATIO_FIELDS = frozenset({"profit_factor", "risk_reward_ratio"})


def format_ratio(value: float, decimals: int = 2) -> str:
    """Render a ratio, keeping the infinite sentinel distinct."""
    if math.isinf(value):
        return "∞"
    return f"{value:.{decimals}f}"


def format_duration(open_time: datetime, close_time: datetime) -> str:
    """Compact holding time: ``2d 3h``, ``4h 15m``, ``12m 5s``, or ``40s``.

    Returns ``-`` when the close precedes the open.
    """
    total = int((close_time - open_time).total_seconds())
    if total < 0:
        return "-"
    minutes, seconds = divmod(total, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)
    if days:
        return f"{days}d {hours}h"
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def _json_ratio(value: float, dp: int) -> float | str:
    return INFINITY_TEXT if math.isinf(value) else round(value, dp)


class TradeExporter:
    """Export trades and statistics to CSV/JSON and build periodic reports.

    Parameters
    ----------
    decimal_places : int
        Rounding precision for numeric fields.  Default 4.
    """

    def __init__(self, *, decimal_places: int = 4) -> None:
        self._dp = decimal_places

    # ------------------------------------------------------------------ #
    # CSV Export                                                           #
    # ------------------------------------------------------------------ #

    def to_csv(
        self,
        trades: list[Trade],
        *,
        columns: list[str] | None = None,
    ) -> str:
        """Export trades as a CSV string with header row."""
        cols = columns or _CSV_COLUMNS
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()

        for trade in trades:
            row = self._trade_to_row(trade)
            writer.writerow({c: row.get(c, "") for c in cols})

        return buf.getvalue()

    # ------------------------------------------------------------------ #
    # JSON Export                                                          #
    # ------------------------------------------------------------------ #

    def to_json(self, trades: list[Trade], *, indent: int = 2) -> str:
        """Export trades as a JSON list of objects."""
        rows = [self._trade_to_row(t) for t in trades]
        return json.dumps(rows, indent=indent, default=str)

    def bundle_to_dict(self, bundle: StatisticsBundle) -> dict[str, Any]:
        """Flatten a statistics bundle into JSON-safe primitives.

        Infinite ratios become the string ``"inf"`` so strict JSON
        consumers never see a bare ``Infinity`` token.
        """
        dp = self._dp
        out: dict[str, Any] = {}
        for f in fields(bundle):
            value = getattr(bundle, f.name)
            if f.name in _RATIO_FIELDS:
                out[f.name] = _json_ratio(value, dp)
            elif isinstance(value, float):
                out[f.name] = round(value, dp)
            elif isinstance(value, (int, str)):
                out[f.name] = value

        hold = bundle.avg_holding_time
        out["avg_holding_time"] = {
            "seconds": round(hold.seconds, 1),
            "hours": hold.hours,
            "minutes": hold.minutes,
            "formatted": hold.formatted,
        }
        out["equity_curve"] = [
            {"time": p.time.isoformat(), "equity": round(p.equity, dp), "ticket": p.trade.ticket}
            for p in bundle.equity_curve
        ]
        out["pips_curve"] = [
            {"time": p.time.isoformat(), "pips": p.pips, "trade_pips": p.trade_pips, "symbol": p.symbol}
            for p in bundle.pips_curve
        ]
        hist = bundle.pnl_distribution
        out["pnl_distribution"] = {
            "centers": [round(c, 2) for c in hist.centers],
            "counts": list(hist.counts),
            "edges": [round(e, dp) for e in hist.edges],
        }
        out["day_of_week_performance"] = [self._bucket(b) for b in bundle.day_of_week_performance]
        out["hourly_performance"] = [self._bucket(b) for b in bundle.hourly_performance]
        out["symbol_performance"] = [
            {**self._bucket(b), "volume": round(b.volume, dp)}
            for b in bundle.symbol_performance
        ]
        out["daily_pnl"] = [
            {
                "date": d.day.isoformat(),
                "profit": round(d.profit, dp),
                "pips": round(d.pips, 1),
                "trades": d.trades,
                "wins": d.wins,
                "losses": d.losses,
            }
            for d in bundle.daily_pnl
        ]
        return out

    def bundle_to_json(self, bundle: StatisticsBundle, *, indent: int = 2) -> str:
        return json.dumps(self.bundle_to_dict(bundle), indent=indent)

    # ------------------------------------------------------------------ #
    # Periodic Report                                                      #
    # ------------------------------------------------------------------ #

    def periodic_report(
        self,
        trades: list[Trade],
        *,
        period: str | ReportPeriod = ReportPeriod.DAILY,
    ) -> dict[str, Any]:
        """Generate a periodic performance summary.

        Parameters
        ----------
        trades : list[Trade]
            Trades to analyse.
        period : str
            Grouping period: ``"daily"``, ``"weekly"``, or ``"monthly"``.

        Returns
        -------
        dict
            ``period`` : str
            ``buckets`` : list of dicts with per-period stats
            ``totals`` : overall summary across all periods
        """
        period = ReportPeriod(period)
        if not trades:
            return {"period": period.value, "buckets": [], "totals": self._empty_totals()}

        buckets: dict[str, list[Trade]] = defaultdict(list)
        for trade in trades:
            buckets[self._period_key(trade, period)].append(trade)

        bucket_summaries = [self._group_stats(key, buckets[key]) for key in sorted(buckets)]

        totals = self._group_stats("all", trades)
        totals.pop("period_key", None)

        return {
            "period": period.value,
            "buckets": bucket_summaries,
            "totals": totals,
        }

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _trade_to_row(self, trade: Trade) -> dict[str, Any]:
        """Convert a Trade to a flat dict for export."""
        dp = self._dp
        return {
            "ticket": trade.ticket,
            "symbol": trade.symbol,
            "side": trade.side.value,
            "volume": round(trade.volume, dp),
            "open_time": trade.open_time.isoformat(),
            "open_price": round(trade.open_price, 5),
            "close_time": trade.close_time.isoformat(),
            "close_price": round(trade.close_price, 5),
            "stop_loss": trade.stop_loss,
            "take_profit": trade.take_profit,
            "gross_profit": round(trade.gross_profit, dp),
            "commission": round(trade.commission, dp),
            "swap": round(trade.swap, dp),
            "net_profit": round(trade.net_profit, dp),
            "pips": trade_pips(trade),
            "outcome": trade.outcome.value,
            "hold_duration": (
                format_duration(trade.open_time, trade.close_time)
                if trade.has_parsed_times else "-"
            ),
        }

    def _bucket(self, bucket: BucketPerformance) -> dict[str, Any]:
        return {
            "label": bucket.label,
            "profit": round(bucket.profit, self._dp),
            "count": bucket.count,
            "win_rate": round(bucket.win_rate, 2),
        }

    def _period_key(self, trade: Trade, period: ReportPeriod) -> str:
        """Get the period bucket key for a trade."""
        ts = trade.close_time
        if period is ReportPeriod.WEEKLY:
            iso = ts.isocalendar()
            return f"{iso[0]}-W{iso[1]:02d}"
        if period is ReportPeriod.MONTHLY:
            return ts.strftime("%Y-%m")
        return ts.strftime("%Y-%m-%d")

    def _group_stats(self, key: str, group: list[Trade]) -> dict[str, Any]:
        """Compute aggregate statistics for a group of trades."""
        dp = self._dp
        wins = [t for t in group if t.outcome == TradeOutcome.WIN]
        losses = [t for t in group if t.outcome == TradeOutcome.LOSS]
        total_pnl = sum(t.net_profit for t in group)
        gross_wins = sum(t.net_profit for t in wins)
        gross_losses = sum(abs(t.net_profit) for t in losses)

        return {
            "period_key": key,
            "trades": len(group),
            "wins": len(wins),
            "losses": len(losses),
            "win_rate": round(len(wins) / len(group), dp),
            "total_pnl": round(total_pnl, dp),
            "avg_pnl": round(total_pnl / len(group), dp),
            "profit_factor": _json_ratio(safe_ratio(gross_wins, gross_losses), dp),
            "best_trade": round(max(t.net_profit for t in group), dp),
            "worst_trade": round(min(t.net_profit for t in group), dp),
        }

    def _empty_totals(self) -> dict[str, Any]:
        return {
            "trades": 0,
            "wins": 0,
            "losses": 0,
            "win_rate": 0.0,
            "total_pnl": 0.0,
            "avg_pnl": 0.0,
            "profit_factor": 0.0,
            "best_trade": 0.0,
            "worst_trade": 0.0,
        }
