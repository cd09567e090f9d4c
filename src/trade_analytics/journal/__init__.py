"""Trade Journal & Analytics: performance statistics from normalized trades.

Key components
--------------
Trade              Immutable record of one closed position
compute_statistics Full statistics bundle (P&L, drawdown, streaks, ratios)
pnl_histogram      Profit distribution
*_performance      Day-of-week, hour-of-day, and per-symbol buckets
pips_curve         Cumulative pips over time
daily_pnl          Calendar aggregation by close date
TradeExporter      CSV/JSON export and periodic reports
"""

from .calendar import DayPnL, MonthSummary, daily_pnl, monthly_summary
from .distributions import (
    BucketPerformance,
    Histogram,
    SymbolPerformance,
    day_of_week_performance,
    hourly_performance,
    pnl_histogram,
    symbol_performance,
)
from .export import TradeExporter, format_duration, format_ratio
from .pips import pip_size, pips_curve, trade_pips
from .record import Trade
from .stats import EquityPoint, HoldingTime, StatisticsBundle, compute_statistics

__all__ = [
    "Trade",
    "StatisticsBundle",
    "EquityPoint",
    "HoldingTime",
    "compute_statistics",
    "Histogram",
    "BucketPerformance",
    "SymbolPerformance",
    "pnl_histogram",
    "day_of_week_performance",
    "hourly_performance",
    "symbol_performance",
    "pip_size",
    "trade_pips",
    "pips_curve",
    "DayPnL",
    "MonthSummary",
    "daily_pnl",
    "monthly_summary",
    "TradeExporter",
    "format_ratio",
    "format_duration",
]
