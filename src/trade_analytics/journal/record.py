"""Normalized trade record, the core data model.

A Trade captures one closed position as recovered from a broker export:
identity, instrument, direction, size, prices, timestamps, and the three
profit components.  Net profit is derived once at construction and every
statistic reads it through :attr:`Trade.profit`.

Exports are sparse, so several fields may hold fallback defaults rather
than parsed values.  Those fields are listed in ``defaulted_fields`` so
callers can tell a genuine ``0.0`` or timestamp from a placeholder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from trade_analytics.core.enums import Side, TradeOutcome

UNKNOWN_SYMBOL = "UNKNOWN"


@dataclass(frozen=True)
class Trade:
    """One closed position.

    Parameters
    ----------
    ticket : str
        Broker ticket, or a synthesized placeholder.
    symbol : str
        Instrument code, upper-cased (e.g. ``"EURUSD"``).
    side : Side
        ``Side.BUY`` or ``Side.SELL``.
    volume : float
        Lot size.
    gross_profit, commission, swap : float
        Profit components as reported by the broker.  Commission and swap
        are usually zero or negative.
    """

    ticket: str
    symbol: str
    side: Side
    volume: float
    open_price: float
    close_price: float
    open_time: datetime
    close_time: datetime
    gross_profit: float
    commission: float = 0.0
    swap: float = 0.0
    stop_loss: float | None = None
    take_profit: float | None = None
    defaulted_fields: frozenset[str] = field(default_factory=frozenset)

    net_profit: float = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "net_profit", self.gross_profit + self.commission + self.swap
        )

    # ------------------------------------------------------------------ #
    # Computed properties                                                  #
    # ------------------------------------------------------------------ #

    @property
    def profit(self) -> float:
        """Profit used by every statistic."""
        return self.net_profit

    @property
    def outcome(self) -> TradeOutcome:
        """Win / loss / break-even classification."""
        if self.net_profit > 0:
            return TradeOutcome.WIN
        if self.net_profit < 0:
            return TradeOutcome.LOSS
        return TradeOutcome.BREAKEVEN

    @property
    def hold_duration_seconds(self) -> float:
        """Seconds between open and close (may be negative on bad data)."""
        return (self.close_time - self.open_time).total_seconds()

    @property
    def has_parsed_times(self) -> bool:
        """Both timestamps came from the file rather than the clock."""
        return not ({"open_time", "close_time"} & self.defaulted_fields)

    def is_defaulted(self, name: str) -> bool:
        return name in self.defaulted_fields

    def is_valid(self) -> bool:
        """A trade needs a real symbol to count."""
        return bool(self.symbol) and self.symbol != UNKNOWN_SYMBOL
