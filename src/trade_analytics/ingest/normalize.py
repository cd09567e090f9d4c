"""Trade normalization: raw cells → :class:`Trade`.

Field-level parsing is deliberately forgiving.  Sparse exports leave
commission, swap, prices, and times blank, so an unparseable field
becomes its documented default instead of failing the row:

==============  =====================
field           default
==============  =====================
prices/profit   ``0.0``
volume          ``ParserConfig.min_lot``
timestamps      ``clock.now()``
side            ``buy``
ticket          synthesized
stop/take       ``None``
==============  =====================

Every parse helper returns a :class:`Parsed` carrying a ``defaulted``
flag, and the names of defaulted fields end up on the trade.

Row-level problems (a row too short to hold the mapped symbol or profit
cell) raise :class:`RowParseError`; the parser skips such rows.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Generic, TypeVar

from trade_analytics.core.clock import IClock, WallClock
from trade_analytics.core.config import ParserConfig
from trade_analytics.core.enums import Field, Side
from trade_analytics.core.errors import RowParseError
from trade_analytics.core.ids import ensure_utc, synthetic_ticket
from trade_analytics.journal.record import UNKNOWN_SYMBOL, Trade

from .schema import POSITIONS_13, ColumnMap, PositionalLayout, ScannedRow

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Parsed(Generic[T]):
    """A parsed field value and whether it is a fallback default."""

    value: T
    defaulted: bool = False


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------

_WHITESPACE = re.compile(r"\s")
_FLOAT_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

# YYYY.MM.DD HH:MM[:SS], the MetaTrader convention
_BROKER_DATETIME = re.compile(
    r"(\d{4})\.(\d{2})\.(\d{2})\s+(\d{2}):(\d{2}):?(\d{2})?"
)
# DD.MM.YYYY
_DAY_FIRST_DATE = re.compile(r"(\d{2})\.(\d{2})\.(\d{4})")

_NON_TRADE_PATTERNS = (
    re.compile(r"balance"),
    re.compile(r"deposit"),
    re.compile(r"withdraw"),
    re.compile(r"^total"),
    re.compile(r"closed p/l"),
    re.compile(r"summary"),
    re.compile(r"credit"),
    re.compile(r"rebate"),
)


def parse_number(raw: str | None, default: float = 0.0) -> Parsed[float]:
    """Parse a locale-formatted number.

    Whitespace (thousands separators) is removed and the first comma is
    read as a decimal point.  The longest numeric prefix is used, so
    ``"12.50 USD"`` parses as ``12.5``.
    """
    if not raw:
        return Parsed(default, defaulted=True)
    cleaned = _WHITESPACE.sub("", raw).replace(",", ".", 1)
    match = _FLOAT_PREFIX.match(cleaned)
    if match is None:
        return Parsed(default, defaulted=True)
    return Parsed(float(match.group(0)))


def parse_date(raw: str | None, clock: IClock) -> Parsed[datetime]:
    """Parse a broker timestamp, falling back to ``clock.now()``.

    Tried in order: ISO 8601, ``YYYY.MM.DD HH:MM[:SS]``, ``DD.MM.YYYY``.
    Naive results are taken as UTC.  A value that parses but cannot be
    represented in UTC (e.g. year 1 with a positive offset) also falls back.
    """
    value = (raw or "").strip()
    if value:
        try:
            return Parsed(ensure_utc(datetime.fromisoformat(value)))
        except (ValueError, OverflowError):
            pass

        match = _BROKER_DATETIME.search(value)
        if match:
            year, month, day, hour, minute, second = match.groups()
            try:
                return Parsed(ensure_utc(datetime(
                    int(year), int(month), int(day),
                    int(hour), int(minute), int(second or 0),
                )))
            except (ValueError, OverflowError):
                pass

        match = _DAY_FIRST_DATE.search(value)
        if match:
            day, month, year = match.groups()
            try:
                return Parsed(ensure_utc(datetime(int(year), int(month), int(day))))
            except (ValueError, OverflowError):
                pass

    return Parsed(clock.now(), defaulted=True)


def normalize_side(raw: str | None) -> Side:
    """``sell``/``short`` (or MetaTrader's numeric ``1``) → sell; else buy."""
    value = (raw or "").strip().lower()
    if "sell" in value or "short" in value or value == "1":
        return Side.SELL
    return Side.BUY


def is_non_trade_row(cells: list[str]) -> bool:
    """Balance, deposit, summary and similar rows carry no position."""
    text = " ".join(cells).lower()
    return any(p.search(text) for p in _NON_TRADE_PATTERNS)


def is_trade_type(raw: str) -> bool:
    return raw.strip().lower() in (Side.BUY.value, Side.SELL.value)


# ---------------------------------------------------------------------------
# Trade construction
# ---------------------------------------------------------------------------

class TradeNormalizer:
    """Build :class:`Trade` records from raw cell rows.

    Parameters
    ----------
    config : ParserConfig
        Supplies the minimal lot used as the volume default.
    clock : IClock
        Source of "now" for unparseable timestamps and synthesized tickets.
    """

    def __init__(
        self,
        config: ParserConfig | None = None,
        clock: IClock | None = None,
    ) -> None:
        self._config = config or ParserConfig()
        self._clock = clock or WallClock()

    # ------------------------------------------------------------------ #
    # Entry points                                                         #
    # ------------------------------------------------------------------ #

    def from_columns(
        self,
        cells: list[str],
        columns: ColumnMap,
        *,
        row_index: int = 0,
    ) -> Trade:
        """Build a trade from a named-column or positional map.

        Raises
        ------
        RowParseError
            The row is too short to hold the symbol or profit cell.
        """
        for required in (Field.SYMBOL, Field.PROFIT):
            index = columns.index_of(required)
            if index is not None and not -len(cells) <= index < len(cells):
                raise RowParseError(
                    row_index,
                    f"{len(cells)} cells, {required.value} expected at column {index}",
                )

        def cell(name: Field) -> str | None:
            index = columns.index_of(name)
            if index is None or not -len(cells) <= index < len(cells):
                return None
            return cells[index]

        defaulted: set[str] = set()

        def number(name: Field, attr: str, default: float = 0.0) -> float:
            parsed = parse_number(cell(name), default)
            if parsed.defaulted:
                defaulted.add(attr)
            return parsed.value

        def timestamp(name: Field, attr: str) -> datetime:
            parsed = parse_date(cell(name), self._clock)
            if parsed.defaulted:
                defaulted.add(attr)
            return parsed.value

        ticket = (cell(Field.TICKET) or "").strip()
        if not ticket:
            ticket = synthetic_ticket(self._clock)
            defaulted.add("ticket")

        symbol = (cell(Field.SYMBOL) or "").strip().upper() or UNKNOWN_SYMBOL

        side_raw = cell(Field.SIDE)
        if side_raw is None:
            defaulted.add("side")
        side = normalize_side(side_raw)

        volume = parse_number(cell(Field.VOLUME))
        if volume.defaulted or volume.value <= 0:
            volume = Parsed(self._config.min_lot, defaulted=True)
            defaulted.add("volume")

        stop_loss = parse_number(cell(Field.STOP_LOSS))
        take_profit = parse_number(cell(Field.TAKE_PROFIT))

        return Trade(
            ticket=ticket,
            symbol=symbol,
            side=side,
            volume=volume.value,
            open_price=number(Field.OPEN_PRICE, "open_price"),
            close_price=number(Field.CLOSE_PRICE, "close_price"),
            open_time=timestamp(Field.OPEN_TIME, "open_time"),
            close_time=timestamp(Field.CLOSE_TIME, "close_time"),
            gross_profit=number(Field.PROFIT, "gross_profit"),
            commission=number(Field.COMMISSION, "commission"),
            swap=number(Field.SWAP, "swap"),
            stop_loss=None if stop_loss.defaulted else stop_loss.value,
            take_profit=None if take_profit.defaulted else take_profit.value,
            defaulted_fields=frozenset(defaulted),
        )

    def from_layout(
        self,
        cells: list[str],
        layout: PositionalLayout,
        *,
        row_index: int = 0,
    ) -> Trade | None:
        """Build a trade from a fixed layout; ``None`` if the row is too short."""
        if len(cells) < layout.min_cells:
            return None
        return self.from_columns(cells, layout.columns, row_index=row_index)

    def from_positions_row(
        self,
        cells: list[str],
        *,
        row_index: int = 0,
    ) -> Trade | None:
        """Build a trade from a visible MT5 Positions row.

        Rows whose type is not exactly buy or sell (balance, credit,
        cancelled orders) are rejected.
        """
        if len(cells) < POSITIONS_13.min_cells:
            return None
        side_index = POSITIONS_13.columns.index_of(Field.SIDE)
        if not is_trade_type(cells[side_index]):
            logger.debug("Skipping non-trade row, type: %s", cells[side_index])
            return None
        return self.from_columns(cells, POSITIONS_13.columns, row_index=row_index)

    def from_scan(self, scanned: ScannedRow) -> Trade:
        """Build a minimal trade from an unlabelled row scan."""
        profit = parse_number(re.sub(r"[^\d.-]", "", scanned.profit_text)).value
        now = self._clock.now()
        return Trade(
            ticket=synthetic_ticket(self._clock),
            symbol=scanned.symbol or UNKNOWN_SYMBOL,
            side=scanned.side,
            volume=self._config.min_lot,
            open_price=0.0,
            close_price=0.0,
            open_time=now,
            close_time=now,
            gross_profit=profit,
            defaulted_fields=frozenset({
                "ticket", "volume", "open_price", "close_price",
                "open_time", "close_time", "commission", "swap",
            }),
        )
