"""Schema inference for broker trade tables.

Broker layouts are a small, enumerable set, so inference is deterministic:

* **Named columns**: each header cell is tested against an ordered table
  of ``(Field, pattern)`` pairs.  The first column to match a field owns
  it; later matches never overwrite.  A map is only accepted when it
  resolves both ``SYMBOL`` and ``PROFIT``.
* **Positional layouts**: fixed column orders for headerless exports
  (:data:`BROKER_STANDARD_13`, :data:`MINIMAL_6`) and for MT5 "Positions"
  rows (:data:`POSITIONS_13`).
* **Row scan**: last-resort heuristics for unlabelled HTML rows
  (:func:`scan_row`).

Account metadata harvesting lives here too because it reads the same
document text the markup path walks.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from trade_analytics.core.enums import Field, Side
from trade_analytics.core.models import AccountInfo

# Ordered: evaluation order decides ties when one header matches several fields.
COLUMN_PATTERNS: tuple[tuple[Field, re.Pattern[str]], ...] = (
    (Field.TICKET, re.compile(r"ticket|order|deal", re.IGNORECASE)),
    (Field.OPEN_TIME, re.compile(r"open\s*time|time\s*open|entry\s*time", re.IGNORECASE)),
    (Field.CLOSE_TIME, re.compile(r"close\s*time|time\s*close|exit\s*time", re.IGNORECASE)),
    (Field.SIDE, re.compile(r"type|direction|side", re.IGNORECASE)),
    (Field.VOLUME, re.compile(r"volume|size|lots?", re.IGNORECASE)),
    (Field.SYMBOL, re.compile(r"symbol|instrument|pair", re.IGNORECASE)),
    (Field.OPEN_PRICE, re.compile(r"open\s*price|entry\s*price|price\s*open", re.IGNORECASE)),
    (Field.CLOSE_PRICE, re.compile(r"close\s*price|exit\s*price|price\s*close", re.IGNORECASE)),
    (Field.PROFIT, re.compile(r"profit|p[/&]?l|pnl|result|gross", re.IGNORECASE)),
    (Field.COMMISSION, re.compile(r"commission|comm", re.IGNORECASE)),
    (Field.SWAP, re.compile(r"swap|rollover", re.IGNORECASE)),
    (Field.STOP_LOSS, re.compile(r"s/?l|stop\s*loss", re.IGNORECASE)),
    (Field.TAKE_PROFIT, re.compile(r"t/?p|take\s*profit", re.IGNORECASE)),
)

REQUIRED_FIELDS = frozenset({Field.SYMBOL, Field.PROFIT})

HEADER_KEYWORDS = ("ticket", "symbol", "type", "volume", "profit", "time", "price", "order")


@dataclass(frozen=True)
class ColumnMap:
    """Canonical field → cell index for one table."""

    indices: dict[Field, int] = field(default_factory=dict)

    def __contains__(self, item: Field) -> bool:
        return item in self.indices

    def index_of(self, item: Field) -> int | None:
        return self.indices.get(item)

    @property
    def is_sufficient(self) -> bool:
        return REQUIRED_FIELDS <= self.indices.keys()


@dataclass(frozen=True)
class PositionalLayout:
    """A fixed column order recognized when no usable header exists."""

    name: str
    columns: ColumnMap
    min_cells: int


BROKER_STANDARD_13 = PositionalLayout(
    name="broker_standard_13",
    columns=ColumnMap({
        Field.TICKET: 0,
        Field.OPEN_TIME: 1,
        Field.SIDE: 2,
        Field.VOLUME: 3,
        Field.SYMBOL: 4,
        Field.OPEN_PRICE: 5,
        Field.STOP_LOSS: 6,
        Field.TAKE_PROFIT: 7,
        Field.CLOSE_TIME: 8,
        Field.CLOSE_PRICE: 9,
        Field.COMMISSION: 10,
        Field.SWAP: 11,
        Field.PROFIT: 12,
    }),
    min_cells=13,
)

# Profit is read from the last cell, whatever the row length.
MINIMAL_6 = PositionalLayout(
    name="minimal_6",
    columns=ColumnMap({
        Field.SYMBOL: 0,
        Field.SIDE: 1,
        Field.VOLUME: 2,
        Field.OPEN_PRICE: 3,
        Field.CLOSE_PRICE: 4,
        Field.PROFIT: -1,
    }),
    min_cells=6,
)

# MT5 "Positions" row after hidden cells are removed.
POSITIONS_13 = PositionalLayout(
    name="positions_13",
    columns=ColumnMap({
        Field.OPEN_TIME: 0,
        Field.TICKET: 1,
        Field.SYMBOL: 2,
        Field.SIDE: 3,
        Field.VOLUME: 4,
        Field.OPEN_PRICE: 5,
        Field.STOP_LOSS: 6,
        Field.TAKE_PROFIT: 7,
        Field.CLOSE_TIME: 8,
        Field.CLOSE_PRICE: 9,
        Field.COMMISSION: 10,
        Field.SWAP: 11,
        Field.PROFIT: 12,
    }),
    min_cells=13,
)

DELIMITED_LAYOUTS = (BROKER_STANDARD_13, MINIMAL_6)


def infer_column_map(header_cells: list[str]) -> ColumnMap | None:
    """Map header cells to canonical fields.

    Returns ``None`` unless both symbol and profit columns were found, so
    the caller can fall back to positional parsing.
    """
    indices: dict[Field, int] = {}
    for index, cell in enumerate(header_cells):
        for name, pattern in COLUMN_PATTERNS:
            if name not in indices and pattern.search(cell):
                indices[name] = index

    column_map = ColumnMap(indices)
    return column_map if column_map.is_sufficient else None


def looks_like_header(cells: list[str]) -> bool:
    text = " ".join(cells).lower()
    return any(keyword in text for keyword in HEADER_KEYWORDS)


def select_layout(cell_count: int) -> PositionalLayout | None:
    """Widest delimited layout the row can hold."""
    for layout in DELIMITED_LAYOUTS:
        if cell_count >= layout.min_cells:
            return layout
    return None


# ---------------------------------------------------------------------------
# Unlabelled row scan
# ---------------------------------------------------------------------------

_NUMERIC_TOKEN = re.compile(r"^-?\$?[\d\s]+\.?\d*$")
_LONG_ALPHA = re.compile(r"^[A-Z]{6,}$", re.IGNORECASE)
_CURRENCY_PAIR = re.compile(r"[A-Z]{3}/?[A-Z]{3}", re.IGNORECASE)
_SELL_TOKEN = re.compile(r"sell|short", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s")


@dataclass(frozen=True)
class ScannedRow:
    symbol: str | None
    side: Side
    profit_text: str


def scan_row(cells: list[str]) -> ScannedRow | None:
    """Guess symbol, side, and profit from an unlabelled row.

    Profit is the right-most numeric-looking token.  Returns ``None`` when
    there is none.
    """
    cleaned = [c for c in cells if c.strip()]

    profit_text = None
    for value in reversed(cleaned):
        if _NUMERIC_TOKEN.match(_WHITESPACE.sub("", value)):
            profit_text = value
            break
    if profit_text is None:
        return None

    symbol = None
    for value in cleaned:
        if _LONG_ALPHA.match(value) or _CURRENCY_PAIR.search(value):
            symbol = value.upper()
            break

    side = Side.BUY
    if any(_SELL_TOKEN.search(value) for value in cleaned):
        side = Side.SELL

    return ScannedRow(symbol=symbol, side=side, profit_text=profit_text)


# ---------------------------------------------------------------------------
# Account metadata
# ---------------------------------------------------------------------------

# e.g. "52061359 (GBP, PepperstoneUK-Live, real, Hedge)"
_CURRENCY_RE = re.compile(
    r"\d+\s*\(\s*(USD|EUR|GBP|JPY|AUD|CAD|CHF|NZD)[,\s]", re.IGNORECASE
)
_ACCOUNT_RE = re.compile(r"Account:\s*(\d+)", re.IGNORECASE)
_NAME_RE = re.compile(r"Name:\s*([^<\n]+)", re.IGNORECASE)


def harvest_account_info(text: str) -> AccountInfo:
    """Extract currency, account number, and holder name from report text."""
    currency = account_number = name = None

    currency_match = _CURRENCY_RE.search(text)
    if currency_match:
        currency = currency_match.group(1).upper()

    account_match = _ACCOUNT_RE.search(text)
    if account_match:
        account_number = account_match.group(1)

    name_match = _NAME_RE.search(text)
    if name_match:
        name = name_match.group(1).strip() or None

    return AccountInfo(account_number=account_number, name=name, currency=currency)
