"""Enumerations used across the trade analytics package."""

from enum import Enum


class Side(str, Enum):
    BUY = "buy"
    SELL = "sell"


class TradeOutcome(str, Enum):
    """Win / loss / break-even classification."""

    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"


class SourceFormat(str, Enum):
    DELIMITED = "delimited"  # .csv
    MARKUP = "markup"        # .html / .htm


class TextEncoding(str, Enum):
    """Codec names accepted by ``bytes.decode``."""

    UTF8 = "utf-8"
    UTF16_LE = "utf-16-le"
    UTF16_BE = "utf-16-be"


class Field(str, Enum):
    """Canonical trade fields a column map can resolve."""

    TICKET = "ticket"
    OPEN_TIME = "open_time"
    CLOSE_TIME = "close_time"
    SIDE = "side"
    VOLUME = "volume"
    SYMBOL = "symbol"
    OPEN_PRICE = "open_price"
    CLOSE_PRICE = "close_price"
    PROFIT = "profit"
    COMMISSION = "commission"
    SWAP = "swap"
    STOP_LOSS = "stop_loss"
    TAKE_PROFIT = "take_profit"


class ReportPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
