"""Shared fixtures for the trade-analytics test suite."""

from __future__ import annotations

import itertools
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import structlog

from trade_analytics.core.clock import SimClock
from trade_analytics.core.config import ParserConfig
from trade_analytics.core.enums import Side
from trade_analytics.ingest.parser import TradeFileParser
from trade_analytics.journal.record import Trade

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------

@pytest.fixture
def sim_clock() -> SimClock:
    """Return a SimClock fixed at 2024-06-01 00:00 UTC."""
    return SimClock(datetime(2024, 6, 1, tzinfo=timezone.utc))


@pytest.fixture
def base_time() -> datetime:
    """Monday 2024-01-01 12:00 UTC."""
    return datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

@pytest.fixture
def parser_config() -> ParserConfig:
    return ParserConfig()


@pytest.fixture
def parser(parser_config, sim_clock) -> TradeFileParser:
    return TradeFileParser(parser_config, clock=sim_clock)


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def read_fixture():
    """Return the raw bytes of a file under ``tests/fixtures``."""

    def _read(name: str) -> bytes:
        return (FIXTURES_DIR / name).read_bytes()

    return _read


# ---------------------------------------------------------------------------
# Trades
# ---------------------------------------------------------------------------

@pytest.fixture
def make_trade(base_time):
    """Factory for closed trades.

    Each call closes one hour after the previous one unless ``close_time``
    is given, so a list of calls is already in chronological order.
    """
    counter = itertools.count(1)

    def _make(
        profit: float = 10.0,
        *,
        symbol: str = "EURUSD",
        side: Side = Side.BUY,
        volume: float = 0.1,
        open_price: float = 1.1000,
        close_price: float = 1.1010,
        commission: float = 0.0,
        swap: float = 0.0,
        close_time: datetime | None = None,
        hold: timedelta = timedelta(hours=1),
        defaulted: frozenset[str] | set[str] = frozenset(),
    ) -> Trade:
        n = next(counter)
        closed = close_time or base_time + timedelta(hours=n)
        return Trade(
            ticket=str(1000 + n),
            symbol=symbol,
            side=side,
            volume=volume,
            open_price=open_price,
            close_price=close_price,
            open_time=closed - hold,
            close_time=closed,
            gross_profit=profit,
            commission=commission,
            swap=swap,
            defaulted_fields=frozenset(defaulted),
        )

    return _make


@pytest.fixture
def make_trades(make_trade):
    """Build one trade per profit value, closing an hour apart."""

    def _make(profits: list[float], **kwargs) -> list[Trade]:
        return [make_trade(p, **kwargs) for p in profits]

    return _make


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

@pytest.fixture
def restore_logging():
    """Undo ``setup_logging`` side effects on the root logger."""
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
    root.setLevel(level)
