"""Tests for the async file loading boundary."""

import shutil

import pytest

from trade_analytics.core.errors import UnsupportedFormatError
from trade_analytics.ingest.loader import load_trade_file, read_bytes


@pytest.mark.asyncio
async def test_read_bytes(fixtures_dir):
    data = await read_bytes(fixtures_dir / "history_named.csv")
    assert data.startswith(b"Symbol,Ticket")


@pytest.mark.asyncio
async def test_load_csv(fixtures_dir, parser):
    result = await load_trade_file(fixtures_dir / "history_named.csv", parser)
    assert len(result.trades) == 3


@pytest.mark.asyncio
async def test_load_html_with_default_parser(fixtures_dir):
    result = await load_trade_file(str(fixtures_dir / "mt5_report.html"))
    assert result.currency == "GBP"
    assert len(result.trades) == 3


@pytest.mark.asyncio
async def test_extension_checked_before_reading(tmp_path):
    # The file does not exist; the extension check must fail first.
    with pytest.raises(UnsupportedFormatError):
        await load_trade_file(tmp_path / "missing.xlsx")


@pytest.mark.asyncio
async def test_missing_supported_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        await load_trade_file(tmp_path / "missing.csv")


@pytest.mark.asyncio
async def test_extension_case_insensitive(tmp_path, fixtures_dir, parser):
    target = tmp_path / "REPORT.HTM"
    shutil.copy(fixtures_dir / "mt5_report.html", target)
    result = await load_trade_file(target, parser)
    assert [t.ticket for t in result.trades] == ["1001", "1002", "1003"]
