"""Async file acquisition boundary.

Reading the export is the only suspension point in the pipeline: the
whole file is loaded into memory, then parsed synchronously.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from .parser import ParseResult, TradeFileParser, source_format_for

logger = logging.getLogger(__name__)


async def read_bytes(path: str | Path) -> bytes:
    """Read a whole file without blocking the event loop."""
    return await asyncio.to_thread(Path(path).read_bytes)


async def load_trade_file(
    path: str | Path,
    parser: TradeFileParser | None = None,
) -> ParseResult:
    """Read and parse one broker export.

    The extension is checked before any I/O so unsupported files fail
    immediately.
    """
    path = Path(path)
    source_format_for(path.name)
    data = await read_bytes(path)
    logger.debug("Read %d bytes from %s", len(data), path)
    return (parser or TradeFileParser()).parse(data, path.name)
