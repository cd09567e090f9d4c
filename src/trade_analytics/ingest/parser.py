"""Broker trade-history parser.

Turns a raw export (bytes + filename) into a list of :class:`Trade`
records.  The filename extension picks the strategy:

* ``.csv``: delimited text.  The first line is tried as a named header;
  otherwise rows are matched against the 13- and 6-column layouts.
* ``.html`` / ``.htm``: markup.  The MT5 "Positions" section is tried
  first, then every table is scanned for a header row or, failing that,
  for unlabelled rows.

Usage::

    parser = TradeFileParser()
    result = parser.parse(data, "ReportHistory.html")
    print(len(result.trades), result.currency)

Failure policy: an unsupported extension, empty input, or zero
recovered trades raise.  A row that fails to normalize is
skipped with a warning; the rest of the file still parses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import PurePath

from trade_analytics.core.clock import IClock, WallClock
from trade_analytics.core.config import ParserConfig
from trade_analytics.core.enums import SourceFormat, TextEncoding
from trade_analytics.core.errors import (
    EmptyInputError,
    NoTradesFoundError,
    RowParseError,
    UnsupportedFormatError,
)
from trade_analytics.core.models import AccountInfo
from trade_analytics.journal.record import Trade

from .encoding import decode_bytes
from .markup import MarkupDocument, Row, iter_positions_rows, parse_document
from .normalize import TradeNormalizer, is_non_trade_row
from .schema import (
    harvest_account_info,
    infer_column_map,
    looks_like_header,
    scan_row,
    select_layout,
)
from .tabular import split_lines, tokenize_line

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    ".csv": SourceFormat.DELIMITED,
    ".html": SourceFormat.MARKUP,
    ".htm": SourceFormat.MARKUP,
}

# Anything a single row can raise while being normalized
_ROW_ERRORS = (RowParseError, ValueError, TypeError, IndexError, OverflowError)


@dataclass
class ParseResult:
    """Trades recovered from one file plus what was learned on the way."""

    trades: list[Trade]
    source_format: SourceFormat
    encoding: TextEncoding
    account: AccountInfo = field(default_factory=AccountInfo)
    warnings: list[str] = field(default_factory=list)
    skipped_rows: int = 0

    @property
    def currency(self) -> str | None:
        return self.account.currency


def _as_row_error(row_index: int, exc: Exception) -> RowParseError:
    if isinstance(exc, RowParseError):
        return exc
    return RowParseError(row_index, f"{type(exc).__name__}: {exc}")


def source_format_for(filename: str) -> SourceFormat:
    """Select the parsing strategy from the file extension.

    Raises
    ------
    UnsupportedFormatError
        The extension is not ``.csv``, ``.html`` or ``.htm``.
    """
    suffix = PurePath(filename.lower()).suffix
    try:
        return _EXTENSIONS[suffix]
    except KeyError:
        raise UnsupportedFormatError(filename) from None


class TradeFileParser:
    """Format-detecting parser for broker exports.

    Parameters
    ----------
    config : ParserConfig
        Encoding probe, minimal lot, and row-width thresholds.
    clock : IClock
        "Now" used for unparseable timestamps.
    """

    def __init__(
        self,
        config: ParserConfig | None = None,
        clock: IClock | None = None,
    ) -> None:
        self._config = config or ParserConfig()
        self._normalizer = TradeNormalizer(self._config, clock or WallClock())

    def parse(self, data: bytes, filename: str) -> ParseResult:
        """Parse one export into trades.

        Each call works on fresh state; the parser holds nothing between
        files.
        """
        fmt = source_format_for(filename)
        text, encoding = decode_bytes(
            data,
            markup=fmt is SourceFormat.MARKUP,
            probe_bytes=self._config.utf16_probe_bytes,
            min_hits=self._config.utf16_min_hits,
        )
        logger.info(
            "Parsing %s as %s (%s, %d bytes)", filename, fmt.value, encoding.value, len(data)
        )

        result = ParseResult(trades=[], source_format=fmt, encoding=encoding)
        if fmt is SourceFormat.DELIMITED:
            self._parse_delimited(text, result)
        else:
            self._parse_markup(text, result)

        logger.info(
            "Recovered %d trades from %s (%d rows skipped)",
            len(result.trades), filename, result.skipped_rows,
        )
        return result

    # ------------------------------------------------------------------ #
    # Delimited text                                                       #
    # ------------------------------------------------------------------ #

    def _parse_delimited(self, text: str, result: ParseResult) -> None:
        lines = split_lines(text)
        if len(lines) < 2:
            raise EmptyInputError("CSV file appears to be empty")

        header = tokenize_line(lines[0])
        column_map = infer_column_map(header)
        # An unrecognized header must not be read back as a trade.
        start = 1 if column_map or looks_like_header(header) else 0

        for index in range(start, len(lines)):
            cells = tokenize_line(lines[index])
            if len(cells) < self._config.min_delimited_cells:
                continue
            if is_non_trade_row(cells):
                result.skipped_rows += 1
                continue

            try:
                if column_map is not None:
                    trade = self._normalizer.from_columns(cells, column_map, row_index=index)
                else:
                    layout = select_layout(len(cells))
                    trade = (
                        self._normalizer.from_layout(cells, layout, row_index=index)
                        if layout else None
                    )
            except _ROW_ERRORS as exc:
                self._record_skip(result, _as_row_error(index, exc))
                continue

            self._keep(result, trade)

        if not result.trades:
            raise NoTradesFoundError("No valid trades found in CSV file")

    # ------------------------------------------------------------------ #
    # Markup                                                               #
    # ------------------------------------------------------------------ #

    def _parse_markup(self, text: str, result: ParseResult) -> None:
        doc = parse_document(text)
        result.account = harvest_account_info(doc.text)
        if result.account.currency:
            logger.debug("Detected currency: %s", result.account.currency)

        if not doc.rows:
            raise EmptyInputError("No tables found in HTML file")

        self._parse_positions(doc, result)
        if result.trades:
            logger.debug("Parsed %d trades from Positions section", len(result.trades))
            return

        for rows in doc.tables():
            if len(rows) < 2:
                continue
            self._parse_table(rows, result)

        if not result.trades:
            raise NoTradesFoundError("No valid trades found in HTML file")

    def _parse_positions(self, doc: MarkupDocument, result: ParseResult) -> None:
        for index, cells in enumerate(iter_positions_rows(doc)):
            try:
                trade = self._normalizer.from_positions_row(cells, row_index=index)
            except _ROW_ERRORS as exc:
                self._record_skip(result, _as_row_error(index, exc))
                continue
            self._keep(result, trade)

    def _parse_table(self, rows: list[Row], result: ParseResult) -> None:
        column_map = None
        for index, row in enumerate(rows):
            if len(row.cells) < self._config.min_markup_cells:
                continue
            values = row.visible_values

            if column_map is None and looks_like_header(values):
                column_map = infer_column_map(values)
                continue

            if is_non_trade_row(values):
                result.skipped_rows += 1
                continue

            try:
                if column_map is not None:
                    trade = self._normalizer.from_columns(values, column_map, row_index=index)
                else:
                    scanned = scan_row(values)
                    trade = self._normalizer.from_scan(scanned) if scanned else None
            except _ROW_ERRORS as exc:
                self._record_skip(result, _as_row_error(index, exc))
                continue

            self._keep(result, trade)

    # ------------------------------------------------------------------ #
    # Helpers                                                              #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _keep(result: ParseResult, trade: Trade | None) -> None:
        if trade is not None and trade.is_valid():
            result.trades.append(trade)
        else:
            result.skipped_rows += 1

    @staticmethod
    def _record_skip(result: ParseResult, exc: RowParseError) -> None:
        logger.warning("Skipping invalid row: %s", exc)
        result.warnings.append(str(exc))
        result.skipped_rows += 1
