"""Format-detecting parser for broker trade-history exports.

Pipeline
--------
raw bytes → :mod:`.encoding` → decoded text → :mod:`.tabular` /
:mod:`.markup` → raw rows → :mod:`.schema` → column map →
:mod:`.normalize` → trades
"""

from .encoding import decode_bytes, detect_encoding
from .loader import load_trade_file
from .normalize import Parsed, TradeNormalizer, parse_date, parse_number
from .parser import ParseResult, TradeFileParser, source_format_for
from .schema import ColumnMap, infer_column_map

__all__ = [
    "ColumnMap",
    "ParseResult",
    "Parsed",
    "TradeFileParser",
    "TradeNormalizer",
    "decode_bytes",
    "detect_encoding",
    "infer_column_map",
    "load_trade_file",
    "parse_date",
    "parse_number",
    "source_format_for",
]
