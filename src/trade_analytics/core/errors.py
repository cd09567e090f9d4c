"""Custom exception hierarchy for trade analytics."""


class TradeAnalyticsError(Exception):
    """Base exception for all trade analytics errors."""


# --- Configuration ---
class ConfigError(TradeAnalyticsError):
    """Invalid or missing configuration."""


# --- Parsing ---
class ParseError(TradeAnalyticsError):
    """Trade file could not be turned into trades."""


class UnsupportedFormatError(ParseError):
    """File extension is not one of the supported export formats."""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(
            f"Unsupported file format: {filename!r}. "
            "Please upload CSV or HTML files."
        )


class EmptyInputError(ParseError):
    """Input holds no extractable lines, rows, or tables."""


class NoTradesFoundError(ParseError):
    """Extraction ran but recovered zero valid trades."""


class RowParseError(ParseError):
    """A single row could not be normalized (recovered by the parser)."""

    def __init__(self, row_index: int, reason: str):
        self.row_index = row_index
        self.reason = reason
        super().__init__(f"Row {row_index}: {reason}")
