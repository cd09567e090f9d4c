"""Delimited-text extraction.

Broker CSV exports mix delimiters (comma, semicolon, tab) and quote
fields inconsistently.  Each line is tokenized on any of the three
delimiters; a double quote toggles an "inside quotes" state in which
delimiters are literal text.  Quote characters are not kept.
"""

from __future__ import annotations

from collections.abc import Iterator

DELIMITERS = frozenset(",;\t")
QUOTE = '"'


def split_lines(text: str) -> list[str]:
    """Return the non-blank lines of *text*."""
    return [line for line in text.split("\n") if line.strip()]


def tokenize_line(line: str) -> list[str]:
    """Split one line into stripped cells.

    >>> tokenize_line('EURUSD;"1,5";buy')
    ['EURUSD', '1,5', 'buy']
    """
    cells: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == QUOTE:
            in_quotes = not in_quotes
        elif char in DELIMITERS and not in_quotes:
            cells.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    cells.append("".join(current).strip())
    return cells


def iter_rows(text: str) -> Iterator[list[str]]:
    """Yield one tokenized row per non-blank line."""
    for line in split_lines(text):
        yield tokenize_line(line)
