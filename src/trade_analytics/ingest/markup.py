"""HTML report extraction.

Walks a broker HTML report with :class:`html.parser.HTMLParser` and keeps
only what trade extraction needs: every ``<tr>`` in document order, the
table that owns it, each cell's tag, text and hidden flag, and the
document text used for account metadata.

Broker reports are loose HTML (unclosed ``<td>``, nested layout tables),
so cells and rows are closed implicitly when a sibling opens and every
open cell receives text from nested elements, like DOM ``textContent``.

Two row sources are offered on top of the document:

* :func:`iter_positions_rows` for the MT5 "Positions" report section;
* :meth:`MarkupDocument.tables` for the generic per-table scan.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from html.parser import HTMLParser

logger = logging.getLogger(__name__)

SECTION_OPEN = "Positions"
SECTION_CLOSE = frozenset({"Orders", "Deals", "Results"})

_DISPLAY_NONE = re.compile(r"display\s*:\s*none", re.IGNORECASE)
_BLOCK_TAGS = frozenset({"br", "p", "div", "tr", "td", "th", "li", "table"})
_SKIP_TAGS = frozenset({"script", "style"})


@dataclass
class Cell:
    tag: str  # "td" or "th"
    text: str = ""
    hidden: bool = False

    @property
    def value(self) -> str:
        return self.text.strip()


@dataclass
class Row:
    table: int | None  # Index into MarkupDocument.tables, None if outside a table
    cells: list[Cell] = field(default_factory=list)

    @property
    def values(self) -> list[str]:
        return [c.value for c in self.cells]

    @property
    def visible_values(self) -> list[str]:
        """Cell texts with hidden presentation cells removed."""
        return [c.value for c in self.cells if not c.hidden]

    @property
    def td_cells(self) -> list[Cell]:
        return [c for c in self.cells if c.tag == "td"]

    @property
    def th_values(self) -> list[str]:
        return [c.value for c in self.cells if c.tag == "th"]

    @property
    def text(self) -> str:
        return " ".join(c.text for c in self.cells)


@dataclass
class MarkupDocument:
    rows: list[Row] = field(default_factory=list)
    table_count: int = 0
    text: str = ""

    def tables(self) -> list[list[Row]]:
        """Rows grouped by owning table, in table-open order."""
        grouped: list[list[Row]] = [[] for _ in range(self.table_count)]
        for row in self.rows:
            if row.table is not None:
                grouped[row.table].append(row)
        return grouped


def is_hidden(attrs: dict[str, str | None]) -> bool:
    """Cells flagged hidden by class or inline style are padding, not data."""
    css_class = attrs.get("class") or ""
    style = attrs.get("style") or ""
    return "hidden" in css_class or bool(_DISPLAY_NONE.search(style))


class _Frame:
    """Open row/cell state for one table nesting level."""

    __slots__ = ("table", "row", "cell")

    def __init__(self, table: int | None) -> None:
        self.table = table
        self.row: Row | None = None
        self.cell: Cell | None = None


class _ReportWalker(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.doc = MarkupDocument()
        self._frames: list[_Frame] = [_Frame(None)]
        self._text: list[str] = []
        self._skip_depth = 0

    # ------------------------------------------------------------------ #
    # Tag handling                                                         #
    # ------------------------------------------------------------------ #

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in _SKIP_TAGS:
            self._skip_depth += 1
            return
        if tag in _BLOCK_TAGS:
            self._text.append("\n")

        if tag == "table":
            self._frames.append(_Frame(self.doc.table_count))
            self.doc.table_count += 1
        elif tag == "tr":
            self._open_row()
        elif tag in ("td", "th"):
            frame = self._frames[-1]
            frame.cell = None
            if frame.row is None:
                self._open_row()
            cell = Cell(tag=tag, hidden=is_hidden(dict(attrs)))
            frame.row.cells.append(cell)
            frame.cell = cell

    def handle_endtag(self, tag: str) -> None:
        if tag in _SKIP_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
            return
        if tag in _BLOCK_TAGS:
            self._text.append("\n")

        frame = self._frames[-1]
        if tag in ("td", "th"):
            frame.cell = None
        elif tag == "tr":
            frame.cell = None
            frame.row = None
        elif tag == "table" and len(self._frames) > 1:
            self._frames.pop()

    def handle_data(self, data: str) -> None:
        if self._skip_depth:
            return
        self._text.append(data)
        for frame in self._frames:
            if frame.cell is not None:
                frame.cell.text += data

    def _open_row(self) -> None:
        frame = self._frames[-1]
        frame.cell = None
        frame.row = Row(table=frame.table)
        self.doc.rows.append(frame.row)

    def finish(self) -> MarkupDocument:
        self.close()
        self.doc.text = "".join(self._text)
        return self.doc


def parse_document(text: str) -> MarkupDocument:
    """Parse decoded HTML into rows, cells, and document text."""
    walker = _ReportWalker()
    walker.feed(text)
    doc = walker.finish()
    logger.debug(
        "Parsed markup: %d rows across %d tables", len(doc.rows), doc.table_count
    )
    return doc


def _is_positions_header(row: Row) -> bool:
    if not row.cells:
        return False
    text = row.text
    return row.cells[0].value == "Time" and "Position" in text and "Symbol" in text


def iter_positions_rows(doc: MarkupDocument, *, min_cells: int = 5) -> Iterator[list[str]]:
    """Yield visible cell values of data rows inside the Positions section.

    A ``th`` reading exactly ``Positions`` opens the section and one of
    ``Orders``, ``Deals`` or ``Results`` closes it.  Data rows start after
    the section's column header (first cell ``Time``).
    """
    in_section = False
    header_found = False

    for row in doc.rows:
        for th in row.th_values:
            if th == SECTION_OPEN:
                in_section = True
            elif in_section and th in SECTION_CLOSE:
                in_section = False
                header_found = False

        if not in_section:
            continue

        if _is_positions_header(row):
            header_found = True
            continue

        if not header_found:
            continue

        if len(row.td_cells) < min_cells:
            continue

        yield [c.value for c in row.td_cells if not c.hidden]
