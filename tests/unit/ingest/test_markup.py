"""Tests for HTML report extraction and the Positions section scan."""

from trade_analytics.ingest.markup import is_hidden, iter_positions_rows, parse_document


def _positions_doc(*data_rows: str, trailer: str = "") -> str:
    header = (
        "<tr><td>Time</td><td>Position</td><td>Symbol</td><td>Type</td>"
        '<td class="hidden" colspan="8"></td><td>Volume</td><td>Price</td>'
        "<td>S / L</td><td>T / P</td><td>Time</td><td>Price</td>"
        "<td>Commission</td><td>Swap</td><td>Profit</td></tr>"
    )
    return (
        "<table><tr><th>Positions</th></tr>"
        + header
        + "".join(data_rows)
        + trailer
        + "</table>"
    )


def _row(*values: str, hidden_at: int | None = None) -> str:
    cells = [f"<td>{v}</td>" for v in values]
    if hidden_at is not None:
        cells.insert(hidden_at, '<td class="hidden" colspan="8"></td>')
    return "<tr>" + "".join(cells) + "</tr>"


ROW_VALUES = (
    "2024.01.15 10:30:00", "1001", "EURUSD", "buy", "0.10", "1.10000", "", "",
    "2024.01.15 14:45:00", "1.10500", "-0.70", "0.00", "50.00",
)


class TestParseDocument:
    def test_rows_and_cells(self):
        doc = parse_document(
            "<table><tr><th>A</th><th>B</th></tr><tr><td>1</td><td>2</td></tr></table>"
        )
        assert doc.table_count == 1
        assert [r.values for r in doc.rows] == [["A", "B"], ["1", "2"]]
        assert doc.rows[0].th_values == ["A", "B"]
        assert len(doc.rows[1].td_cells) == 2

    def test_unclosed_cells_close_implicitly(self):
        doc = parse_document("<table><tr><td>a<td>b<tr><td>c</table>")
        assert [r.values for r in doc.rows] == [["a", "b"], ["c"]]

    def test_nested_markup_text_is_collected(self):
        doc = parse_document("<table><tr><td><div><b>EUR</b>USD</div></td></tr></table>")
        assert doc.rows[0].values == ["EURUSD"]

    def test_entities_are_decoded(self):
        doc = parse_document("<table><tr><td>P&amp;L</td></tr></table>")
        assert doc.rows[0].values == ["P&L"]

    def test_hidden_cells_flagged(self):
        doc = parse_document(
            '<table><tr><td class="x hidden">h</td><td style="display: none">s</td>'
            "<td>v</td></tr></table>"
        )
        row = doc.rows[0]
        assert row.values == ["h", "s", "v"]
        assert row.visible_values == ["v"]

    def test_nested_tables_are_separate(self):
        doc = parse_document(
            "<table><tr><td>outer<table><tr><td>inner</td></tr></table></td></tr></table>"
        )
        assert doc.table_count == 2
        tables = doc.tables()
        assert [r.values for r in tables[1]] == [["inner"]]
        assert tables[0][0].values == ["outerinner"]

    def test_script_and_style_excluded_from_text(self):
        doc = parse_document(
            "<style>td { color: red }</style><script>var Name = 1;</script>"
            "<p>Name: Jane</p>"
        )
        assert "color" not in doc.text
        assert "var" not in doc.text
        assert "Name: Jane" in doc.text

    def test_block_tags_break_text_lines(self):
        doc = parse_document("<table><tr><th>Name:</th><th><b>Jane Trader</b></th></tr></table>")
        assert "Name:\n" in doc.text
        assert "\nJane Trader\n" in doc.text

    def test_no_tables(self):
        doc = parse_document("<html><body><p>nothing</p></body></html>")
        assert doc.rows == []
        assert doc.tables() == []


class TestIsHidden:
    def test_class(self):
        assert is_hidden({"class": "hidden"})

    def test_style(self):
        assert is_hidden({"style": "DISPLAY:NONE"})

    def test_plain(self):
        assert not is_hidden({"class": "data", "style": "color: red"})
        assert not is_hidden({})


class TestPositionsRows:
    def test_hidden_cells_are_removed(self):
        doc = parse_document(_positions_doc(_row(*ROW_VALUES, hidden_at=4)))
        assert list(iter_positions_rows(doc)) == [list(ROW_VALUES)]

    def test_same_row_with_and_without_hidden_cell(self):
        with_hidden = parse_document(_positions_doc(_row(*ROW_VALUES, hidden_at=4)))
        without = parse_document(_positions_doc(_row(*ROW_VALUES)))
        assert list(iter_positions_rows(with_hidden)) == list(iter_positions_rows(without))

    def test_section_closes_at_orders(self):
        orders = (
            "<tr><th>Orders</th></tr>"
            + _row("Open Time", "Order", "Symbol", "Type", "Volume", "Price")
            + _row(*ROW_VALUES)
        )
        doc = parse_document(_positions_doc(_row(*ROW_VALUES), trailer=orders))
        assert len(list(iter_positions_rows(doc))) == 1

    def test_rows_before_header_are_ignored(self):
        html = "<table><tr><th>Positions</th></tr>" + _row(*ROW_VALUES) + "</table>"
        assert list(iter_positions_rows(parse_document(html))) == []

    def test_short_rows_are_ignored(self):
        doc = parse_document(_positions_doc(_row("a", "b", "c", "d")))
        assert list(iter_positions_rows(doc)) == []

    def test_no_section(self):
        doc = parse_document("<table>" + _row(*ROW_VALUES) + "</table>")
        assert list(iter_positions_rows(doc)) == []
