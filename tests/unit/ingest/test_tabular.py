"""Tests for delimited-text tokenization."""

import pytest

from trade_analytics.ingest.tabular import iter_rows, split_lines, tokenize_line


class TestTokenizeLine:
    @pytest.mark.parametrize(
        "line",
        ["EURUSD,buy,0.10", "EURUSD;buy;0.10", "EURUSD\tbuy\t0.10", "EURUSD,buy;0.10"],
    )
    def test_any_delimiter(self, line):
        assert tokenize_line(line) == ["EURUSD", "buy", "0.10"]

    def test_quoted_delimiter_is_literal(self):
        assert tokenize_line('EURUSD,"50,00",buy') == ["EURUSD", "50,00", "buy"]

    def test_quotes_are_removed(self):
        assert tokenize_line('"EURUSD","buy"') == ["EURUSD", "buy"]

    def test_cells_are_stripped(self):
        assert tokenize_line("  EURUSD ,  buy  ") == ["EURUSD", "buy"]

    def test_trailing_delimiter_yields_empty_cell(self):
        assert tokenize_line("a,b,") == ["a", "b", ""]

    def test_empty_fields_kept(self):
        assert tokenize_line("a,,c") == ["a", "", "c"]

    def test_carriage_return_is_stripped(self):
        assert tokenize_line("a,b\r") == ["a", "b"]

    def test_unterminated_quote_swallows_rest(self):
        assert tokenize_line('a,"b,c') == ["a", "b,c"]


class TestSplitLines:
    def test_blank_lines_dropped(self):
        assert split_lines("a\n\n  \nb\n") == ["a", "b"]

    def test_crlf(self):
        lines = split_lines("a,b\r\nc,d\r\n")
        assert [tokenize_line(line) for line in lines] == [["a", "b"], ["c", "d"]]

    def test_iter_rows(self):
        assert list(iter_rows("x;y\n\n1;2")) == [["x", "y"], ["1", "2"]]
