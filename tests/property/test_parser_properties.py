"""Property tests: extraction never raises on odd input and keeps cell text."""

from hypothesis import given, settings, strategies as st

from trade_analytics.core.enums import TextEncoding
from trade_analytics.ingest.encoding import decode_bytes
from trade_analytics.ingest.markup import parse_document
from trade_analytics.ingest.normalize import parse_number
from trade_analytics.ingest.tabular import tokenize_line

plain_cell = st.text(
    alphabet=st.characters(exclude_characters=',;\t"\n\r', exclude_categories=("Cs",)),
    max_size=12,
).map(str.strip)


@given(cells=st.lists(plain_cell, min_size=1, max_size=15), delimiter=st.sampled_from([",", ";", "\t"]))
def test_tokenizer_recovers_plain_cells(cells, delimiter):
    assert tokenize_line(delimiter.join(cells)) == cells


@given(cells=st.lists(plain_cell, min_size=1, max_size=8))
def test_quoting_protects_delimiters(cells):
    quoted = ",".join(f'"{c},{c}"' for c in cells)
    assert tokenize_line(quoted) == [f"{c},{c}".strip() for c in cells]


@given(data=st.binary(max_size=400), markup=st.booleans())
def test_decode_never_raises(data, markup):
    text, encoding = decode_bytes(data, markup=markup)
    assert isinstance(text, str)
    assert isinstance(encoding, TextEncoding)


# Tag soup without "<!" declarations
@given(text=st.text(alphabet="<>/=\"' &#;trdhablex1", max_size=300))
@settings(max_examples=100)
def test_markup_walker_never_raises(text):
    doc = parse_document(text)
    assert all(row.table is None or row.table < doc.table_count for row in doc.rows)


@given(cents=st.integers(min_value=-10**9, max_value=10**9))
def test_parse_number_reads_formatted_amounts(cents):
    amount = cents / 100
    assert parse_number(f"{amount:.2f}").value == round(amount, 2)
    # Decimal comma with space-grouped thousands
    grouped = f"{amount:,.2f}".replace(",", " ").replace(".", ",")
    assert parse_number(grouped).value == round(amount, 2)
