"""Byte-encoding detection for broker exports.

MetaTrader HTML reports are frequently written as UTF-16 little-endian,
sometimes without a byte-order mark.  Decoding such a file as UTF-8 silently
corrupts every character, so markup input goes through a three-tier policy:

1. BOM: ``FF FE`` is UTF-16-LE, ``FE FF`` is UTF-16-BE.
2. BOM-less probe: sample the first ``probe_bytes`` bytes in steps of two
   and count "printable ASCII byte followed by a zero byte".  More than
   ``min_hits`` matches means UTF-16-LE.
3. Otherwise UTF-8.

Delimited (CSV) input skips detection and is decoded as UTF-8.
"""

from __future__ import annotations

import logging

from trade_analytics.core.enums import TextEncoding

logger = logging.getLogger(__name__)

_BOM_LE = b"\xff\xfe"
_BOM_BE = b"\xfe\xff"


def count_utf16le_hits(data: bytes, probe_bytes: int = 100) -> int:
    """Count ``[printable ASCII][0x00]`` pairs at even offsets."""
    hits = 0
    for i in range(0, min(probe_bytes, len(data) - 1), 2):
        if 0x20 <= data[i] <= 0x7E and data[i + 1] == 0x00:
            hits += 1
    return hits


def detect_encoding(
    data: bytes,
    *,
    markup: bool = True,
    probe_bytes: int = 100,
    min_hits: int = 20,
) -> TextEncoding:
    """Choose a text encoding for *data*.

    Parameters
    ----------
    data : bytes
        Raw file contents.
    markup : bool
        Whether the source is an HTML report.  Non-markup input is always
        treated as UTF-8.
    """
    if not markup:
        return TextEncoding.UTF8

    if data.startswith(_BOM_LE):
        logger.debug("Detected UTF-16 LE BOM")
        return TextEncoding.UTF16_LE
    if data.startswith(_BOM_BE):
        logger.debug("Detected UTF-16 BE BOM")
        return TextEncoding.UTF16_BE

    hits = count_utf16le_hits(data, probe_bytes)
    if hits > min_hits:
        logger.debug("Detected UTF-16 LE pattern without BOM (%d hits)", hits)
        return TextEncoding.UTF16_LE

    return TextEncoding.UTF8


def decode_bytes(
    data: bytes,
    *,
    markup: bool = True,
    probe_bytes: int = 100,
    min_hits: int = 20,
) -> tuple[str, TextEncoding]:
    """Decode *data* with the detected encoding.

    A leading byte-order mark is dropped from the text and malformed
    sequences are replaced rather than raising.
    """
    encoding = detect_encoding(
        data, markup=markup, probe_bytes=probe_bytes, min_hits=min_hits
    )
    if encoding is TextEncoding.UTF8:
        text = data.decode("utf-8-sig", errors="replace")
    else:
        text = data.decode(encoding.value, errors="replace")
        if text.startswith("\ufeff"):
            text = text[1:]
    return text, encoding
