"""ID and timestamp factories.

Tickets
-------
Broker tickets are opaque strings taken verbatim from the export.  When an
export carries no ticket column, one is synthesized from the current epoch
milliseconds plus a random base-36 suffix.  Uniqueness is best-effort.

Timestamp Rule
--------------
All timestamps are ``datetime`` with ``tzinfo=timezone.utc``, never naive.
"""

from __future__ import annotations

import random
import string
from datetime import datetime, timezone

from .clock import IClock

_BASE36 = string.digits + string.ascii_lowercase


def synthetic_ticket(clock: IClock, *, suffix_length: int = 9) -> str:
    """Build a placeholder ticket for rows that carry none."""
    suffix = "".join(random.choices(_BASE36, k=suffix_length))
    return f"{clock.now_ms()}{suffix}"


def ensure_utc(ts: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)
