"""Account metadata harvested alongside the trade collection."""

from __future__ import annotations

from pydantic import BaseModel


class AccountInfo(BaseModel):
    """Account details scraped from a broker report header.

    Every field is optional: delimited exports carry none of them and
    markup reports only sometimes do.
    """

    model_config = {"frozen": True}

    account_number: str | None = None
    name: str | None = None
    currency: str | None = None  # ISO code, e.g. "GBP"
