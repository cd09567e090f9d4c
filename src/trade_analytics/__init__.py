"""Broker trade-history parsing and performance analytics."""

__version__ = "0.1.0"
