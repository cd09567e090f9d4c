"""Runtime settings for parsing, statistics and logging.

Values come from an optional TOML file, then explicit overrides, then
``TRADE_ANALYTICS_*`` environment variables for anything still unset
(nested keys use ``__``, e.g. ``TRADE_ANALYTICS_STATS__TOP_SYMBOLS``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from .errors import ConfigError


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class ParserConfig(BaseModel):
    min_lot: float = 0.01  # Volume used when the cell is blank or garbage
    utf16_probe_bytes: int = 100  # Bytes sampled by the BOM-less UTF-16 probe
    utf16_min_hits: int = 20  # Probe hits must exceed this
    min_delimited_cells: int = 5  # Shorter CSV rows are ignored
    min_markup_cells: int = 4  # Shorter table rows are ignored

    @field_validator("min_lot")
    @classmethod
    def _positive_lot(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("min_lot must be positive")
        return v


class StatsConfig(BaseModel):
    max_histogram_bins: int = 20
    top_symbols: int = 10


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Everything the CLI and the parser read at start-up."""

    default_currency: str = "USD"  # Used when a report names none

    parser: ParserConfig = Field(default_factory=ParserConfig)
    stats: StatsConfig = Field(default_factory=StatsConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "TRADE_ANALYTICS_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Build :class:`Settings`.

    Args:
        config_path: TOML file; a path that does not exist is ignored.
        overrides: Top-level keys replacing the file's sections.

    Raises:
        ConfigError: the file is not valid TOML or fails validation.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            try:
                with open(path, "rb") as f:
                    data = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    if overrides:
        data.update(overrides)

    try:
        return Settings(**data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
