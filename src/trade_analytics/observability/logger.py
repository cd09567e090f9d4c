"""Structured logging for parse runs.

Module code logs through plain ``logging.getLogger(__name__)``;
:func:`setup_logging` routes those records through structlog so each
line is rendered as JSON or console text.  Lines emitted inside
:func:`parse_context` carry the run id and the source file name.
"""

from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import structlog

_run_id: ContextVar[str] = ContextVar("run_id", default="")


def current_run_id() -> str:
    """Run id of the enclosing :func:`parse_context`, or ``""`` outside one."""
    return _run_id.get()


@contextmanager
def parse_context(source: str, run_id: str | None = None) -> Iterator[str]:
    """Tag every log line emitted in the block with *source* and a run id.

    Yields the run id (a fresh UUID4 unless one is given).
    """
    rid = run_id or str(uuid.uuid4())
    token = _run_id.set(rid)
    try:
        with structlog.contextvars.bound_contextvars(source=source):
            yield rid
    finally:
        _run_id.reset(token)


def _add_run_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    rid = _run_id.get()
    if rid:
        event_dict["run_id"] = rid
    return event_dict


def setup_logging(level: str = "INFO", format: str = "console") -> None:
    """Install a single stderr handler on the root logger.

    Args:
        level: DEBUG, INFO, WARNING or ERROR.  Unknown names fall back
            to INFO.
        format: "json" for one object per line, anything else for the
            coloured console renderer.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _add_run_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if format == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)
