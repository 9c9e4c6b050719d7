"""
Structured logging configuration using structlog wrapping stdlib.

Console output for interactive runs, JSON when BUSYLIGHT_LOG_FORMAT=json.
When a log file is given, the same records are appended to it as well.

Usage:
    from busylight.logging_config import setup_logging
    setup_logging(log_file="~/.busylight/busylightd.log")
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import structlog


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
    log_file: str | Path | None = None,
) -> None:
    if level is None:
        level = os.environ.get("BUSYLIGHT_LOG_LEVEL", "INFO")

    if json_output is None:
        json_output = os.environ.get("BUSYLIGHT_LOG_FORMAT", "").lower() == "json"

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, mode="a"))

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(numeric_level)


def set_level(level: str) -> None:
    """Change the root log level after setup (used on config reload)."""
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))


__all__ = ["set_level", "setup_logging"]
