"""
structlog configuration. Library modules only call structlog.get_logger();
entry points (CLI) call init_logging() once.
"""
# @file purpose: Configure structlog on top of stdlib logging.

from __future__ import annotations

import logging
import os
import sys

import structlog

from .settings import settings


def _supports_colour() -> bool:
    if os.getenv("NO_COLOR"):
        return False
    return sys.stderr.isatty()


def init_logging(level: str | None = None, *, json_output: bool | None = None) -> None:
    """Configure stdlib logging + structlog. Logs go to stderr so stdout stays clean."""
    level_name = (level or settings.log_level).upper()
    as_json = settings.log_json if json_output is None else json_output

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level_name, logging.INFO),
        force=True,
    )

    renderer: structlog.types.Processor
    if as_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=_supports_colour())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
