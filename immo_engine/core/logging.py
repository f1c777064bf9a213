"""Logging configuration for immo_engine.

Provides structured logging using structlog with JSON output for production
and plain console output for development. The engine is embedded in a host
application that owns the process: importing it never touches global logging
state, and ``configure_logging`` is only run when the host asks for it.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

# Set once the host has called configure_logging
_configured: bool = False
_default_logger: structlog.BoundLogger | None = None


def configure_logging(
    level: str | None = None,
    json_output: bool | None = None,
) -> structlog.BoundLogger:
    """Configure structured logging for the engine.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to settings.log_level.
        json_output: If True, output JSON format. Defaults to settings.json_logs.

    Returns:
        Configured logger instance.
    """
    global _configured, _default_logger

    # Skip if already configured (idempotent)
    if _configured:
        return structlog.get_logger()

    from immo_engine.core.settings import get_settings

    settings = get_settings()
    log_level = (level or settings.log_level).upper()
    numeric_level = getattr(logging, log_level, logging.INFO)
    if json_output is None:
        json_output = settings.json_logs

    # 1. Configure Standard Library Logging (Handlers)
    # basicConfig is a no-op when the host already installed root handlers
    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger("immo_engine").setLevel(numeric_level)

    # 2. Configure Structlog Processors
    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    # 3. Configure Structlog to wrap Stdlib
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _configured = True
    _default_logger = structlog.get_logger()
    return _default_logger


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger instance, optionally bound to a specific name.

    Nothing is configured here. The returned proxy resolves the structlog
    configuration on first use, so module-level loggers pick up a later
    ``configure_logging`` call (or the host's own structlog setup).

    Args:
        name: Optional logger name (usually module name).

    Returns:
        Bound logger instance.
    """
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()
