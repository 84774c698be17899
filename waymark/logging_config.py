"""Logging setup driven by ObservabilityConfig.

Components log through ``logging.getLogger(__name__)`` and pass context
in ``extra``. In structured mode the records are rendered by structlog
as one JSON object per line, extra fields included; the text format
drops them.
"""

from __future__ import annotations

import logging

import structlog

from .config import ObservabilityConfig

_SHARED_PROCESSORS = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.ExtraAdder(),
    structlog.processors.TimeStamper(fmt="iso"),
]


def json_formatter() -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
    )


def configure_logging(config: ObservabilityConfig) -> None:
    """Install a single stream handler on the ``waymark`` logger."""
    handler = logging.StreamHandler()
    if config.structured:
        handler.setFormatter(json_formatter())
    else:
        handler.setFormatter(logging.Formatter(config.format))

    logger = logging.getLogger("waymark")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(config.level.upper())
    logger.propagate = False
