"""Logging configuration module."""

from logging import Handler, Logger, StreamHandler, getLevelName, getLogger
from typing import Any, cast

import structlog
from structlog import dev, processors, stdlib
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import BoundLogger


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structured logging for the importer.

    Args:
        level: Name of the minimum log level, e.g. ``"INFO"``
        json_logs: Render one JSON object per line instead of console output
    """
    numeric_level = getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"unknown log level: {level}")

    root_logger: Logger = getLogger()
    root_logger.setLevel(numeric_level)

    handler: Handler = StreamHandler()
    handler.setLevel(numeric_level)

    shared_processors = [
        stdlib.add_logger_name,
        stdlib.add_log_level,
        stdlib.PositionalArgumentsFormatter(),
        TimeStamper(fmt="iso", utc=True),
    ]

    structlog.configure(
        processors=[
            stdlib.filter_by_level,
            *shared_processors,
            stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=stdlib.LoggerFactory(),
        wrapper_class=stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if json_logs:
        render_chain = [processors.format_exc_info, JSONRenderer()]
    else:
        render_chain = [dev.ConsoleRenderer(colors=False)]

    formatter = stdlib.ProcessorFormatter(
        processors=[stdlib.ProcessorFormatter.remove_processors_meta, *render_chain],
        foreign_pre_chain=shared_processors,
    )
    handler.setFormatter(formatter)

    # Clear existing handlers to prevent duplicates
    root_logger.handlers = []
    root_logger.addHandler(handler)


def get_logger(**initial_values: Any) -> BoundLogger:
    """Get a logger that resolves its configuration on first use.

    Args:
        initial_values: Context bound to every event of this logger

    Returns:
        A structured logger instance.
    """
    return cast(BoundLogger, structlog.get_logger("entry_importer", **initial_values))
