"""
Structured logging for the object mapper.

The mapper never configures logging on import. Until the host application
calls ``setup_logging`` (or configures structlog itself), mapper loggers route
through the standard library and stay silent unless a handler is installed.
"""

import logging
import sys
from typing import Any, Dict, List, Optional, cast

import structlog
from structlog.types import FilteringBoundLogger

TRUNCATION_MARKER = "...[TRUNCATED]"


class ValueTruncatingProcessor:
    """
    Structlog processor that shortens long values.

    Mapped payloads can be arbitrarily large; only a bounded rendering of
    each value reaches the log.
    """

    PRESERVED_FIELDS = {"event", "level", "timestamp", "logger"}

    def __init__(self, max_value_length: int = 200):
        self.max_value_length = max_value_length

    def __call__(
        self, logger: Any, method_name: str, event_dict: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Truncate values longer than ``max_value_length``.

        Args:
            logger: Logger instance
            method_name: Log method name (info, warning, etc.)
            event_dict: Event dictionary to process

        Returns:
            Event dictionary with bounded values
        """
        for key, value in event_dict.items():
            if key in self.PRESERVED_FIELDS or value is None:
                continue
            if isinstance(value, (bool, int, float)):
                continue
            text = value if isinstance(value, str) else repr(value)
            if len(text) > self.max_value_length:
                event_dict[key] = text[: self.max_value_length] + TRUNCATION_MARKER
        return event_dict


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    max_value_length: int = 200,
    log_file: Optional[str] = None,
) -> None:
    """
    Configure structlog and the standard library logging backend.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format (json, console)
        max_value_length: Maximum rendered length of a logged value
        log_file: Optional log file path
    """
    level = getattr(logging, log_level.upper())

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        ValueTruncatingProcessor(max_value_length),
    ]

    if log_format == "json":
        processors.extend(
            [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
        )
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,  # type: ignore[arg-type]
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter("%(message)s"))

    logging.basicConfig(level=level, handlers=handlers, format="%(message)s")


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a structured logger.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger, or a stdlib-backed one when structlog has
        not been configured by the host application
    """
    if structlog.is_configured():
        return cast(FilteringBoundLogger, structlog.get_logger(name))

    return cast(
        FilteringBoundLogger,
        structlog.wrap_logger(
            logging.getLogger(name),
            processors=[
                structlog.stdlib.filter_by_level,
                ValueTruncatingProcessor(),
                structlog.processors.KeyValueRenderer(key_order=["event"]),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
        ),
    )
