"""Structured logging utilities for callergate.

Every module obtains its logger through get_logger(__name__) and logs events
with key/value context. Output goes to stdout, JSON by default.
"""

import logging
import sys
import time
from typing import ContextManager, Optional

import structlog
from structlog.types import EventDict, Processor


def add_timestamp(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add a UNIX timestamp to log entries."""
    event_dict["timestamp"] = time.time()
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = True,
    cache_logger: bool = True,
) -> None:
    """Configure structured logging for the package.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON format. If False, use console format.
        cache_logger: Cache bound loggers on first use. Tests turn this off so
            that structlog.testing.capture_logs() sees every event.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_timestamp,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=cache_logger,
    )


def get_logger(name: str = "callergate") -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def caller_context(package: Optional[str], uid: Optional[int]) -> ContextManager[None]:
    """Bind the caller being checked to every log line inside the with-block.

    Values the host had bound to caller_package / caller_uid before the block
    are restored on exit.
    """
    return structlog.contextvars.bound_contextvars(caller_package=package, caller_uid=uid)


# Initialize logging with sensible defaults
# This is reconfigured by callergate.validator based on the loaded config
configure_logging()
