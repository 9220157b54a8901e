"""
Centralized logging configuration for the analysis client.

This module provides standardized logging configuration using structlog
for all components. All logging throughout the client should use this
configuration to ensure consistent formatting and structured logging.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger

QUIET_LIBRARY_LOGGERS = ("httpx", "httpcore")


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire client.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    # httpx logs every request at INFO
    for name in QUIET_LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_fetch_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for dataset fetch outcomes.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger bound to the fetch subsystem
    """
    return get_logger(name).bind(subsystem="fetch")


def get_state_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for loading state machine transitions.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger bound to the state machine subsystem
    """
    return get_logger(name).bind(
        subsystem="state_machine",
        audit_trail=True
    )


def log_state_transition(
    logger: FilteringBoundLogger,
    machine: str,
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a state transition with standardized format.

    Args:
        logger: Structlog logger instance
        machine: Name of the state machine transitioning
        from_state: Current state
        to_state: Target state
        trigger: What triggered the transition
        context: Additional context data
    """
    bound_logger = logger.bind(
        machine=machine,
        from_state=from_state,
        to_state=to_state,
        trigger=trigger
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("State transition")


def log_fetch_outcome(
    logger: FilteringBoundLogger,
    kind: str,
    generation: int,
    outcome: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log the outcome of a dataset request with standardized format.

    Successful loads log at info, failures at warning and discarded stale
    responses at debug.

    Args:
        logger: Structlog logger instance
        kind: Dataset kind the request belongs to
        generation: Generation number the request was issued with
        outcome: One of "loaded", "failed" or "stale"
        context: Additional context data
    """
    bound_logger = logger.bind(
        dataset_kind=kind,
        generation=generation,
        outcome=outcome
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if outcome == "failed":
        bound_logger.warning("Dataset fetch failed")
    elif outcome == "stale":
        bound_logger.debug("Discarded stale dataset response")
    else:
        bound_logger.info("Dataset fetch completed")
