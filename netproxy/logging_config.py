"""
Logging configuration for Netproxy Server.

Provides structured logging setup with JSON output for production and
human-readable console output for interactive use. The server identity is
bound into every event once it is known.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
from structlog.types import EventDict


_server_context: Dict[str, Any] = {}


def add_server_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add the bound server identity to log events.

    Args:
        logger: Logger instance
        method_name: Name of the logging method
        event_dict: Event dictionary to modify

    Returns:
        Event dictionary with server_id when one has been bound
    """
    for key, value in _server_context.items():
        event_dict.setdefault(key, value)
    return event_dict


def bind_server_id(server_id: str) -> None:
    """Attach the proxy server ID to all subsequent log events."""
    _server_context["server_id"] = server_id


def clear_server_context() -> None:
    _server_context.clear()


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    json_format: bool = False,
) -> None:
    """
    Configure structured logging for Netproxy Server.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to log file. If None, logs go to stderr.
        json_format: If True, render events as JSON lines.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)

    processors: list = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_server_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance for a specific module.

    Args:
        name: Logger name (typically __name__ of the module).

    Returns:
        Structured logger instance.
    """
    if name.startswith("netproxy"):
        return structlog.get_logger(name)
    return structlog.get_logger(f"netproxy.{name}")


# Convenience functions for common logging patterns

def log_validation_failure(
    logger: structlog.stdlib.BoundLogger,
    rule: str,
    reason: str,
    **kwargs: Any,
) -> None:
    """
    Log a rejected server configuration.

    Args:
        logger: Logger instance
        rule: Name of the validation rule that failed
        reason: Human-readable error text
        **kwargs: Additional context to log
    """
    log_data: Dict[str, Any] = {
        "event_type": "configuration_validation_failure",
        "rule": rule,
        "reason": reason,
    }

    log_data.update(kwargs)

    logger.error("configuration_validation_failure", **log_data)


def log_deprecated_flag(
    logger: structlog.stdlib.BoundLogger,
    flag: str,
    message: str,
) -> None:
    """
    Log use of a command-line flag that is accepted but no longer has effect.

    Args:
        logger: Logger instance
        flag: Flag name without leading dashes
        message: Deprecation notice shown to the operator
    """
    logger.warning(
        "deprecated_flag",
        event_type="deprecated_flag",
        flag=flag,
        message=message,
    )
