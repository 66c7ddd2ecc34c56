"""
Structured Logging Setup

Configures diagnostic logging and the append-only audit log written by the
credential helper.
"""

import sys
import logging
import structlog
from typing import Optional, TextIO
from pathlib import Path

from .errors import ConfigurationError


AUDIT_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def setup_logging(level: str = "WARNING", verbose: bool = False) -> None:
    """
    Setup structured diagnostic logging.

    Diagnostics always go to stderr; stdout is reserved for the replies
    read by the credential host.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        verbose: Render human readable console output instead of JSON
    """
    log_level = getattr(logging, level.upper(), None)
    if not isinstance(log_level, int):
        raise ConfigurationError(f"Unknown log level: {level}", setting="log_level", value=level)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level
    )
    logging.getLogger().setLevel(log_level)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if verbose:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structured logger
    """
    return structlog.get_logger(name)


def render_audit_line(logger, method_name, event_dict) -> str:
    """Render an audit event as ``<timestamp>: <message>``."""
    return f"{event_dict['timestamp']}: {event_dict['event']}"


class AuditLog:
    """
    Append-only audit trail of the steps taken by a credential helper.

    Each entry is one line prefixed with an RFC 3339 UTC timestamp. The
    sink is owned by the caller; writing to it is best effort and never
    raises.
    """

    def __init__(self, sink: TextIO):
        self.logger = get_logger(__name__)
        self._write_failed = False
        self._audit = structlog.wrap_logger(
            structlog.PrintLogger(file=sink),
            processors=[
                structlog.processors.TimeStamper(fmt=AUDIT_TIMESTAMP_FORMAT, utc=True),
                render_audit_line,
            ],
            wrapper_class=structlog.BoundLogger,
            context_class=dict,
            cache_logger_on_first_use=False,
        )

    def write(self, message: str) -> None:
        """
        Append a single entry to the audit sink.

        Args:
            message: Free-form entry text
        """
        try:
            self._audit.msg(message)
        except (OSError, ValueError) as e:
            # Report the first failure only; later entries are dropped quietly.
            if not self._write_failed:
                self.logger.warning("Audit log write failed", error=str(e))
            self._write_failed = True


def open_audit_sink(log_file: str) -> TextIO:
    """
    Open the audit log file for appending, creating it if needed.

    Args:
        log_file: Path of the audit log file

    Returns:
        Text stream positioned at the end of the file

    Raises:
        ConfigurationError: If the file cannot be opened
    """
    try:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        return open(log_path, 'a', encoding='utf-8')
    except OSError as e:
        raise ConfigurationError(
            f"Failed to open audit log: {e}",
            setting="log_file",
            value=log_file
        )
