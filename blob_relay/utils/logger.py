"""
Logging configuration and utilities for blob-relay.

This module provides logging setup, custom formatters, and logging utilities
to ensure consistent and readable logging across the package.
"""

import logging
from typing import Optional

# ============================================================================
# Logging Configuration Constants
# ============================================================================

# Default width for log message wrapping
DEFAULT_LOG_WIDTH = 120

# Default log line format
DEFAULT_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

# Third-party loggers that are noisy below WARNING
THIRD_PARTY_LOGGERS = ("boto3", "botocore", "s3transfer", "urllib3", "paramiko")

# ============================================================================
# Custom Formatters
# ============================================================================


class WrappingFormatter(logging.Formatter):
    """
    Custom formatter that wraps long log messages for better readability.

    This formatter extends the standard logging formatter to handle
    long messages by wrapping them at a specified width.
    """

    def __init__(
        self, fmt: Optional[str] = None, datefmt: Optional[str] = None, width: int = DEFAULT_LOG_WIDTH
    ) -> None:
        """
        Initialize the wrapping formatter.

        Args:
            fmt: Format string for log messages
            datefmt: Date format string
            width: Maximum width for log message wrapping
        """
        super().__init__(fmt, datefmt)
        self.width = width

    def format(self, record: logging.LogRecord) -> str:
        """
        Format the log record with line wrapping.

        Tracebacks are kept verbatim; only the message lines are wrapped.

        Args:
            record: Log record to format

        Returns:
            Formatted log message with wrapping
        """
        formatted = super().format(record)
        if len(formatted) <= self.width or "\n" in formatted:
            return formatted

        lines = []
        current_line = ""
        for word in formatted.split():
            if len(current_line + " " + word) <= self.width:
                current_line += (" " + word) if current_line else word
            else:
                if current_line:
                    lines.append(current_line)
                current_line = word

        if current_line:
            lines.append(current_line)

        return "\n".join(lines)


# ============================================================================
# Logging Setup Functions
# ============================================================================


def setup_logging(verbosity: int = 0, use_wrapping: bool = False) -> None:
    """
    Setup logging configuration with multi-level verbosity.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG, 3+=DEBUG with boto/paramiko logs)
        use_wrapping: If True, use wrapping formatter for long messages

    Verbosity Levels:
        0 (default): WARNING - Only warnings, failed objects and errors
        1 (-d):      INFO - Per-object progress and pass summaries
        2 (-dd):     DEBUG - Poll counts, tracebacks and detailed information
        3+ (-ddd):   DEBUG - Maximum verbosity including storage and SSH client logs

    Example:
        >>> from blob_relay.utils.logger import setup_logging
        >>> setup_logging(1)  # INFO level
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    if use_wrapping:
        formatter = WrappingFormatter(fmt=DEFAULT_LOG_FORMAT, width=DEFAULT_LOG_WIDTH)
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)

        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.addHandler(handler)
        root_logger.setLevel(level)
    else:
        logging.basicConfig(level=level, format=DEFAULT_LOG_FORMAT)

    # botocore and paramiko log every request/packet at DEBUG
    third_party_level = logging.DEBUG if verbosity >= 3 else logging.WARNING
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)


__all__ = [
    "WrappingFormatter",
    "setup_logging",
]
