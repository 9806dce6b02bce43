"""
Logging utilities for consistent operation and object logging.

This module provides standardized logging functions to eliminate
code duplication and ensure consistent log formatting.
"""

import logging
from typing import List, Optional

from .constants import SEPARATOR_WIDTH


def log_operation_start(operation: str, **details) -> None:
    """
    Log the start of an operation with standardized format.

    Args:
        operation: Description of the operation
        **details: Additional details to log as key=value pairs
    """
    if details:
        detail_str = ", ".join(f"{k}={v}" for k, v in details.items())
        logging.info("Starting %s (%s)", operation, detail_str)
    else:
        logging.info("Starting %s", operation)


def log_operation_complete(operation: str, **details) -> None:
    """
    Log the completion of an operation with standardized format.

    Args:
        operation: Description of the operation
        **details: Additional details to log as key=value pairs
    """
    if details:
        detail_str = ", ".join(f"{k}={v}" for k, v in details.items())
        logging.info("Completed %s (%s)", operation, detail_str)
    else:
        logging.info("Completed %s", operation)


def format_count_with_unit(count: int, unit: str, *, singular: Optional[str] = None) -> str:
    """
    Format a count with proper pluralization.

    Args:
        count: Number to format
        unit: Unit name (will be pluralized if count != 1)
        singular: Optional explicit singular form (defaults to unit)

    Returns:
        Formatted string like "5 objects" or "1 object"

    Examples:
        >>> format_count_with_unit(1, "object")
        '1 object'
        >>> format_count_with_unit(5, "object")
        '5 objects'
    """
    if count == 1:
        return f"{count} {singular or unit}"

    plural = unit if unit.endswith("s") else f"{unit}s"
    return f"{count} {plural}"


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format.

    Examples:
        >>> format_file_size(0)
        '0 B'
        >>> format_file_size(1536)
        '1.5 KB'
    """
    if size_bytes == 0:
        return "0 B"

    size_names = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    size_float = float(size_bytes)

    while size_float >= 1024 and i < len(size_names) - 1:
        size_float /= 1024.0
        i += 1

    return f"{size_float:.1f} {size_names[i]}"


def log_summary_separator(title: Optional[str] = None, width: int = SEPARATOR_WIDTH) -> None:
    """
    Log a visual separator line with optional title.

    Args:
        title: Optional title to display in separator
        width: Width of separator line
    """
    logging.info("=" * width)
    if title:
        logging.info(title)
        logging.info("=" * width)


def log_list_items(items: List[str], prefix: str = "  - ", level: int = logging.INFO) -> None:
    """
    Log a list of items with consistent formatting.

    Args:
        items: List of items to log
        prefix: Prefix for each item
        level: Logging level to use
    """
    for item in items:
        logging.log(level, "%s%s", prefix, item)


__all__ = [
    "log_operation_start",
    "log_operation_complete",
    "format_count_with_unit",
    "format_file_size",
    "log_summary_separator",
    "log_list_items",
]
