"""
Reporting utilities for relay passes.

This module logs pass summaries and writes JSON reports.
"""

import json
import logging
from pathlib import Path

from .models.results import PassSummary
from .utils.logging_utils import format_count_with_unit, log_list_items, log_summary_separator


def log_pass_summary(summary: PassSummary) -> None:
    """
    Log a pass summary.

    The one-line summary is logged at WARNING when anything failed so it is
    visible at the default verbosity; a clean pass logs at INFO.

    Args:
        summary: Finished pass summary
    """
    if summary.overlapped:
        logging.warning("Pass for %s skipped: a previous pass is still running", summary.pipeline_name)
        return

    level = logging.WARNING if summary.has_errors else logging.INFO
    duration = f"{summary.duration:.1f}s" if summary.duration is not None else "n/a"
    logging.log(
        level,
        "Pass complete: %d succeeded, %d skipped, %d failed (%s seen, %s)",
        summary.succeeded,
        summary.skipped,
        summary.failed,
        format_count_with_unit(summary.total, "object"),
        duration,
    )

    if summary.cancelled:
        logging.warning("Pass was cancelled before all objects were processed")
    if summary.listing_error:
        logging.error("Listing the source container failed: %s", summary.listing_error)

    if summary.failures:
        lines = []
        for result in summary.failures:
            stage = result.stage.value if result.stage else "unknown"
            lines.append(f"{result.name} [{stage}] {result.error_kind}: {result.error_message}")
        log_summary_separator("Failed objects")
        log_list_items(lines, level=logging.WARNING)


def write_report(summary: PassSummary, report_path: str) -> Path:
    """
    Write a pass summary to a JSON file.

    Args:
        summary: Pass summary to write
        report_path: Destination file path; parent directories are created

    Returns:
        Path of the written report
    """
    path = Path(report_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(summary.to_json_dict(), f, indent=2)
    logging.info("Wrote pass report to %s", path)
    return path


__all__ = ["log_pass_summary", "write_report"]
