"""
Run and watch commands for blob-relay CLI.

``run`` performs a single pass, suitable for an external scheduler.
``watch`` runs passes on a fixed interval until stopped.
"""

import logging
import signal
import sys
import threading
from typing import Any, Optional

import click

from ..config import load_config
from ..exceptions import ConfigurationError
from ..models.config import RelayConfig
from ..reporting import write_report
from ..services.relay_service import RelayService
from ..utils import setup_logging
from ..utils.constants import EXIT_GENERAL_ERROR, EXIT_USER_INTERRUPT
from ..utils.error_handling import log_and_exit


def _load_config_or_exit(config_path: Optional[str]) -> RelayConfig:
    try:
        return load_config(config_path)
    except ConfigurationError as e:
        log_and_exit(f"Configuration error: {e}", EXIT_GENERAL_ERROR)


def _install_stop_handlers(stop_event: threading.Event) -> None:
    """
    Set ``stop_event`` on SIGINT/SIGTERM so the current object finishes cleanly.

    A second signal while already stopping exits immediately.
    """

    def _handler(signum: int, frame: Any) -> None:  # pylint: disable=unused-argument
        if stop_event.is_set():
            logging.warning("Received signal %d again, exiting now", signum)
            sys.exit(EXIT_USER_INTERRUPT)
        logging.warning("Received signal %d, stopping after the current object", signum)
        stop_event.set()

    if threading.current_thread() is threading.main_thread():
        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)


def _exit_if_interrupted(stop_event: threading.Event) -> None:
    if stop_event.is_set():
        click.echo("Operation cancelled by user", err=True)
        sys.exit(EXIT_USER_INTERRUPT)


@click.command()
@click.option(
    "--report",
    type=click.Path(dir_okay=False, writable=True),
    help="Write the pass summary as JSON to this path",
)
@click.pass_context
def run(ctx: click.Context, report: Optional[str]) -> None:
    """Run a single relay pass over the source container."""
    setup_logging(ctx.obj["debug"])
    config = _load_config_or_exit(ctx.obj["config"])

    stop_event = threading.Event()
    _install_stop_handlers(stop_event)
    service = RelayService.from_config(config, stop_event=stop_event)
    summary = service.run_pass()

    if report:
        try:
            write_report(summary, report)
        except OSError as e:
            log_and_exit(f"Failed to write report to {report}: {e}", EXIT_GENERAL_ERROR)

    click.echo(f"{summary.succeeded} succeeded, {summary.skipped} skipped, {summary.failed} failed")
    _exit_if_interrupted(stop_event)
    if summary.has_errors:
        sys.exit(EXIT_GENERAL_ERROR)


@click.command()
@click.option(
    "--interval",
    type=click.FloatRange(min=0, min_open=True),
    help="Seconds between passes (default: SCHEDULE_INTERVAL or 60)",
)
@click.option(
    "--max-passes",
    type=click.IntRange(min=1),
    help="Stop after this many passes (default: run until interrupted)",
)
@click.pass_context
def watch(ctx: click.Context, interval: Optional[float], max_passes: Optional[int]) -> None:
    """Run relay passes on a fixed interval until interrupted."""
    setup_logging(ctx.obj["debug"])
    config = _load_config_or_exit(ctx.obj["config"])
    interval = interval or config.schedule_interval

    stop_event = threading.Event()
    _install_stop_handlers(stop_event)
    service = RelayService.from_config(config, stop_event=stop_event)

    passes = 0
    logging.info("Watching %s every %.1fs", config.source_container, interval)
    while not stop_event.is_set():
        summary = service.run_pass()
        passes += 1
        click.echo(
            f"Pass {passes}: {summary.succeeded} succeeded, {summary.skipped} skipped, {summary.failed} failed"
        )
        if max_passes is not None and passes >= max_passes:
            break
        stop_event.wait(interval)

    logging.info("Stopped after %d pass(es)", passes)
    _exit_if_interrupted(stop_event)


__all__ = ["run", "watch"]
