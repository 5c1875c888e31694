"""Logging configuration for tmplsync CLI."""

import logging
import sys
from enum import IntEnum
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler


class LogLevel(IntEnum):
    """Log level enumeration."""

    QUIET = logging.WARNING
    NORMAL = logging.INFO
    VERBOSE = logging.DEBUG


# Remote job log levels mapped onto logging levels
JOB_LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def job_log_level(level: str) -> int:
    """Map a remote job log level name to a logging level."""
    return JOB_LOG_LEVELS.get(level.lower(), logging.INFO)


def configure_logging(
    verbosity: int = 0,
    quiet: bool = False,
    no_color: bool = False,
    stream: TextIO | None = None,
    debug: bool = False,
) -> Console:
    """Configure logging based on CLI options.

    Args:
        verbosity: Number of -v flags (0=normal, 1=verbose, 2+=debug)
        quiet: Suppress non-error output (takes precedence over debug/verbosity)
        no_color: Disable colored output
        stream: Output stream for logs (defaults to the current sys.stderr)
        debug: Enable debug logging (equivalent to -vv, ignored if quiet is set)

    Returns:
        Configured Rich console for output

    Note:
        Flag precedence: quiet > debug > verbosity. Import job logs are
        emitted at INFO, so they are visible by default and hidden by -q.
    """
    if quiet:
        level = LogLevel.QUIET
    elif debug or verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = LogLevel.VERBOSE
    else:
        level = LogLevel.NORMAL

    console = Console(
        file=stream or sys.stderr,
        force_terminal=not no_color,
        no_color=no_color,
    )

    handler = RichHandler(
        console=console,
        show_time=debug or verbosity >= 2,
        show_path=debug or verbosity >= 2,
    )

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )

    # httpx logs every request at INFO
    httpx_level = logging.DEBUG if level == logging.DEBUG else logging.WARNING
    logging.getLogger("httpx").setLevel(httpx_level)

    return console
