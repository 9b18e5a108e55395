"""Diagnostic logging for wiggum.

Logs always go to stderr through rich, never to stdout, so they cannot
corrupt the single JSON result the loop harness parses in --json mode.
State transitions are logged at DEBUG and stop-condition triggers at
WARNING, so `-q` still shows why a loop was blocked.
"""

import logging
import sys
from enum import IntEnum
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler


class LogLevel(IntEnum):
    """Root log level for each verbosity setting."""

    QUIET = logging.WARNING
    NORMAL = logging.INFO
    VERBOSE = logging.DEBUG


def configure_logging(
    verbosity: int = 0,
    quiet: bool = False,
    no_color: bool = False,
    stream: TextIO = sys.stderr,
) -> Console:
    """Install the stderr log handler and build the stdout console.

    Args:
        verbosity: Number of -v flags. One shows transitions, two adds
            timestamps and source locations.
        quiet: Only warnings and errors. Takes precedence over verbosity.
        no_color: Disable color on both consoles.
        stream: Destination for log records.

    Returns:
        Console for command output on stdout.
    """
    if quiet:
        level = LogLevel.QUIET
    elif verbosity >= 1:
        level = LogLevel.VERBOSE
    else:
        level = LogLevel.NORMAL

    handler = RichHandler(
        console=Console(file=stream, no_color=no_color),
        show_time=verbosity >= 2,
        show_path=verbosity >= 2,
    )
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )

    return Console(no_color=no_color, highlight=False)
