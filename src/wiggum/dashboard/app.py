"""Full-screen dashboard loop.

Polls the status document every refresh interval and redraws with rich's
Live display on the alternate screen. Keys are read without blocking:
q or Ctrl+C quits, r forces an immediate re-read. The dashboard never
writes the document.
"""

import logging
import os
import select
import sys
import time
from types import TracebackType
from typing import TextIO

from rich.console import Console
from rich.live import Live

from ..constants import KEY_POLL_TIMEOUT, REFRESH_INTERVAL
from ..core.store import StatusStore
from ..models import new_status_document
from .render import render_standby, render_view
from .state import DashboardState

logger = logging.getLogger(__name__)

QUIT_KEYS = ("q", "Q", "\x03")
REFRESH_KEYS = ("r", "R")


class KeyReader:
    """Single-key reader for a terminal in cbreak mode.

    When stdin is not a terminal (or on Windows) read() always times out and
    the dashboard relies on Ctrl+C to exit.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdin
        self._fd: int | None = None
        self._saved: list | None = None

    @property
    def interactive(self) -> bool:
        return self._fd is not None

    def __enter__(self) -> "KeyReader":
        if sys.platform == "win32" or not self.stream.isatty():
            return self
        import termios
        import tty

        fd = self.stream.fileno()
        self._saved = termios.tcgetattr(fd)
        tty.setcbreak(fd)
        self._fd = fd
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._fd is not None and self._saved is not None:
            import termios

            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)
        self._fd = None
        self._saved = None

    def read(self, timeout: float) -> str | None:
        """Wait up to timeout seconds for a key."""
        if self._fd is None:
            time.sleep(timeout)
            return None
        ready, _, _ = select.select([self._fd], [], [], timeout)
        if not ready:
            return None
        data = os.read(self._fd, 1)
        return data.decode(errors="ignore") or None


class Dashboard:
    """Read-only observer of one status document."""

    def __init__(
        self,
        store: StatusStore,
        console: Console | None = None,
        refresh_interval: float = REFRESH_INTERVAL,
    ) -> None:
        self.store = store
        self.console = console or Console()
        self.refresh_interval = refresh_interval
        self.state = DashboardState()
        self.running = False

    def render(self):
        """Render the current view, falling back to standby if the view fails."""
        state = self.state
        try:
            return render_view(state.document, state.frame, state.error)
        except Exception as e:
            logger.debug(f"Render failed, showing standby: {e!r}")
            return render_standby(new_status_document(), state.frame, e)

    def handle_key(self, key: str | None) -> bool:
        """Apply a key press. Returns False when the dashboard should exit."""
        if key is None:
            return True
        if key in QUIT_KEYS:
            return False
        if key in REFRESH_KEYS:
            self.state.refresh(self.store)
        return True

    def run(self) -> None:
        """Run until q or Ctrl+C."""
        self.state.refresh(self.store)
        self.running = True
        logger.debug(f"Dashboard watching {self.store.path} every {self.refresh_interval}s")
        try:
            with (
                KeyReader() as keys,
                Live(
                    self.render(),
                    console=self.console,
                    screen=True,
                    auto_refresh=False,
                    transient=True,
                ) as live,
            ):
                next_tick = time.monotonic() + self.refresh_interval
                while self.running:
                    wait = max(0.0, min(KEY_POLL_TIMEOUT, next_tick - time.monotonic()))
                    key = keys.read(wait)
                    if not self.handle_key(key):
                        break
                    if key is not None:
                        live.update(self.render(), refresh=True)
                    if time.monotonic() >= next_tick:
                        self.state.tick(self.store)
                        live.update(self.render(), refresh=True)
                        next_tick = time.monotonic() + self.refresh_interval
        except KeyboardInterrupt:
            logger.debug("Dashboard interrupted")
        finally:
            self.running = False
