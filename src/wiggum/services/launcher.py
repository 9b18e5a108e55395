"""Dashboard auto-launch.

`wiggum init` opens the dashboard beside the loop when it runs inside tmux.
Outside tmux, or when WIGGUM_NO_DASHBOARD is set, nothing is launched and
the operator can start `wiggum dashboard` by hand.
"""

import logging
import os
import shutil
import subprocess
from pathlib import Path

from ..constants import LAUNCH_TIMEOUT, NO_DASHBOARD_ENV

logger = logging.getLogger(__name__)


def auto_launch_disabled() -> bool:
    """Return True if the environment disables dashboard auto-launch."""
    return bool(os.environ.get(NO_DASHBOARD_ENV))


def launch_dashboard(root: Path) -> bool:
    """Open `wiggum dashboard` in a new tmux pane.

    Returns:
        True if a pane was opened
    """
    if auto_launch_disabled():
        logger.debug(f"{NO_DASHBOARD_ENV} set; not launching dashboard")
        return False
    if not os.environ.get("TMUX") or shutil.which("tmux") is None:
        logger.debug("Not inside tmux; not launching dashboard")
        return False

    cmd = ["tmux", "split-window", "-h", "-d", "-c", str(root), "wiggum dashboard"]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=LAUNCH_TIMEOUT)
    except subprocess.TimeoutExpired:
        logger.warning("tmux did not respond; dashboard not launched")
        return False
    if result.returncode != 0:
        logger.warning(f"Could not open dashboard pane: {result.stderr.strip()}")
        return False
    return True
