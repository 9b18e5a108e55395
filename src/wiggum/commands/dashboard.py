"""Dashboard command."""

import typer

from ..config import ConfigError, load_config
from ..core import get_wiggum_dir
from ..dashboard import Dashboard
from ..output import get_output_context
from .common import fail, get_status_store


def dashboard(
    interval: float | None = typer.Option(
        None,
        "--interval",
        "-i",
        min=0.05,
        help="Refresh interval in seconds (default from config)",
    ),
) -> None:
    """Watch the session live. Press q to quit, r to refresh."""
    ctx = get_output_context()
    if interval is None:
        try:
            interval = load_config(get_wiggum_dir()).dashboard.refresh_interval
        except ConfigError as e:
            fail(str(e))

    Dashboard(get_status_store(), console=ctx.console, refresh_interval=interval).run()
