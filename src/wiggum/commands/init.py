"""Init command implementation."""

import logging
from pathlib import Path

import typer

from ..config import ConfigError, load_config, write_config_template
from ..constants import CONFIG_FILE
from ..core import (
    StoreError,
    build_initial_document,
    create_marker,
    end_session,
    get_archive_dir,
    get_project_root,
    get_wiggum_dir,
)
from ..output import get_output_context
from ..services import auto_launch_disabled, get_head_sha, launch_dashboard
from .common import fail, get_session_store, get_status_store

logger = logging.getLogger(__name__)


def init(
    spec: Path | None = typer.Option(
        None,
        "--spec",
        "-s",
        help="Spec file to fingerprint in the session marker",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Archive an existing session and start a new one",
    ),
    dashboard: bool = typer.Option(
        True,
        "--dashboard/--no-dashboard",
        help="Open the dashboard in a tmux split (when inside tmux)",
    ),
) -> None:
    """Start a new session with a fresh status document."""
    ctx = get_output_context()
    root = get_project_root()
    wiggum_dir = get_wiggum_dir(root)
    config_path = wiggum_dir / CONFIG_FILE

    if spec is not None and not spec.is_file():
        fail(f"Spec file not found: {spec}")

    status_store = get_status_store()
    session_store = get_session_store()
    if status_store.exists() and not force:
        fail(f"Session already active at {status_store.path}. Use --force to start over.")

    wiggum_dir.mkdir(parents=True, exist_ok=True)
    if not config_path.exists():
        write_config_template(wiggum_dir)
        ctx.print(f"[green]Created config template:[/green] {config_path}")

    try:
        config = load_config(wiggum_dir)
    except ConfigError as e:
        fail(str(e))

    archived: list[Path] = []
    if force:
        archived = end_session(status_store, session_store, get_archive_dir(wiggum_dir))
        for path in archived:
            ctx.print(f"[yellow]Archived previous session:[/yellow] {path}")

    start_commit = get_head_sha(root)
    doc = build_initial_document(config, start_commit=start_commit)
    marker = create_marker(start_commit=start_commit, spec_path=spec)
    try:
        status_store.save(doc)
        session_store.save(marker)
    except StoreError as e:
        fail(str(e))
    logger.debug(f"Session {marker.session_id} started at {start_commit or 'no commit'}")

    launched = False
    if dashboard and config.dashboard.auto_launch and not auto_launch_disabled():
        launched = launch_dashboard(root)

    ctx.result(
        {
            "session_id": marker.session_id,
            "status_file": str(status_store.path),
            "start_commit": start_commit,
            "limits": doc.limits.model_dump(),
            "archived": [str(p) for p in archived],
            "dashboard_launched": launched,
        }
    )
    ctx.print(f"[bold green]Session started:[/bold green] {marker.session_id}")
    ctx.print(f"  Status: {status_store.path}")
    ctx.print(
        f"  Limits: {doc.limits.max_gate_failures} gate failures, "
        f"{doc.limits.max_iterations_per_chunk} iterations per chunk"
    )
    if launched:
        ctx.print("  Dashboard opened in a tmux pane")
    else:
        ctx.print("  Run [bold]wiggum dashboard[/bold] in another terminal to watch progress")
