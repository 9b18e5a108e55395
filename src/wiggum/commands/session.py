"""Session marker commands: checkpoint, resume and end."""

import logging

import typer

from ..core import (
    DocumentMissingError,
    StoreError,
    add_checkpoint,
    end_session,
    get_archive_dir,
    get_project_root,
    get_wiggum_dir,
)
from ..models import SessionMarker
from ..output import get_output_context
from ..services import get_head_sha
from .common import fail, get_session_store, get_status_store, load_document

logger = logging.getLogger(__name__)

ABORTED = "aborted"


def _load_marker() -> SessionMarker:
    try:
        return get_session_store().load()
    except DocumentMissingError:
        fail("No session marker found. Run 'wiggum init' first.")
    except StoreError as e:
        fail(str(e))


def checkpoint(
    label: str = typer.Argument(..., help="Checkpoint label"),
) -> None:
    """Record a resumable checkpoint in the session marker."""
    doc = load_document()
    marker = _load_marker()
    commit = get_head_sha(get_project_root())
    marker = add_checkpoint(marker, label, doc, commit=commit)
    try:
        get_session_store().save(marker)
    except StoreError as e:
        fail(str(e))

    cp = marker.checkpoints[-1]
    get_output_context().result(
        cp.model_dump(mode="json"),
        f"Checkpoint [bold]{label}[/bold] at phase {cp.phase or 'standby'}"
        + (f", chunk {cp.chunk_id}" if cp.chunk_id else ""),
    )


def resume() -> None:
    """Show where an interrupted session left off."""
    ctx = get_output_context()
    marker = _load_marker()
    doc, error = get_status_store().load_or_default()

    data = marker.model_dump(mode="json")
    data["status_error"] = str(error) if error else None
    data["stopped"] = doc.stop_conditions.active
    if ctx.json_mode:
        ctx.print_json(data)
        return

    ctx.console.print(f"\n[bold]Session:[/bold] {marker.session_id}")
    ctx.console.print(f"[bold]Started:[/bold] {marker.started_at.strftime('%Y-%m-%d %H:%M')}")
    if marker.starting_commit:
        ctx.console.print(f"[bold]Base commit:[/bold] {marker.starting_commit[:7]}")
    ctx.console.print(f"[bold]Plan approved:[/bold] {'yes' if marker.plan_approved else 'no'}")
    ctx.console.print(f"[bold]Last phase:[/bold] {marker.last_phase or 'standby'}")
    if marker.last_chunk_id:
        ctx.console.print(f"[bold]Last chunk:[/bold] {marker.last_chunk_id}")
    if marker.last_checkpoint:
        ctx.console.print(f"[bold]Last checkpoint:[/bold] {marker.last_checkpoint}")

    if error is not None:
        ctx.console.print(f"\n[yellow]Status document unavailable: {error}[/yellow]")
    elif doc.stop_conditions.active:
        ctx.console.print(
            "\n[bold red]Loop is stopped.[/bold red] Run 'wiggum status' for details."
        )
    else:
        phase = doc.session.phase or "standby"
        ctx.console.print(f"\n[green]Ready to resume at phase {phase}[/green]")


def end(
    abort: bool = typer.Option(False, "--abort", help="Mark the session as aborted"),
    delete: bool = typer.Option(False, "--delete", help="Delete instead of archiving"),
) -> None:
    """End the session, archiving its status document and marker."""
    ctx = get_output_context()
    status_store = get_status_store()
    session_store = get_session_store()
    if not status_store.exists() and not session_store.exists():
        fail("No active session.")

    if abort:
        logger.warning("Session aborted")
        if session_store.exists():
            doc, _ = status_store.load_or_default()
            marker = add_checkpoint(_load_marker(), ABORTED, doc)
            try:
                session_store.save(marker)
            except StoreError as e:
                fail(str(e))

    archive_dir = get_archive_dir(get_wiggum_dir())
    try:
        archived = end_session(status_store, session_store, archive_dir, delete=delete)
    except OSError as e:
        fail(f"Failed to end session: {e}")

    ctx.result(
        {"aborted": abort, "deleted": delete, "archived": [str(p) for p in archived]},
        "[yellow]Session aborted[/yellow]" if abort else "[green]Session ended[/green]",
    )
    for path in archived:
        ctx.print(f"  Archived: {path}")
