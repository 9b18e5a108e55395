"""Session lifecycle: creating, checkpointing and ending a session."""

import hashlib
import logging
import secrets
from datetime import datetime
from pathlib import Path

from ..config import WiggumConfig
from ..models import (
    GATE_NAMES,
    Checkpoint,
    Limits,
    SessionMarker,
    StatusDocument,
    new_status_document,
)
from .store import SessionStore, StatusStore

logger = logging.getLogger(__name__)


def generate_session_id() -> str:
    """Generate session ID in format YYYYMMDD-HHMMSS-<6 hex chars>."""
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    return f"{timestamp}-{secrets.token_hex(3)}"


def hash_file(path: Path) -> str:
    """Compute SHA256 of file.

    Args:
        path: File path

    Returns:
        Hex-encoded SHA256 hash
    """
    sha = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            sha.update(chunk)
    return sha.hexdigest()


def build_initial_document(config: WiggumConfig, start_commit: str = "") -> StatusDocument:
    """Build the fresh document written by `wiggum init`.

    Limits and gate commands are copied from configuration here and nowhere
    else, so later config edits do not reach a running session.
    """
    doc = new_status_document()
    doc.session.phase = "plan"
    doc.session.start_time = datetime.now()
    doc.session.start_commit = start_commit
    doc.session.max_iterations = config.session.max_iterations
    doc.current_task.max_attempts = config.session.max_task_attempts
    doc.limits = Limits(
        max_iterations_per_chunk=config.limits.max_iterations_per_chunk,
        max_gate_failures=config.limits.max_gate_failures,
    )
    commands = config.gates.commands()
    for gate in GATE_NAMES:
        doc.gates.get(gate).command = commands.get(gate, "")
    return doc


def create_marker(start_commit: str = "", spec_path: Path | None = None) -> SessionMarker:
    """Create the session marker for a new session."""
    return SessionMarker(
        session_id=generate_session_id(),
        starting_commit=start_commit,
        spec_hash=hash_file(spec_path) if spec_path else "",
        last_phase="plan",
    )


def add_checkpoint(
    marker: SessionMarker,
    label: str,
    doc: StatusDocument,
    commit: str = "",
) -> SessionMarker:
    """Record a checkpoint from the current status document.

    The chunk recorded is the first chunk in progress, if any.
    """
    marker = marker.model_copy(deep=True)
    in_progress = next((c for c in doc.chunks if c.status == "in_progress"), None)
    chunk_id = str(in_progress.id) if in_progress else marker.last_chunk_id
    phase = doc.session.phase or ""

    marker.checkpoints.append(
        Checkpoint(label=label, phase=phase, chunk_id=chunk_id, commit=commit)
    )
    marker.last_checkpoint = label
    marker.last_chunk_id = chunk_id
    marker.last_phase = phase
    marker.plan_approved = doc.plan.approved
    return marker


def end_session(
    status_store: StatusStore,
    session_store: SessionStore,
    archive_dir: Path,
    delete: bool = False,
) -> list[Path]:
    """Archive (or delete) the status document and session marker.

    Returns:
        Paths the documents were archived to (empty when deleting)
    """
    archived: list[Path] = []
    for store in (status_store, session_store):
        if delete:
            if store.delete():
                logger.debug(f"Deleted {store.path}")
            continue
        target = store.archive(archive_dir)
        if target is not None:
            logger.debug(f"Archived {store.path} -> {target}")
            archived.append(target)
    return archived
