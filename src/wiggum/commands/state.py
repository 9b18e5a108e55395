"""Commands that record session, plan, task, chunk and commit state."""

import typer

from ..core import (
    add_commit,
    add_requirement,
    advance_phase,
    approve_plan,
    set_iteration,
    set_task,
    upsert_chunk,
)
from ..output import get_output_context
from .common import mutate, parse_int


def phase(
    name: str = typer.Argument(..., help="plan, implement, review or complete"),
) -> None:
    """Set the session phase."""
    doc = mutate(advance_phase, name)
    get_output_context().result(
        {"phase": doc.session.phase}, f"Phase: [bold]{doc.session.phase}[/bold]"
    )


def iteration(
    n: str = typer.Argument(..., help="Iteration number"),
) -> None:
    """Set the loop iteration number."""
    value = parse_int(n, "iteration", minimum=0)
    doc = mutate(set_iteration, value)
    s = doc.session
    get_output_context().result(
        {"iteration": s.iteration, "max_iterations": s.max_iterations},
        f"Iteration: {s.iteration}/{s.max_iterations}",
    )


def task(
    name: str = typer.Argument(..., help="Task name"),
    status: str = typer.Argument(..., help="pending, in_progress, completed or failed"),
    description: str | None = typer.Argument(None, help="Task description"),
) -> None:
    """Set the current task."""
    doc = mutate(set_task, name, status, description)
    t = doc.current_task
    get_output_context().result(
        t.model_dump(mode="json"),
        f"Task: {t.name} ({t.status}, attempt {t.attempt}/{t.max_attempts})",
    )


def chunk(
    chunk_id: str = typer.Argument(..., metavar="ID", help="Chunk id (integer)"),
    name: str = typer.Argument(..., help="Chunk name"),
    status: str = typer.Argument(..., help="pending, in_progress, completed or failed"),
    files: list[str] | None = typer.Option(
        None, "--file", "-f", help="File touched by this chunk (repeatable)"
    ),
) -> None:
    """Add a chunk, or update an existing chunk's status."""
    cid = parse_int(chunk_id, "chunk id")
    doc = mutate(upsert_chunk, cid, name, status, files=files or None)
    stats = doc.stats
    get_output_context().result(
        {
            "id": cid,
            "status": status,
            "chunks_completed": stats.chunks_completed,
            "chunks_total": stats.chunks_total,
        },
        f"Chunk {cid}: {name} ({status}, {stats.chunks_completed}/{stats.chunks_total} done)",
    )


def commit(
    hash: str = typer.Argument(..., help="Commit hash"),
    message: str = typer.Argument(..., help="Commit message"),
    files: int = typer.Option(0, "--files", help="Number of files changed"),
) -> None:
    """Record a commit made during the session."""
    doc = mutate(add_commit, hash, message, files)
    get_output_context().result(
        {"hash": hash, "commits_made": doc.stats.commits_made},
        f"Commit {hash[:7]} recorded ({doc.stats.commits_made} total)",
    )


def plan_approve(
    summary: str | None = typer.Argument(None, help="Plan summary"),
) -> None:
    """Mark the plan as approved."""
    doc = mutate(approve_plan, summary)
    get_output_context().success("Plan approved", {"approved": True, "summary": doc.plan.summary})


def plan_requirement(
    bucket: str = typer.Argument(..., help="must_have, should_have or nice_to_have"),
    text: str = typer.Argument(..., help="Requirement text"),
) -> None:
    """Append a requirement to the plan."""
    doc = mutate(add_requirement, bucket, text)
    items = getattr(doc.plan, bucket)
    get_output_context().result(
        {"bucket": bucket, "count": len(items)}, f"Added to {bucket}: {text}"
    )
