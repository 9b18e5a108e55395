"""Status command: enforcement counters and the stop condition."""

from rich.table import Table

from ..core import describe_stop
from ..models import GATE_NAMES, StatusDocument
from ..output import get_output_context
from .common import load_document


def _status_data(doc: StatusDocument) -> dict:
    sc = doc.stop_conditions
    return {
        "phase": doc.session.phase,
        "iteration": doc.session.iteration,
        "max_iterations": doc.session.max_iterations,
        "current_task": doc.current_task.name or None,
        "active_agent": doc.active_agent.name if doc.active_agent else None,
        "limits": doc.limits.model_dump(),
        "gate_failure_counts": doc.gate_failure_counts.model_dump(),
        "chunk_iteration_counts": dict(doc.chunk_iteration_counts),
        "stop_conditions": sc.model_dump(mode="json"),
        "stats": doc.stats.model_dump(),
    }


def status() -> None:
    """Show enforcement counters and the stop condition."""
    ctx = get_output_context()
    doc = load_document()
    if ctx.json_mode:
        ctx.print_json(_status_data(doc))
        return

    s = doc.session
    limits = doc.limits
    ctx.console.print(f"\n[bold]Phase:[/bold] {s.phase or 'standby'}")
    ctx.console.print(f"[bold]Iteration:[/bold] {s.iteration}/{s.max_iterations}")
    if doc.current_task.name:
        t = doc.current_task
        ctx.console.print(f"[bold]Task:[/bold] {t.name} ({t.status})")
    if doc.active_agent is not None:
        ctx.console.print(f"[bold]Active agent:[/bold] {doc.active_agent.name}")

    gates = Table(title="Gate failures", title_justify="left")
    gates.add_column("Gate")
    gates.add_column("Status")
    gates.add_column("Failures", justify="right")
    for name in GATE_NAMES:
        count = doc.gate_failure_counts.get(name)
        style = "red" if count >= limits.max_gate_failures else None
        gates.add_row(
            name,
            doc.gates.get(name).status,
            f"{count}/{limits.max_gate_failures}",
            style=style,
        )
    ctx.console.print(gates)

    if doc.chunk_iteration_counts:
        chunks = Table(title="Chunk iterations", title_justify="left")
        chunks.add_column("Chunk")
        chunks.add_column("Name")
        chunks.add_column("Iterations", justify="right")
        for key, count in doc.chunk_iteration_counts.items():
            chunk = doc.find_chunk(key)
            style = "red" if count > limits.max_iterations_per_chunk else None
            chunks.add_row(
                key,
                chunk.name if chunk else "",
                f"{count}/{limits.max_iterations_per_chunk}",
                style=style,
            )
        ctx.console.print(chunks)

    sc = doc.stop_conditions
    if sc.active:
        ctx.console.print(f"\n[bold red]STOPPED:[/bold red] {describe_stop(sc.reason, sc.details)}")
        if sc.triggered_at is not None:
            ctx.console.print(f"  Since: {sc.triggered_at.strftime('%Y-%m-%d %H:%M:%S')}")
    else:
        ctx.console.print("\n[green]Not stopped[/green]")
