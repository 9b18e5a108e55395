"""Gate and chunk commands, including the enforcing check-* variants.

`gate` and `check-gate` record the same result and apply the same limit;
they differ only in exit status. `gate` always exits 0 so it can be used
for bookkeeping, while `check-gate` and `check-chunk` exit 2 whenever the
recorded counter is over its limit, so the loop halts.
"""

import typer

from ..core import (
    EnforcementResult,
    record_chunk_iteration,
    record_gate,
    reset_chunk_counter,
    reset_gate_counter,
)
from ..models import StatusDocument
from ..output import get_output_context
from .common import exit_blocked, mutate, parse_int


def _report_gate(gate_name: str, status: str, result: EnforcementResult) -> None:
    get_output_context().result(
        {
            "gate": gate_name,
            "status": status,
            "failures": result.count,
            "limit": result.limit,
            "breached": result.breached,
            "newly_triggered": result.newly_triggered,
            "stop_active": result.stop_active,
        },
        f"Gate {gate_name}: {status} (failures {result.count}/{result.limit})",
    )


def _block_if_breached(doc: StatusDocument, result: EnforcementResult) -> None:
    if result.breached and doc.stop_conditions.active:
        sc = doc.stop_conditions
        exit_blocked(sc.reason, dict(sc.details), sc.triggered_at)


def gate(
    name: str = typer.Argument(..., help="test, lint, typecheck, build or format"),
    status: str = typer.Argument(..., help="pending, running, passed, failed or skipped"),
    output: str | None = typer.Argument(None, help="Gate output"),
    command: str | None = typer.Argument(None, help="Command that was run"),
) -> None:
    """Record a gate result."""
    _, result = mutate(record_gate, name, status, output, command)
    _report_gate(name, status, result)
    if result.newly_triggered:
        get_output_context().print(
            f"[yellow]Stop condition triggered: gate '{name}' reached "
            f"{result.count}/{result.limit}[/yellow]"
        )


def check_gate(
    name: str = typer.Argument(..., help="test, lint, typecheck, build or format"),
    status: str = typer.Argument(..., help="pending, running, passed, failed or skipped"),
    output: str | None = typer.Argument(None, help="Gate output"),
) -> None:
    """Record a gate result and exit 2 if its failure limit is reached."""
    doc, result = mutate(record_gate, name, status, output)
    _block_if_breached(doc, result)
    _report_gate(name, status, result)


def check_chunk(
    chunk_id: str = typer.Argument(..., metavar="ID", help="Chunk id"),
) -> None:
    """Count an iteration on a chunk and exit 2 if it exceeds the limit."""
    key = str(parse_int(chunk_id, "chunk id"))
    doc, result = mutate(record_chunk_iteration, key)
    _block_if_breached(doc, result)
    get_output_context().result(
        {
            "chunk_id": key,
            "iterations": result.count,
            "limit": result.limit,
            "breached": False,
            "stop_active": result.stop_active,
        },
        f"Chunk {key}: iteration {result.count}/{result.limit}",
    )


def reset_gate(
    name: str = typer.Argument(..., help="test, lint, typecheck, build or format"),
) -> None:
    """Reset one gate's failure counter."""
    doc = mutate(reset_gate_counter, name)
    _report_reset(f"Gate {name} failure counter reset", doc)


def reset_chunk(
    chunk_id: str = typer.Argument(..., metavar="ID", help="Chunk id"),
) -> None:
    """Reset one chunk's iteration counter."""
    key = str(parse_int(chunk_id, "chunk id"))
    doc = mutate(reset_chunk_counter, key)
    _report_reset(f"Chunk {key} iteration counter reset", doc)


def _report_reset(message: str, doc: StatusDocument) -> None:
    ctx = get_output_context()
    sc = doc.stop_conditions
    ctx.result({"reset": True, "stop_active": sc.active, "reason": sc.reason}, message)
    if sc.active:
        ctx.print(f"[yellow]Still stopped: {sc.reason}. See 'wiggum status'.[/yellow]")
