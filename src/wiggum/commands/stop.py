"""Stop condition commands: the guard query, manual stop and clear."""

import sys

import typer

from ..constants import EXIT_ERROR
from ..core import MANUAL, Block, StoreError, check, clear_stop, trigger_stop
from ..output import get_output_context
from .common import exit_blocked, fail, get_status_store, load_document, mutate


def is_stopped() -> None:
    """Exit 2 if the loop must halt, 0 if it may proceed."""
    try:
        result = check(get_status_store())
    except StoreError as e:
        fail(str(e))

    if isinstance(result, Block):
        exit_blocked(result.reason, result.details, result.triggered_at)
    get_output_context().result({"stopped": False}, "[green]Not stopped[/green]")


def stop(
    message: str | None = typer.Argument(None, help="Why the loop is being stopped"),
) -> None:
    """Manually stop the loop."""
    details = {"message": message} if message else {}
    doc = mutate(trigger_stop, MANUAL, details)
    sc = doc.stop_conditions
    get_output_context().result(
        {"stopped": True, "reason": sc.reason, "details": sc.details},
        "[bold red]Loop stopped[/bold red]" + (f": {message}" if message else ""),
    )


def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Clear the stop condition. Asks for confirmation on a terminal."""
    ctx = get_output_context()
    doc = load_document()
    sc = doc.stop_conditions
    if not sc.active:
        ctx.warning("No active stop condition", {"cleared": False})
        return

    if not yes and not ctx.json_mode and sys.stdin.isatty():
        ctx.print(f"[bold red]Stopped:[/bold red] {sc.reason}")
        for key, value in sc.details.items():
            ctx.print(f"  {key}: {value}")
        if not typer.confirm("Clear the stop condition and let the loop continue?"):
            ctx.print("Cancelled")
            raise typer.Exit(EXIT_ERROR)

    mutate(clear_stop)
    ctx.success("Stop condition cleared", {"cleared": True, "reason": sc.reason})
