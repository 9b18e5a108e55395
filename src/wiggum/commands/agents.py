"""Agent tracking commands."""

import typer

from ..core import end_active_agent, set_agent_status, start_active_agent, update_agent_progress
from ..models import AgentHistoryEntry, StatusDocument
from ..output import get_output_context
from .common import mutate


def _start(doc: StatusDocument, name: str, task: str) -> tuple[StatusDocument, str | None]:
    previous = doc.active_agent.name if doc.active_agent else None
    return start_active_agent(doc, name, task), previous


def _end(
    doc: StatusDocument, status: str, agent: str | None
) -> tuple[StatusDocument, AgentHistoryEntry | None]:
    was_active = doc.active_agent is not None
    doc = end_active_agent(doc, status, agent=agent)
    return doc, (doc.agent_history[-1] if was_active else None)


def agent_start(
    name: str = typer.Argument(..., help="Agent name"),
    task: str = typer.Argument(..., help="What the agent is working on"),
) -> None:
    """Mark an agent as the active agent."""
    _, interrupted = mutate(_start, name, task)
    ctx = get_output_context()
    ctx.result(
        {"agent": name, "task": task, "interrupted": interrupted},
        f"Agent [bold]{name}[/bold] started: {task}",
    )
    if interrupted:
        ctx.print(f"[yellow]Previous agent '{interrupted}' marked interrupted[/yellow]")


def agent_progress(
    message: str = typer.Argument(..., help="Progress message"),
    agent: str | None = typer.Option(
        None, "--agent", "-a", help="Only update if this agent is the active one"
    ),
) -> None:
    """Update the active agent's progress message."""
    doc = mutate(update_agent_progress, message, agent=agent)
    active = doc.active_agent
    get_output_context().result(
        {"agent": active.name if active else None, "progress": message},
        f"Progress: {message}" if active else "[yellow]No active agent[/yellow]",
    )


def agent_end(
    status: str = typer.Argument("completed", help="Final status (e.g. completed, failed)"),
    agent: str | None = typer.Option(
        None, "--agent", "-a", help="Only end if this agent is the active one"
    ),
) -> None:
    """End the active agent and move it to history."""
    _, entry = mutate(_end, status, agent)
    ctx = get_output_context()
    if entry is not None:
        ctx.result(
            {"agent": entry.name, "status": entry.status, "ended_at": entry.ended_at},
            f"Agent [bold]{entry.name}[/bold] ended: {entry.status}",
        )
    else:
        ctx.result({"agent": None}, "[yellow]No active agent[/yellow]")


def agent_status(
    name: str = typer.Argument(..., help="Agent name"),
    status: str = typer.Argument(..., help="idle, active or done"),
    output: str | None = typer.Option(None, "--output", "-o", help="Last output summary"),
    blockers: int | None = typer.Option(None, "--blockers", help="Blocking issues found"),
    warnings: int | None = typer.Option(None, "--warnings", help="Warnings found"),
) -> None:
    """Update an agent's entry in the agent rollup."""
    doc = mutate(set_agent_status, name, status, output, blockers, warnings)
    entry = doc.find_agent(name)
    get_output_context().result(
        entry.model_dump(mode="json") if entry else {"agent": name},
        f"Agent {name}: {status}",
    )
