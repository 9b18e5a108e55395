"""Status Document mutators.

Each mutator is a pure function: it takes a document, applies one state
transition to a deep copy and returns the copy (record_gate and
record_chunk_iteration also return an EnforcementResult). Stats are
recounted from scratch at the end of every mutation.

`apply` wraps a mutator in the load-mutate-save cycle. Nothing is retried
and nothing is partially persisted: a load or save failure propagates as a
StoreError and the in-memory change is discarded.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

from ..models import (
    AGENT_ROLLUP_STATUSES,
    CHUNK_STATUSES,
    GATE_NAMES,
    GATE_STATUSES,
    PHASES,
    REQUIREMENT_BUCKETS,
    TASK_STATUSES,
    ActiveAgent,
    AgentHistoryEntry,
    AgentStatus,
    Chunk,
    CommitInfo,
    Stats,
    StatusDocument,
    TaskInfo,
)
from .enforcement import (
    EnforcementResult,
    apply_breach,
    chunk_breach,
    gate_breach,
    reevaluate_stop,
    set_stop,
    unset_stop,
)
from .store import StatusStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Status given to an agent run that was replaced by a newer agent-start
INTERRUPTED = "interrupted"


class MutationError(Exception):
    """A mutation was rejected before touching the document."""


class UnknownGateError(MutationError):
    """Gate name is not one of the five fixed slots."""


class AgentOwnershipError(MutationError):
    """An agent tried to update or end a run it did not start."""


def _require(value: str, allowed: tuple[str, ...], what: str) -> None:
    if value not in allowed:
        raise MutationError(f"Invalid {what} '{value}'. Expected one of: {', '.join(allowed)}")


def _require_gate(gate: str) -> None:
    if gate not in GATE_NAMES:
        raise UnknownGateError(f"Unknown gate '{gate}'. Expected one of: {', '.join(GATE_NAMES)}")


def recompute_stats(doc: StatusDocument) -> Stats:
    """Recount derived stats from the document."""
    statuses = [result.status for _, result in doc.gates.items()]
    return Stats(
        total_iterations=sum(doc.chunk_iteration_counts.values()),
        chunks_completed=sum(1 for c in doc.chunks if c.status == "completed"),
        chunks_total=len(doc.chunks),
        gates_passed=statuses.count("passed"),
        gates_failed=statuses.count("failed"),
        commits_made=len(doc.commits),
    )


def _finish(doc: StatusDocument) -> StatusDocument:
    doc.stats = recompute_stats(doc)
    return doc


# ----------------------------------------------------------------------------
# Session, plan and task
# ----------------------------------------------------------------------------


def advance_phase(doc: StatusDocument, phase: str) -> StatusDocument:
    """Set session.phase. Any phase may follow any phase."""
    _require(phase, PHASES, "phase")
    doc = doc.model_copy(deep=True)
    previous = doc.session.phase or "standby"
    doc.session.phase = phase
    logger.debug(f"Phase {previous} -> {phase}")
    return _finish(doc)


def set_iteration(doc: StatusDocument, iteration: int) -> StatusDocument:
    """Set the outer loop iteration counter."""
    if iteration < 0:
        raise MutationError("Iteration must be >= 0")
    doc = doc.model_copy(deep=True)
    doc.session.iteration = iteration
    return _finish(doc)


def set_task(
    doc: StatusDocument,
    name: str,
    status: str,
    description: str | None = None,
) -> StatusDocument:
    """Set the current task.

    A different task name starts a fresh task record. Entering in_progress
    counts as a new attempt and stamps start_time.
    """
    _require(status, TASK_STATUSES, "task status")
    doc = doc.model_copy(deep=True)
    task = doc.current_task

    if task.name != name:
        task = TaskInfo(name=name, max_attempts=task.max_attempts)

    if status == "in_progress" and task.status != "in_progress":
        task.attempt += 1
        task.start_time = datetime.now()
    task.status = status
    if description is not None:
        task.description = description
    doc.current_task = task

    logger.debug(f"Task '{name}' -> {status} (attempt {task.attempt}/{task.max_attempts})")
    return _finish(doc)


def approve_plan(doc: StatusDocument, summary: str | None = None) -> StatusDocument:
    """Mark the plan approved, optionally setting its summary."""
    doc = doc.model_copy(deep=True)
    doc.plan.approved = True
    if summary is not None:
        doc.plan.summary = summary
    return _finish(doc)


def add_requirement(doc: StatusDocument, bucket: str, text: str) -> StatusDocument:
    """Append a requirement to must_have, should_have or nice_to_have."""
    _require(bucket, REQUIREMENT_BUCKETS, "requirement bucket")
    doc = doc.model_copy(deep=True)
    getattr(doc.plan, bucket).append(text)
    return _finish(doc)


# ----------------------------------------------------------------------------
# Chunks and gates (with enforcement)
# ----------------------------------------------------------------------------


def upsert_chunk(
    doc: StatusDocument,
    chunk_id: int,
    name: str,
    status: str,
    files: list[str] | None = None,
    gates_passed: bool | None = None,
) -> StatusDocument:
    """Insert a chunk or update the status of an existing one.

    Chunks keep their first-insertion order and name.
    """
    _require(status, CHUNK_STATUSES, "chunk status")
    doc = doc.model_copy(deep=True)
    chunk = doc.find_chunk(chunk_id)
    if chunk is None:
        chunk = Chunk(id=chunk_id, name=name, status=status)
        chunk.iteration = doc.chunk_iteration_counts.get(str(chunk_id), 0)
        doc.chunks.append(chunk)
        logger.debug(f"Chunk {chunk_id} added: {name} ({status})")
    else:
        chunk.status = status
        logger.debug(f"Chunk {chunk_id} -> {status}")

    if files is not None:
        chunk.files = list(files)
    if gates_passed is not None:
        chunk.gates_passed = gates_passed
    return _finish(doc)


def record_gate(
    doc: StatusDocument,
    gate: str,
    status: str,
    output: str | None = None,
    command: str | None = None,
) -> tuple[StatusDocument, EnforcementResult]:
    """Record a gate result and enforce the gate failure limit.

    A failure increments the gate's consecutive failure counter and triggers
    the stop condition once the counter reaches max_gate_failures. A pass
    resets the counter to 0.
    """
    _require_gate(gate)
    _require(status, GATE_STATUSES, "gate status")
    doc = doc.model_copy(deep=True)

    result = doc.gates.get(gate)
    result.status = status
    result.attempts += 1
    result.last_run = datetime.now()
    if output is not None:
        result.output = output
    if command is not None:
        result.command = command

    counts = doc.gate_failure_counts
    limit = doc.limits.max_gate_failures
    enforcement = EnforcementResult(count=counts.get(gate), limit=limit)

    if status == "failed":
        counts.set(gate, counts.get(gate) + 1)
        enforcement.count = counts.get(gate)
        breach = gate_breach(doc, gate)
        if breach is not None:
            enforcement.breached = True
            enforcement.details = dict(breach.details)
            enforcement.newly_triggered = apply_breach(doc, breach)
    elif status == "passed":
        counts.set(gate, 0)
        enforcement.count = 0
        reevaluate_stop(doc)

    enforcement.stop_active = doc.stop_conditions.active
    logger.debug(f"Gate {gate} -> {status} (failures {enforcement.count}/{limit})")
    return _finish(doc), enforcement


def record_chunk_iteration(
    doc: StatusDocument, chunk_id: int | str
) -> tuple[StatusDocument, EnforcementResult]:
    """Count one more iteration on a chunk and enforce the iteration limit.

    The stop condition triggers once the count exceeds
    max_iterations_per_chunk.
    """
    key = str(chunk_id)
    doc = doc.model_copy(deep=True)

    count = doc.chunk_iteration_counts.get(key, 0) + 1
    doc.chunk_iteration_counts[key] = count
    chunk = doc.find_chunk(key)
    if chunk is not None:
        chunk.iteration = count

    limit = doc.limits.max_iterations_per_chunk
    enforcement = EnforcementResult(count=count, limit=limit)
    breach = chunk_breach(doc, key)
    if breach is not None:
        enforcement.breached = True
        enforcement.details = dict(breach.details)
        enforcement.newly_triggered = apply_breach(doc, breach)

    enforcement.stop_active = doc.stop_conditions.active
    logger.debug(f"Chunk {key} iteration {count}/{limit}")
    return _finish(doc), enforcement


def reset_gate_counter(doc: StatusDocument, gate: str) -> StatusDocument:
    """Reset one gate's failure counter, lifting its stop if nothing else is in breach."""
    _require_gate(gate)
    doc = doc.model_copy(deep=True)
    doc.gate_failure_counts.set(gate, 0)
    reevaluate_stop(doc)
    return _finish(doc)


def reset_chunk_counter(doc: StatusDocument, chunk_id: int | str) -> StatusDocument:
    """Reset one chunk's iteration counter, lifting its stop if nothing else is in breach."""
    key = str(chunk_id)
    doc = doc.model_copy(deep=True)
    doc.chunk_iteration_counts[key] = 0
    chunk = doc.find_chunk(key)
    if chunk is not None:
        chunk.iteration = 0
    reevaluate_stop(doc)
    return _finish(doc)


# ----------------------------------------------------------------------------
# Agents
# ----------------------------------------------------------------------------


def _rollup(doc: StatusDocument, name: str) -> AgentStatus:
    agent = doc.find_agent(name)
    if agent is None:
        agent = AgentStatus(name=name)
        doc.agents.append(agent)
    return agent


def _retire_active_agent(doc: StatusDocument, status: str, now: datetime) -> AgentHistoryEntry:
    active = doc.active_agent
    assert active is not None
    entry = AgentHistoryEntry(
        name=active.name,
        task=active.task,
        started_at=active.started_at,
        ended_at=now,
        status=status,
        final_progress=active.progress,
    )
    doc.agent_history.append(entry)
    doc.active_agent = None

    rollup = _rollup(doc, entry.name)
    rollup.status = "done"
    rollup.last_run = now
    if entry.final_progress:
        rollup.last_output = entry.final_progress
    return entry


def _check_owner(doc: StatusDocument, agent: str | None) -> None:
    active = doc.active_agent
    if agent is not None and active is not None and active.name != agent:
        raise AgentOwnershipError(f"Active agent is '{active.name}', not '{agent}'")


def start_active_agent(doc: StatusDocument, name: str, task: str) -> StatusDocument:
    """Make `name` the active agent.

    Last writer wins: an agent that is still active is moved to history with
    status 'interrupted'.
    """
    doc = doc.model_copy(deep=True)
    now = datetime.now()
    if doc.active_agent is not None:
        previous = _retire_active_agent(doc, INTERRUPTED, now)
        logger.info(f"Agent '{previous.name}' interrupted by '{name}'")

    doc.active_agent = ActiveAgent(name=name, task=task, started_at=now)
    rollup = _rollup(doc, name)
    rollup.status = "active"
    rollup.last_run = now
    logger.debug(f"Agent '{name}' started: {task}")
    return _finish(doc)


def update_agent_progress(
    doc: StatusDocument, message: str, agent: str | None = None
) -> StatusDocument:
    """Set the active agent's progress message. No-op if no agent is active."""
    _check_owner(doc, agent)
    doc = doc.model_copy(deep=True)
    if doc.active_agent is None:
        logger.debug("No active agent; progress update ignored")
        return _finish(doc)
    doc.active_agent.progress = message
    return _finish(doc)


def end_active_agent(
    doc: StatusDocument, status: str = "completed", agent: str | None = None
) -> StatusDocument:
    """Move the active agent into agent_history. No-op if no agent is active."""
    _check_owner(doc, agent)
    doc = doc.model_copy(deep=True)
    if doc.active_agent is None:
        logger.debug("No active agent; end ignored")
        return _finish(doc)
    entry = _retire_active_agent(doc, status, datetime.now())
    logger.debug(f"Agent '{entry.name}' ended: {status}")
    return _finish(doc)


def set_agent_status(
    doc: StatusDocument,
    name: str,
    status: str,
    last_output: str | None = None,
    blockers: int | None = None,
    warnings: int | None = None,
) -> StatusDocument:
    """Update the legacy per-agent rollup entry for `name`."""
    _require(status, AGENT_ROLLUP_STATUSES, "agent status")
    doc = doc.model_copy(deep=True)
    rollup = _rollup(doc, name)
    rollup.status = status
    rollup.last_run = datetime.now()
    if last_output is not None:
        rollup.last_output = last_output
    if blockers is not None:
        rollup.blockers = blockers
    if warnings is not None:
        rollup.warnings = warnings
    return _finish(doc)


# ----------------------------------------------------------------------------
# Commits and stop conditions
# ----------------------------------------------------------------------------


def add_commit(doc: StatusDocument, hash: str, message: str, files: int = 0) -> StatusDocument:
    """Append a commit record."""
    doc = doc.model_copy(deep=True)
    doc.commits.append(CommitInfo(hash=hash, message=message, files=files))
    return _finish(doc)


def trigger_stop(
    doc: StatusDocument, reason: str, details: dict[str, Any] | None = None
) -> StatusDocument:
    """Activate the stop condition unconditionally."""
    doc = doc.model_copy(deep=True)
    set_stop(doc, reason, details or {})
    logger.warning(f"Stop condition set: {reason}")
    return _finish(doc)


def clear_stop(doc: StatusDocument) -> StatusDocument:
    """Deactivate the stop condition.

    Counters are left as they are; confirmation, when wanted, is the
    caller's job.
    """
    doc = doc.model_copy(deep=True)
    unset_stop(doc)
    return _finish(doc)


# ----------------------------------------------------------------------------
# Load-mutate-save
# ----------------------------------------------------------------------------


def apply(store: StatusStore, mutator: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run one mutator against the stored document and save the result.

    Args:
        store: Status document store
        mutator: A mutator from this module
        *args: Positional arguments after the document
        **kwargs: Keyword arguments for the mutator

    Returns:
        Whatever the mutator returns (the new document, or a tuple of the
        new document and an EnforcementResult)

    Raises:
        StoreError: If the document cannot be loaded or saved
        MutationError: If the mutation is rejected
    """
    doc = store.load()
    outcome = mutator(doc, *args, **kwargs)
    new_doc = outcome[0] if isinstance(outcome, tuple) else outcome
    store.save(new_doc)
    return outcome
