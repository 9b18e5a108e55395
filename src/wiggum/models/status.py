"""Status Document models.

The Status Document is the single JSON file shared by every mutator, the
execution guard and the dashboard. It is always read and written whole.
Unknown fields are rejected on load so a typo in a hand-edited document is
reported as corruption instead of silently ignored.
"""

from datetime import datetime
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator

Phase = Literal["plan", "implement", "review", "complete"]
TaskStatus = Literal["pending", "in_progress", "completed", "failed"]
ChunkStatus = Literal["pending", "in_progress", "completed", "failed"]
GateStatus = Literal["pending", "running", "passed", "failed", "skipped"]
GateName = Literal["test", "lint", "typecheck", "build", "format"]
AgentRollupStatus = Literal["idle", "active", "done"]
RequirementBucket = Literal["must_have", "should_have", "nice_to_have"]

PHASES: tuple[str, ...] = get_args(Phase)
TASK_STATUSES: tuple[str, ...] = get_args(TaskStatus)
CHUNK_STATUSES: tuple[str, ...] = get_args(ChunkStatus)
GATE_STATUSES: tuple[str, ...] = get_args(GateStatus)
GATE_NAMES: tuple[str, ...] = get_args(GateName)
AGENT_ROLLUP_STATUSES: tuple[str, ...] = get_args(AgentRollupStatus)
REQUIREMENT_BUCKETS: tuple[str, ...] = get_args(RequirementBucket)


class StrictModel(BaseModel):
    """Base for document records: unknown fields are a validation error.

    Timestamps are stored as naive local time. Aware values (such as the
    RFC 3339 "Z" times other writers produce) are converted on load, so
    elapsed-time arithmetic never mixes naive and aware datetimes.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    @field_validator("*", mode="after")
    @classmethod
    def _naive_local_time(cls, value: Any) -> Any:
        if isinstance(value, datetime) and value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value


class SessionInfo(StrictModel):
    """Session header.

    Attributes:
        phase: Current phase, or None when no phase is set (standby).
        iteration: Outer loop iteration counter.
        max_iterations: Configured outer loop limit (display only).
        start_time: When the session was initialized.
        start_commit: HEAD commit at session start.
    """

    phase: Phase | None = None
    iteration: int = 0
    max_iterations: int = 5
    start_time: datetime | None = None
    start_commit: str = ""

    @field_validator("phase", mode="before")
    @classmethod
    def _empty_phase_is_standby(cls, value: Any) -> Any:
        if value == "":
            return None
        return value


class PlanInfo(StrictModel):
    """Approved plan and its requirement buckets (append-only lists)."""

    approved: bool = False
    summary: str = ""
    must_have: list[str] = Field(default_factory=list)
    should_have: list[str] = Field(default_factory=list)
    nice_to_have: list[str] = Field(default_factory=list)


class TaskInfo(StrictModel):
    """Task the loop is currently working on."""

    name: str = ""
    description: str = ""
    status: TaskStatus = "pending"
    start_time: datetime | None = None
    attempt: int = 0
    max_attempts: int = 3


class ActiveAgent(StrictModel):
    """The single agent run currently in progress."""

    name: str
    task: str = ""
    started_at: datetime = Field(default_factory=datetime.now)
    progress: str = ""


class AgentHistoryEntry(StrictModel):
    """A finished agent run, moved out of the active slot."""

    name: str
    task: str = ""
    started_at: datetime
    ended_at: datetime
    status: str
    final_progress: str = ""


class Chunk(StrictModel):
    """One unit of planned implementation work."""

    id: int
    name: str
    status: ChunkStatus = "pending"
    files: list[str] = Field(default_factory=list)
    iteration: int = 0
    gates_passed: bool = False


class GateResult(StrictModel):
    """Latest result of one quality gate."""

    command: str = ""
    status: GateStatus = "pending"
    output: str = ""
    last_run: datetime | None = None
    attempts: int = 0


class Gates(StrictModel):
    """The fixed set of five gate slots."""

    test: GateResult = Field(default_factory=GateResult)
    lint: GateResult = Field(default_factory=GateResult)
    typecheck: GateResult = Field(default_factory=GateResult)
    build: GateResult = Field(default_factory=GateResult)
    format: GateResult = Field(default_factory=GateResult)

    def get(self, name: str) -> GateResult:
        """Get a gate slot by name."""
        if name not in GATE_NAMES:
            raise KeyError(name)
        return getattr(self, name)

    def items(self) -> list[tuple[str, GateResult]]:
        """Get (name, result) pairs in slot order."""
        return [(name, getattr(self, name)) for name in GATE_NAMES]


class GateFailureCounts(StrictModel):
    """Consecutive failure counter per gate, reset when the gate passes."""

    test: int = 0
    lint: int = 0
    typecheck: int = 0
    build: int = 0
    format: int = 0

    def get(self, name: str) -> int:
        """Get the counter for a gate."""
        if name not in GATE_NAMES:
            raise KeyError(name)
        return getattr(self, name)

    def set(self, name: str, value: int) -> None:
        """Set the counter for a gate."""
        if name not in GATE_NAMES:
            raise KeyError(name)
        setattr(self, name, value)


class Limits(StrictModel):
    """Thresholds copied from configuration at init; fixed for the session."""

    max_iterations_per_chunk: int = 5
    max_gate_failures: int = 3


class StopConditions(StrictModel):
    """The enforcement flag that halts the loop."""

    active: bool = False
    reason: str = ""
    triggered_at: datetime | None = None
    details: dict[str, Any] = Field(default_factory=dict)


class AgentStatus(StrictModel):
    """Legacy per-agent rollup, coarser than active_agent/agent_history."""

    name: str
    status: AgentRollupStatus = "idle"
    last_output: str = ""
    blockers: int = 0
    warnings: int = 0
    last_run: datetime | None = None


class CommitInfo(StrictModel):
    """A commit made during the session."""

    hash: str
    message: str
    time: datetime = Field(default_factory=datetime.now)
    files: int = 0


class Stats(StrictModel):
    """Derived counters. Recomputed by every mutator, never authoritative."""

    total_iterations: int = 0
    chunks_completed: int = 0
    chunks_total: int = 0
    gates_passed: int = 0
    gates_failed: int = 0
    commits_made: int = 0


class StatusDocument(StrictModel):
    """The whole Status Document as persisted in .wiggum/status.json."""

    session: SessionInfo = Field(default_factory=SessionInfo)
    plan: PlanInfo = Field(default_factory=PlanInfo)
    current_task: TaskInfo = Field(default_factory=TaskInfo)
    active_agent: ActiveAgent | None = None
    agent_history: list[AgentHistoryEntry] = Field(default_factory=list)
    chunks: list[Chunk] = Field(default_factory=list)
    gates: Gates = Field(default_factory=Gates)
    gate_failure_counts: GateFailureCounts = Field(default_factory=GateFailureCounts)
    chunk_iteration_counts: dict[str, int] = Field(default_factory=dict)
    stop_conditions: StopConditions = Field(default_factory=StopConditions)
    limits: Limits = Field(default_factory=Limits)
    agents: list[AgentStatus] = Field(default_factory=list)
    commits: list[CommitInfo] = Field(default_factory=list)
    stats: Stats = Field(default_factory=Stats)

    def find_chunk(self, chunk_id: int | str) -> Chunk | None:
        """Find a chunk by id (accepts the string form used as a counter key)."""
        key = str(chunk_id)
        for chunk in self.chunks:
            if str(chunk.id) == key:
                return chunk
        return None

    def find_agent(self, name: str) -> AgentStatus | None:
        """Find a legacy rollup entry by agent name."""
        for agent in self.agents:
            if agent.name == name:
                return agent
        return None


def new_status_document() -> StatusDocument:
    """Build the documented empty default document.

    Used by read paths when no document can be loaded, and as the base for
    `wiggum init`. The phase is unset (standby); all five gates are pending.
    """
    return StatusDocument()
