"""Pydantic data models for wiggum session state.

This package defines the data structures persisted under .wiggum/:
- The Status Document and its records (StatusDocument, Chunk, Gates, ...)
- The crash/resume session marker (SessionMarker, Checkpoint)

All models are Pydantic BaseModel subclasses, enabling:
- Automatic JSON serialization/deserialization
- Field validation and rejection of unknown fields

Example:
    >>> from wiggum.models import new_status_document
    >>> doc = new_status_document()
    >>> doc.model_dump_json()
"""

from .session import Checkpoint, SessionMarker
from .status import (
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
    GateFailureCounts,
    GateResult,
    Gates,
    Limits,
    PlanInfo,
    SessionInfo,
    Stats,
    StatusDocument,
    StopConditions,
    TaskInfo,
    new_status_document,
)

__all__ = [
    "AGENT_ROLLUP_STATUSES",
    "CHUNK_STATUSES",
    "GATE_NAMES",
    "GATE_STATUSES",
    "PHASES",
    "REQUIREMENT_BUCKETS",
    "TASK_STATUSES",
    "ActiveAgent",
    "AgentHistoryEntry",
    "AgentStatus",
    "Checkpoint",
    "Chunk",
    "CommitInfo",
    "GateFailureCounts",
    "GateResult",
    "Gates",
    "Limits",
    "PlanInfo",
    "SessionInfo",
    "SessionMarker",
    "Stats",
    "StatusDocument",
    "StopConditions",
    "TaskInfo",
    "new_status_document",
]
