"""Core session state logic for wiggum.

This package holds everything that reads or writes session state:
- store: whole-document JSON store with atomic replace
- mutators: one pure function per state transition, plus `apply`
- enforcement: gate-failure and chunk-iteration limits, stop conditions
- guard: read-only pre-action check for the loop harness
- session: init, checkpoints and end-of-session archiving
- wiggum_dir: .wiggum directory layout
"""

from .enforcement import (
    CHUNK_ITERATIONS,
    GATE_FAILURE,
    MANUAL,
    Breach,
    EnforcementResult,
    chunk_breached,
    describe_stop,
    find_breach,
    gate_breached,
)
from .guard import Allow, Block, GuardResult, check
from .mutators import (
    AgentOwnershipError,
    MutationError,
    UnknownGateError,
    add_commit,
    add_requirement,
    advance_phase,
    apply,
    approve_plan,
    clear_stop,
    end_active_agent,
    record_chunk_iteration,
    record_gate,
    recompute_stats,
    reset_chunk_counter,
    reset_gate_counter,
    set_agent_status,
    set_iteration,
    set_task,
    start_active_agent,
    trigger_stop,
    update_agent_progress,
    upsert_chunk,
)
from .session import (
    add_checkpoint,
    build_initial_document,
    create_marker,
    end_session,
    generate_session_id,
    hash_file,
)
from .store import (
    DocumentCorruptError,
    DocumentMissingError,
    DocumentWriteError,
    JsonDocumentStore,
    SessionStore,
    StatusStore,
    StoreError,
)
from .wiggum_dir import get_archive_dir, get_project_root, get_wiggum_dir, set_project_root

__all__ = [
    "CHUNK_ITERATIONS",
    "GATE_FAILURE",
    "MANUAL",
    "AgentOwnershipError",
    "Allow",
    "Block",
    "Breach",
    "DocumentCorruptError",
    "DocumentMissingError",
    "DocumentWriteError",
    "EnforcementResult",
    "GuardResult",
    "JsonDocumentStore",
    "MutationError",
    "SessionStore",
    "StatusStore",
    "StoreError",
    "UnknownGateError",
    "add_checkpoint",
    "add_commit",
    "add_requirement",
    "advance_phase",
    "apply",
    "approve_plan",
    "build_initial_document",
    "check",
    "chunk_breached",
    "clear_stop",
    "create_marker",
    "describe_stop",
    "end_active_agent",
    "end_session",
    "find_breach",
    "gate_breached",
    "generate_session_id",
    "get_archive_dir",
    "get_project_root",
    "get_wiggum_dir",
    "hash_file",
    "record_chunk_iteration",
    "record_gate",
    "recompute_stats",
    "reset_chunk_counter",
    "reset_gate_counter",
    "set_agent_status",
    "set_project_root",
    "set_iteration",
    "set_task",
    "start_active_agent",
    "trigger_stop",
    "update_agent_progress",
    "upsert_chunk",
]
