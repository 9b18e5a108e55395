"""CLI command implementations for wiggum.

Each verb is a thin wrapper around exactly one mutator, the guard or a
session lifecycle step, separated from the CLI framework setup in cli.py.
"""

from .agents import agent_end, agent_progress, agent_start, agent_status
from .dashboard import dashboard
from .gates import check_chunk, check_gate, gate, reset_chunk, reset_gate
from .init import init
from .session import checkpoint, end, resume
from .state import chunk, commit, iteration, phase, plan_approve, plan_requirement, task
from .status import status
from .stop import clear, is_stopped, stop

__all__ = [
    "agent_end",
    "agent_progress",
    "agent_start",
    "agent_status",
    "check_chunk",
    "check_gate",
    "checkpoint",
    "chunk",
    "clear",
    "commit",
    "dashboard",
    "end",
    "gate",
    "init",
    "is_stopped",
    "iteration",
    "phase",
    "plan_approve",
    "plan_requirement",
    "reset_chunk",
    "reset_gate",
    "resume",
    "status",
    "stop",
    "task",
]
