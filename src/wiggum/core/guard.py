"""Execution guard consulted by the loop harness before risky actions.

The guard only reads the Status Document. A missing document means there is
no active session and nothing to enforce, so the action is allowed. A
corrupt document is not treated as missing: the load error propagates so a
crash during write is never mistaken for "no session".
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .enforcement import describe_stop
from .store import DocumentMissingError, StatusStore


@dataclass(frozen=True)
class Allow:
    """The loop may proceed."""

    blocked: bool = field(default=False, init=False)


@dataclass(frozen=True)
class Block:
    """The loop must halt until the stop condition is cleared."""

    reason: str
    details: dict[str, Any] = field(default_factory=dict)
    triggered_at: datetime | None = None
    blocked: bool = field(default=True, init=False)

    @property
    def message(self) -> str:
        """Human-readable description of why the loop is blocked."""
        return describe_stop(self.reason, self.details)


GuardResult = Allow | Block


def check(store: StatusStore) -> GuardResult:
    """Return Block iff the stop condition is active.

    Raises:
        DocumentCorruptError: If the status document exists but is unreadable
    """
    try:
        doc = store.load()
    except DocumentMissingError:
        return Allow()

    sc = doc.stop_conditions
    if sc.active:
        return Block(reason=sc.reason, details=dict(sc.details), triggered_at=sc.triggered_at)
    return Allow()
