"""Stop-condition enforcement.

Compares the per-gate failure counters and per-chunk iteration counters
against the session limits and maintains `stop_conditions`. The two
comparators differ on purpose:

- a gate is in breach once its consecutive failures reach the limit
  (`count >= max_gate_failures`), because the check runs after a failure
  has been recorded;
- a chunk is in breach only once its iterations exceed the limit
  (`count > max_iterations_per_chunk`), because the check runs after an
  attempt that may still succeed.

The functions here modify the document they are given in place. Mutators
call them on their own working copy.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..models import GATE_NAMES, StatusDocument

logger = logging.getLogger(__name__)

GATE_FAILURE = "gate_failure"
CHUNK_ITERATIONS = "chunk_iterations"
MANUAL = "manual"

AUTOMATIC_REASONS = frozenset({GATE_FAILURE, CHUNK_ITERATIONS})


@dataclass(frozen=True)
class Breach:
    """A counter that has crossed its limit."""

    reason: str
    details: dict[str, Any]

    @property
    def key(self) -> str:
        """Identify which counter is in breach (gate name or chunk id)."""
        if self.reason == GATE_FAILURE:
            return str(self.details.get("gate", ""))
        return str(self.details.get("chunk_id", ""))


@dataclass
class EnforcementResult:
    """Outcome of recording a gate result or a chunk iteration.

    Attributes:
        count: Counter value after the update.
        limit: Limit the counter was compared against.
        breached: True if this counter is over its limit after the update.
        newly_triggered: True if this update flipped the stop flag on.
        stop_active: Value of stop_conditions.active after the update.
        details: The breach details, when breached.
    """

    count: int
    limit: int
    breached: bool = False
    newly_triggered: bool = False
    stop_active: bool = False
    details: dict[str, Any] = field(default_factory=dict)


def gate_breached(count: int, limit: int) -> bool:
    """Return True if consecutive gate failures have reached the limit."""
    return count >= limit


def chunk_breached(count: int, limit: int) -> bool:
    """Return True if chunk iterations have exceeded the limit."""
    return count > limit


def gate_breach(doc: StatusDocument, gate: str) -> Breach | None:
    """Return the breach for one gate, if its counter is over the limit."""
    count = doc.gate_failure_counts.get(gate)
    limit = doc.limits.max_gate_failures
    if not gate_breached(count, limit):
        return None
    return Breach(GATE_FAILURE, {"gate": gate, "count": count, "limit": limit})


def chunk_breach(doc: StatusDocument, chunk_id: str) -> Breach | None:
    """Return the breach for one chunk, if its counter is over the limit."""
    count = doc.chunk_iteration_counts.get(chunk_id, 0)
    limit = doc.limits.max_iterations_per_chunk
    if not chunk_breached(count, limit):
        return None
    return Breach(CHUNK_ITERATIONS, {"chunk_id": chunk_id, "count": count, "limit": limit})


def _chunk_sort_key(chunk_id: str) -> tuple[int, int | str]:
    # Numeric ids first in numeric order, anything else after
    return (0, int(chunk_id)) if chunk_id.isdigit() else (1, chunk_id)


def find_breach(doc: StatusDocument) -> Breach | None:
    """Scan every counter and return the first breach.

    Gates are checked in slot order, then chunks in id order.
    """
    for gate in GATE_NAMES:
        breach = gate_breach(doc, gate)
        if breach is not None:
            return breach
    for chunk_id in sorted(doc.chunk_iteration_counts, key=_chunk_sort_key):
        breach = chunk_breach(doc, chunk_id)
        if breach is not None:
            return breach
    return None


def set_stop(doc: StatusDocument, reason: str, details: dict[str, Any]) -> None:
    """Activate the stop condition, replacing reason and details."""
    sc = doc.stop_conditions
    sc.active = True
    sc.reason = reason
    sc.triggered_at = datetime.now()
    sc.details = dict(details)


def unset_stop(doc: StatusDocument) -> None:
    """Deactivate the stop condition and drop its details."""
    sc = doc.stop_conditions
    sc.active = False
    sc.reason = ""
    sc.triggered_at = None
    sc.details = {}


def _is_current_cause(doc: StatusDocument, breach: Breach) -> bool:
    sc = doc.stop_conditions
    if sc.reason != breach.reason:
        return False
    current = Breach(sc.reason, sc.details)
    return current.key == breach.key


def _current_breach(doc: StatusDocument) -> Breach | None:
    # The breach behind the active stop, if its counter is still over the limit
    sc = doc.stop_conditions
    key = Breach(sc.reason, sc.details).key
    if sc.reason == GATE_FAILURE and key in GATE_NAMES:
        return gate_breach(doc, key)
    if sc.reason == CHUNK_ITERATIONS and key:
        return chunk_breach(doc, key)
    return None


def apply_breach(doc: StatusDocument, breach: Breach) -> bool:
    """Record a breach in stop_conditions.

    An inactive stop is triggered. An active stop with the same cause has
    its details refreshed (the new count); an active stop with a different
    cause is left alone so its details stay intact.

    Returns:
        True if the stop condition was newly triggered
    """
    sc = doc.stop_conditions
    if not sc.active:
        set_stop(doc, breach.reason, breach.details)
        logger.warning(f"Stop condition triggered: {breach.reason} {breach.details}")
        return True

    if _is_current_cause(doc, breach):
        sc.details = dict(breach.details)
    else:
        logger.debug(
            f"Stop already active ({sc.reason}); not replacing with {breach.reason}"
        )
    return False


def reevaluate_stop(doc: StatusDocument) -> None:
    """Re-check an automatic stop after a counter was reset.

    Clears the stop if no counter is still in breach, or re-points it at the
    remaining breach. Manual stops are only lifted by clear_stop.
    """
    sc = doc.stop_conditions
    if not sc.active or sc.reason not in AUTOMATIC_REASONS:
        return

    current = _current_breach(doc)
    if current is not None:
        sc.details = dict(current.details)
        return

    breach = find_breach(doc)
    if breach is None:
        logger.info(f"Stop condition lifted: {sc.reason} no longer in breach")
        unset_stop(doc)
    else:
        logger.warning(f"Stop condition now held by {breach.reason} {breach.details}")
        set_stop(doc, breach.reason, breach.details)


def describe_stop(reason: str, details: dict[str, Any]) -> str:
    """Describe a stop condition in one human-readable sentence."""
    if reason == GATE_FAILURE and "gate" in details:
        text = f"Gate '{details['gate']}' failed too many times"
    elif reason == CHUNK_ITERATIONS and "chunk_id" in details:
        text = f"Chunk {details['chunk_id']} exceeded iteration limit"
    elif reason == MANUAL:
        message = details.get("message")
        return f"Manual stop: {message}" if message else "Manual stop"
    else:
        return reason or "unknown"

    if "count" in details and "limit" in details:
        text += f" ({details['count']}/{details['limit']})"
    return text
