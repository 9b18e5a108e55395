"""Helpers shared by command implementations."""

from collections.abc import Callable
from datetime import datetime
from typing import Any, NoReturn, TypeVar

import typer

from ..constants import EXIT_BLOCKED, EXIT_ERROR
from ..core import (
    DocumentMissingError,
    MutationError,
    SessionStore,
    StatusStore,
    StoreError,
    apply,
    describe_stop,
    get_wiggum_dir,
)
from ..models import StatusDocument
from ..output import get_output_context

T = TypeVar("T")

NO_SESSION = "No active session. Run 'wiggum init' first."


def fail(message: str, code: int = EXIT_ERROR) -> NoReturn:
    """Print an error and exit."""
    get_output_context().error(message)
    raise typer.Exit(code)


def get_status_store() -> StatusStore:
    return StatusStore.for_dir(get_wiggum_dir())


def get_session_store() -> SessionStore:
    return SessionStore.for_dir(get_wiggum_dir())


def load_document(store: StatusStore | None = None) -> StatusDocument:
    """Load the status document, exiting 1 if it is missing or corrupt."""
    store = store or get_status_store()
    try:
        return store.load()
    except DocumentMissingError:
        fail(NO_SESSION)
    except StoreError as e:
        fail(str(e))


def mutate(mutator: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run one mutator through the load-mutate-save cycle.

    Exits 1 on a missing or corrupt document, a rejected mutation or a
    failed save.
    """
    try:
        return apply(get_status_store(), mutator, *args, **kwargs)
    except DocumentMissingError:
        fail(NO_SESSION)
    except (StoreError, MutationError) as e:
        fail(str(e))


def parse_int(value: str, what: str, minimum: int | None = None) -> int:
    """Parse an integer argument, exiting 1 (not 2) on bad input."""
    try:
        number = int(value)
    except ValueError:
        fail(f"Invalid {what} '{value}': expected an integer")
    if minimum is not None and number < minimum:
        fail(f"Invalid {what} '{value}': must be >= {minimum}")
    return number


def exit_blocked(
    reason: str, details: dict[str, Any], triggered_at: datetime | None = None
) -> NoReturn:
    """Report an active stop condition with its details and exit 2."""
    message = describe_stop(reason, details)
    get_output_context().blocked(
        message,
        {
            "stopped": True,
            "reason": reason,
            "message": message,
            "details": details,
            "triggered_at": triggered_at,
        },
        "Reset the counter (reset-gate / reset-chunk) or run 'wiggum clear' to resume.",
    )
    raise typer.Exit(EXIT_BLOCKED)
