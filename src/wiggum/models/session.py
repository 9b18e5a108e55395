"""Session marker model for crash recovery and resume.

The marker is a small companion to the Status Document. It is not read by
the dashboard or the guard; it records enough to tell where an interrupted
session left off.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Checkpoint(BaseModel):
    """A named point in the session the loop may resume from."""

    model_config = ConfigDict(extra="forbid")

    label: str = Field(description="Checkpoint label")
    created_at: datetime = Field(default_factory=datetime.now)
    phase: str = Field(default="", description="Phase at checkpoint time")
    chunk_id: str = Field(default="", description="Chunk being worked on, if any")
    commit: str = Field(default="", description="HEAD commit at checkpoint time")


class SessionMarker(BaseModel):
    """Session marker written to .wiggum/session.json.

    Attributes:
        session_id: Unique session identifier (format: YYYYMMDD-HHMMSS-xxxxxx).
        started_at: When the session was initialized.
        starting_commit: HEAD commit at session start.
        spec_hash: SHA256 of the spec file the session implements, if given.
        plan_approved: Mirrors plan.approved at the last checkpoint.
        last_checkpoint: Label of the most recent checkpoint.
        last_chunk_id: Chunk id of the most recent checkpoint.
        last_phase: Phase of the most recent checkpoint.
        checkpoints: All checkpoints in creation order.
    """

    model_config = ConfigDict(extra="forbid")

    session_id: str = Field(description="Unique session identifier")
    started_at: datetime = Field(default_factory=datetime.now)
    starting_commit: str = ""
    spec_hash: str = ""
    plan_approved: bool = False
    last_checkpoint: str = ""
    last_chunk_id: str = ""
    last_phase: str = ""
    checkpoints: list[Checkpoint] = Field(default_factory=list)
