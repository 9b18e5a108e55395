"""Tests for the Status Document models."""

import json

import pytest
from pydantic import ValidationError

from wiggum.models import (
    GATE_NAMES,
    Chunk,
    SessionMarker,
    StatusDocument,
    new_status_document,
)


@pytest.mark.unit
class TestStatusDocument:
    """Tests for StatusDocument validation and defaults."""

    def test_default_document(self) -> None:
        """The empty document is in standby with pending gates."""
        doc = new_status_document()
        assert doc.session.phase is None
        assert doc.active_agent is None
        assert all(result.status == "pending" for _, result in doc.gates.items())
        assert doc.limits.max_gate_failures == 3
        assert doc.limits.max_iterations_per_chunk == 5

    def test_serializes_every_section(self) -> None:
        """Every top-level section is written, null slots included."""
        data = json.loads(new_status_document().model_dump_json())
        assert set(data) == {
            "session",
            "plan",
            "current_task",
            "active_agent",
            "agent_history",
            "chunks",
            "gates",
            "gate_failure_counts",
            "chunk_iteration_counts",
            "stop_conditions",
            "limits",
            "agents",
            "commits",
            "stats",
        }
        assert data["active_agent"] is None
        assert list(data["gates"]) == list(GATE_NAMES)

    def test_empty_phase_is_standby(self) -> None:
        """An empty phase string loads as no phase."""
        doc = StatusDocument.model_validate({"session": {"phase": ""}})
        assert doc.session.phase is None

    def test_unknown_field_rejected(self) -> None:
        """Typos in a hand-edited document are errors."""
        with pytest.raises(ValidationError):
            StatusDocument.model_validate({"sesion": {}})

    def test_invalid_status_rejected(self) -> None:
        """Enumerated fields are checked on load and on assignment."""
        with pytest.raises(ValidationError):
            StatusDocument.model_validate({"gates": {"test": {"status": "green"}}})
        chunk = Chunk(id=1, name="Setup")
        with pytest.raises(ValidationError):
            chunk.status = "done"


@pytest.mark.unit
class TestLookups:
    """Tests for the lookup helpers."""

    def test_gate_lookup(self) -> None:
        """Gates are addressed by their fixed names only."""
        doc = new_status_document()
        assert doc.gates.get("lint") is doc.gates.lint
        with pytest.raises(KeyError):
            doc.gates.get("deploy")
        with pytest.raises(KeyError):
            doc.gate_failure_counts.set("deploy", 1)

    def test_find_chunk_by_string_id(self) -> None:
        """Chunks are found by the counter-key form of their id."""
        doc = new_status_document()
        doc.chunks.append(Chunk(id=3, name="API"))
        assert doc.find_chunk("3") is doc.chunks[0]
        assert doc.find_chunk(3) is doc.chunks[0]
        assert doc.find_chunk("4") is None


@pytest.mark.unit
class TestSessionMarker:
    """Tests for SessionMarker."""

    def test_defaults(self) -> None:
        """A marker needs only its id."""
        marker = SessionMarker(session_id="20260101-120000-abcdef")
        assert marker.checkpoints == []
        assert marker.plan_approved is False
