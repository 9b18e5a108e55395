"""Shared test fixtures for wiggum tests."""

import os
import subprocess
from collections.abc import Generator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from wiggum.constants import NO_DASHBOARD_ENV
from wiggum.core import StatusStore, get_wiggum_dir, set_project_root
from wiggum.models import StatusDocument, new_status_document
from wiggum.output import set_output_context


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _reset_globals(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep the CLI's global root and output context from leaking between tests."""
    monkeypatch.setenv(NO_DASHBOARD_ENV, "1")
    monkeypatch.delenv("TMUX", raising=False)
    yield
    set_project_root(None)
    set_output_context(None)


@pytest.fixture
def temp_git_repo(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary git repository with one commit.

    Changes cwd to the repo directory for the duration of the test.
    """
    for args in (
        ["git", "init"],
        ["git", "config", "user.email", "test@test.com"],
        ["git", "config", "user.name", "Test User"],
    ):
        subprocess.run(args, cwd=tmp_path, check=True, capture_output=True)
    (tmp_path / "README.md").write_text("# Test\n")
    subprocess.run(["git", "add", "."], cwd=tmp_path, check=True, capture_output=True)
    subprocess.run(
        ["git", "commit", "-m", "Initial commit"],
        cwd=tmp_path,
        check=True,
        capture_output=True,
    )

    original_cwd = os.getcwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(original_cwd)


@pytest.fixture
def wiggum_root(tmp_path: Path) -> Generator[Path, None, None]:
    """Temporary project root; changes cwd to it for the duration of the test."""
    original_cwd = os.getcwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(original_cwd)


@pytest.fixture
def status_store(tmp_path: Path) -> StatusStore:
    """Store for a status document under tmp_path/.wiggum (not yet written)."""
    return StatusStore.for_dir(get_wiggum_dir(tmp_path))


@pytest.fixture
def active_doc() -> StatusDocument:
    """Document as `wiggum init` writes it with default limits."""
    doc = new_status_document()
    doc.session.phase = "plan"
    return doc


@pytest.fixture
def live_store(status_store: StatusStore, active_doc: StatusDocument) -> StatusStore:
    """status_store with an active session already saved."""
    status_store.save(active_doc)
    return status_store
