"""CLI integration tests for wiggum."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from wiggum import __version__
from wiggum.cli import app
from wiggum.core import SessionStore, StatusStore


def invoke(runner: CliRunner, root: Path, *args: str):
    return runner.invoke(app, ["--root", str(root), *args])


def invoke_json(runner: CliRunner, root: Path, *args: str) -> tuple[int, dict]:
    result = runner.invoke(app, ["--root", str(root), "--json", *args])
    return result.exit_code, json.loads(result.stdout)


@pytest.fixture
def session(runner: CliRunner, tmp_path: Path) -> Path:
    """Project root with an initialized session."""
    result = invoke(runner, tmp_path, "init")
    assert result.exit_code == 0, result.stdout
    return tmp_path


def load(root: Path):
    return StatusStore.for_dir(root / ".wiggum").load()


@pytest.mark.cli
class TestVersionCommand:
    """Tests for --version flag."""

    def test_version_shows_version(self, runner: CliRunner) -> None:
        """--version should display version string."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "wiggum" in result.stdout
        assert __version__ in result.stdout

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        """--help should list the enforcement commands."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for name in ("init", "check-gate", "check-chunk", "is-stopped", "dashboard"):
            assert name in result.stdout


@pytest.mark.cli
class TestInit:
    """Tests for wiggum init."""

    def test_init_creates_session(self, runner: CliRunner, tmp_path: Path) -> None:
        """init writes the status document, marker and config template."""
        result = invoke(runner, tmp_path, "init")
        assert result.exit_code == 0
        assert "Session started" in result.stdout

        wiggum_dir = tmp_path / ".wiggum"
        assert (wiggum_dir / "config.toml").exists()
        assert SessionStore.for_dir(wiggum_dir).exists()
        doc = load(tmp_path)
        assert doc.session.phase == "plan"
        assert doc.limits.max_gate_failures == 3

    def test_init_uses_config_limits(self, runner: CliRunner, tmp_path: Path) -> None:
        """Limits are copied from an existing config.toml."""
        wiggum_dir = tmp_path / ".wiggum"
        wiggum_dir.mkdir()
        (wiggum_dir / "config.toml").write_text("[limits]\nmax_gate_failures = 2\n")
        assert invoke(runner, tmp_path, "init").exit_code == 0
        assert load(tmp_path).limits.max_gate_failures == 2

    def test_init_invalid_config(self, runner: CliRunner, tmp_path: Path) -> None:
        """A bad config.toml fails init without writing a session."""
        wiggum_dir = tmp_path / ".wiggum"
        wiggum_dir.mkdir()
        (wiggum_dir / "config.toml").write_text("[limits]\nmax_gate_failures = 0\n")
        result = invoke(runner, tmp_path, "init")
        assert result.exit_code == 1
        assert not StatusStore.for_dir(wiggum_dir).exists()

    def test_init_refuses_existing_session(self, runner: CliRunner, session: Path) -> None:
        """A second init needs --force."""
        result = invoke(runner, session, "init")
        assert result.exit_code == 1
        assert "already active" in result.stdout

    def test_init_force_archives(self, runner: CliRunner, session: Path) -> None:
        """--force archives the previous session and starts fresh."""
        invoke(runner, session, "phase", "implement")
        result = invoke(runner, session, "init", "--force")
        assert result.exit_code == 0
        assert len(list((session / ".wiggum" / "archive").iterdir())) == 2
        assert load(session).session.phase == "plan"

    def test_init_missing_spec(self, runner: CliRunner, tmp_path: Path) -> None:
        """A spec path that does not exist is an error."""
        result = invoke(runner, tmp_path, "init", "--spec", str(tmp_path / "nope.md"))
        assert result.exit_code == 1

    def test_init_json(self, runner: CliRunner, tmp_path: Path) -> None:
        """--json reports the session id and limits."""
        code, data = invoke_json(runner, tmp_path, "init")
        assert code == 0
        assert data["limits"] == {"max_iterations_per_chunk": 5, "max_gate_failures": 3}
        assert data["dashboard_launched"] is False

    def test_root_defaults_to_cwd(self, runner: CliRunner, wiggum_root: Path) -> None:
        """Without --root the current directory is the project root."""
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0
        assert (wiggum_root / ".wiggum" / "status.json").exists()


@pytest.mark.cli
class TestNoSession:
    """Commands against a missing document."""

    @pytest.mark.parametrize(
        "args",
        [
            ["phase", "implement"],
            ["gate", "test", "failed"],
            ["check-chunk", "1"],
            ["status"],
            ["clear", "--yes"],
        ],
    )
    def test_exits_1(self, runner: CliRunner, tmp_path: Path, args: list[str]) -> None:
        """Mutators and readers exit 1 when there is no session."""
        result = invoke(runner, tmp_path, *args)
        assert result.exit_code == 1
        assert "No active session" in result.stdout

    def test_is_stopped_allows(self, runner: CliRunner, tmp_path: Path) -> None:
        """The guard allows when there is no session."""
        assert invoke(runner, tmp_path, "is-stopped").exit_code == 0

    def test_corrupt_document(self, runner: CliRunner, tmp_path: Path) -> None:
        """A corrupt document is an error for the guard, not 'no session'."""
        wiggum_dir = tmp_path / ".wiggum"
        wiggum_dir.mkdir()
        (wiggum_dir / "status.json").write_text("{")
        assert invoke(runner, tmp_path, "is-stopped").exit_code == 1
        assert invoke(runner, tmp_path, "phase", "plan").exit_code == 1


@pytest.mark.cli
class TestStateCommands:
    """Tests for the state-recording commands."""

    def test_phase(self, runner: CliRunner, session: Path) -> None:
        """phase sets session.phase."""
        result = invoke(runner, session, "phase", "implement")
        assert result.exit_code == 0
        assert load(session).session.phase == "implement"

    def test_invalid_phase(self, runner: CliRunner, session: Path) -> None:
        """An unknown phase is rejected and the document is unchanged."""
        result = invoke(runner, session, "phase", "deploy")
        assert result.exit_code == 1
        assert "Invalid phase" in result.stdout
        assert load(session).session.phase == "plan"

    def test_iteration(self, runner: CliRunner, session: Path) -> None:
        """iteration takes a non-negative integer."""
        assert invoke(runner, session, "iteration", "3").exit_code == 0
        assert load(session).session.iteration == 3
        assert invoke(runner, session, "iteration", "abc").exit_code == 1
        assert invoke(runner, session, "iteration", "-1").exit_code == 1

    def test_task(self, runner: CliRunner, session: Path) -> None:
        """task sets the current task and counts attempts."""
        result = invoke(runner, session, "task", "Build API", "in_progress", "REST endpoints")
        assert result.exit_code == 0
        task = load(session).current_task
        assert task.name == "Build API"
        assert task.description == "REST endpoints"
        assert task.attempt == 1

    def test_chunk(self, runner: CliRunner, session: Path) -> None:
        """chunk adds a chunk with its files."""
        result = invoke(runner, session, "chunk", "1", "Models", "in_progress", "-f", "models.py")
        assert result.exit_code == 0
        doc = load(session)
        assert doc.chunks[0].name == "Models"
        assert doc.chunks[0].files == ["models.py"]
        assert doc.stats.chunks_total == 1

    def test_chunk_invalid_id(self, runner: CliRunner, session: Path) -> None:
        """A non-integer chunk id exits 1."""
        assert invoke(runner, session, "chunk", "one", "Models", "pending").exit_code == 1

    def test_commit(self, runner: CliRunner, session: Path) -> None:
        """commit appends a commit record."""
        result = invoke(runner, session, "commit", "abc1234", "Add models", "--files", "3")
        assert result.exit_code == 0
        doc = load(session)
        assert doc.commits[0].files == 3
        assert doc.stats.commits_made == 1

    def test_plan(self, runner: CliRunner, session: Path) -> None:
        """plan-approve and plan-requirement update the plan."""
        assert invoke(runner, session, "plan-requirement", "must_have", "Login").exit_code == 0
        assert invoke(runner, session, "plan-approve", "Two endpoints").exit_code == 0
        plan = load(session).plan
        assert plan.approved
        assert plan.summary == "Two endpoints"
        assert plan.must_have == ["Login"]

    def test_invalid_bucket(self, runner: CliRunner, session: Path) -> None:
        """Unknown requirement buckets are rejected."""
        assert invoke(runner, session, "plan-requirement", "maybe", "x").exit_code == 1


@pytest.mark.cli
class TestAgentCommands:
    """Tests for agent tracking commands."""

    def test_agent_lifecycle(self, runner: CliRunner, session: Path) -> None:
        """start, progress and end move the agent into history."""
        assert invoke(runner, session, "agent-start", "researcher", "Read code").exit_code == 0
        assert invoke(runner, session, "agent-progress", "Halfway").exit_code == 0
        assert load(session).active_agent.progress == "Halfway"

        result = invoke(runner, session, "agent-end")
        assert result.exit_code == 0
        doc = load(session)
        assert doc.active_agent is None
        assert doc.agent_history[-1].status == "completed"
        assert doc.agent_history[-1].final_progress == "Halfway"

    def test_start_interrupts_previous(self, runner: CliRunner, session: Path) -> None:
        """Starting a second agent marks the first interrupted."""
        invoke(runner, session, "agent-start", "researcher", "Read code")
        result = invoke(runner, session, "agent-start", "test-writer", "Write tests")
        assert "interrupted" in result.stdout
        assert load(session).agent_history[-1].status == "interrupted"

    def test_end_wrong_owner(self, runner: CliRunner, session: Path) -> None:
        """An agent cannot end a run it does not own."""
        invoke(runner, session, "agent-start", "researcher", "Read code")
        result = invoke(runner, session, "agent-end", "completed", "--agent", "other")
        assert result.exit_code == 1
        assert load(session).active_agent is not None

    def test_end_without_active_agent(self, runner: CliRunner, session: Path) -> None:
        """Ending with nothing active is a no-op."""
        result = invoke(runner, session, "agent-end")
        assert result.exit_code == 0
        assert "No active agent" in result.stdout

    def test_agent_status(self, runner: CliRunner, session: Path) -> None:
        """agent-status updates the rollup."""
        result = invoke(
            runner, session, "agent-status", "code-reviewer", "done", "--blockers", "2"
        )
        assert result.exit_code == 0
        agent = load(session).find_agent("code-reviewer")
        assert agent is not None
        assert agent.blockers == 2


@pytest.mark.cli
class TestEnforcement:
    """Gate and chunk limits through the CLI."""

    def test_check_gate_blocks_at_limit(self, runner: CliRunner, session: Path) -> None:
        """The third consecutive failure exits 2."""
        assert invoke(runner, session, "check-gate", "test", "failed").exit_code == 0
        assert invoke(runner, session, "check-gate", "test", "failed").exit_code == 0
        result = invoke(runner, session, "check-gate", "test", "failed")
        assert result.exit_code == 2
        assert "STOPPED" in result.stdout
        assert "gate: test" in result.stdout

    def test_gate_never_blocks(self, runner: CliRunner, session: Path) -> None:
        """gate records the breach but exits 0."""
        for _ in range(2):
            invoke(runner, session, "gate", "lint", "failed")
        result = invoke(runner, session, "gate", "lint", "failed", "E501", "ruff check .")
        assert result.exit_code == 0
        assert "Stop condition triggered" in result.stdout
        doc = load(session)
        assert doc.stop_conditions.active
        assert doc.gates.lint.command == "ruff check ."
        assert invoke(runner, session, "is-stopped").exit_code == 2

    def test_check_chunk_blocks_above_limit(self, runner: CliRunner, session: Path) -> None:
        """The sixth iteration on a chunk exits 2."""
        for _ in range(5):
            assert invoke(runner, session, "check-chunk", "1").exit_code == 0
        result = invoke(runner, session, "check-chunk", "1")
        assert result.exit_code == 2
        assert "Chunk 1 exceeded iteration limit (6/5)" in result.stdout

    def test_unknown_gate(self, runner: CliRunner, session: Path) -> None:
        """Unknown gates exit 1, not 2."""
        result = invoke(runner, session, "check-gate", "deploy", "failed")
        assert result.exit_code == 1
        assert "Unknown gate" in result.stdout

    def test_blocked_json(self, runner: CliRunner, session: Path) -> None:
        """A blocked check reports the stop details as JSON."""
        for _ in range(2):
            invoke(runner, session, "check-gate", "build", "failed")
        code, data = invoke_json(runner, session, "check-gate", "build", "failed")
        assert code == 2
        assert data["stopped"] is True
        assert data["reason"] == "gate_failure"
        assert data["details"] == {"gate": "build", "count": 3, "limit": 3}

    def test_reset_gate_lifts_stop(self, runner: CliRunner, session: Path) -> None:
        """Resetting the breached gate lifts its stop."""
        for _ in range(3):
            invoke(runner, session, "gate", "test", "failed")
        result = invoke(runner, session, "reset-gate", "test")
        assert result.exit_code == 0
        assert invoke(runner, session, "is-stopped").exit_code == 0
        assert load(session).gate_failure_counts.test == 0

    def test_reset_chunk(self, runner: CliRunner, session: Path) -> None:
        """reset-chunk zeroes the counter."""
        for _ in range(6):
            invoke(runner, session, "check-chunk", "2")
        assert invoke(runner, session, "reset-chunk", "2").exit_code == 0
        doc = load(session)
        assert doc.chunk_iteration_counts["2"] == 0
        assert not doc.stop_conditions.active

    def test_reset_keeps_other_breach(self, runner: CliRunner, session: Path) -> None:
        """A reset leaves the stop active while another counter is breached."""
        for _ in range(3):
            invoke(runner, session, "gate", "test", "failed")
        for _ in range(6):
            invoke(runner, session, "check-chunk", "1")
        result = invoke(runner, session, "reset-gate", "test")
        assert result.exit_code == 0
        assert "Still stopped" in result.stdout
        assert load(session).stop_conditions.reason == "chunk_iterations"


@pytest.mark.cli
class TestStopCommands:
    """Tests for is-stopped, stop and clear."""

    def test_manual_stop_and_clear(self, runner: CliRunner, session: Path) -> None:
        """stop blocks the guard until clear."""
        assert invoke(runner, session, "is-stopped").exit_code == 0
        assert invoke(runner, session, "stop", "lunch").exit_code == 0

        result = invoke(runner, session, "is-stopped")
        assert result.exit_code == 2
        assert "Manual stop: lunch" in result.stdout

        result = invoke(runner, session, "clear", "--yes")
        assert result.exit_code == 0
        assert "Stop condition cleared" in result.stdout
        assert invoke(runner, session, "is-stopped").exit_code == 0

    def test_clear_keeps_counters(self, runner: CliRunner, session: Path) -> None:
        """clear lifts the stop but does not reset counters."""
        for _ in range(3):
            invoke(runner, session, "gate", "test", "failed")
        invoke(runner, session, "clear", "--yes")
        doc = load(session)
        assert not doc.stop_conditions.active
        assert doc.gate_failure_counts.test == 3

    def test_clear_when_not_stopped(self, runner: CliRunner, session: Path) -> None:
        """clear with nothing to clear exits 0."""
        result = invoke(runner, session, "clear", "--yes")
        assert result.exit_code == 0
        assert "No active stop condition" in result.stdout


@pytest.mark.cli
class TestStatusCommand:
    """Tests for wiggum status."""

    def test_status_text(self, runner: CliRunner, session: Path) -> None:
        """status shows phase, counters and the stop state."""
        invoke(runner, session, "gate", "lint", "failed")
        result = invoke(runner, session, "status")
        assert result.exit_code == 0
        assert "Phase: plan" in result.stdout
        assert "Gate failures" in result.stdout
        assert "1/3" in result.stdout
        assert "Not stopped" in result.stdout

    def test_status_json(self, runner: CliRunner, session: Path) -> None:
        """status --json exposes counters and stop conditions."""
        for _ in range(6):
            invoke(runner, session, "check-chunk", "3")
        code, data = invoke_json(runner, session, "status")
        assert code == 0
        assert data["chunk_iteration_counts"] == {"3": 6}
        assert data["stop_conditions"]["active"] is True
        assert data["stop_conditions"]["reason"] == "chunk_iterations"
        assert data["stats"]["total_iterations"] == 6


@pytest.mark.cli
class TestSessionCommands:
    """Tests for checkpoint, resume and end."""

    def test_checkpoint_and_resume(self, runner: CliRunner, session: Path) -> None:
        """resume reports the last checkpoint."""
        invoke(runner, session, "phase", "implement")
        invoke(runner, session, "chunk", "2", "API", "in_progress")
        assert invoke(runner, session, "checkpoint", "api-started").exit_code == 0

        code, data = invoke_json(runner, session, "resume")
        assert code == 0
        assert data["last_checkpoint"] == "api-started"
        assert data["last_chunk_id"] == "2"
        assert data["last_phase"] == "implement"
        assert data["stopped"] is False

        result = invoke(runner, session, "resume")
        assert "Ready to resume at phase implement" in result.stdout

    def test_end_archives(self, runner: CliRunner, session: Path) -> None:
        """end archives both documents; later commands see no session."""
        result = invoke(runner, session, "end")
        assert result.exit_code == 0
        assert "Session ended" in result.stdout
        assert not (session / ".wiggum" / "status.json").exists()
        assert len(list((session / ".wiggum" / "archive").iterdir())) == 2
        assert invoke(runner, session, "status").exit_code == 1

    def test_end_abort_records_checkpoint(self, runner: CliRunner, session: Path) -> None:
        """--abort leaves an 'aborted' checkpoint in the archived marker."""
        assert invoke(runner, session, "end", "--abort").exit_code == 0
        archive_dir = session / ".wiggum" / "archive"
        archived = [p for p in archive_dir.iterdir() if p.name.endswith("session.json")]
        marker = SessionStore(archived[0]).load()
        assert marker.last_checkpoint == "aborted"

    def test_end_delete(self, runner: CliRunner, session: Path) -> None:
        """--delete removes the documents without archiving."""
        assert invoke(runner, session, "end", "--delete").exit_code == 0
        assert not (session / ".wiggum" / "archive").exists()

    def test_end_without_session(self, runner: CliRunner, tmp_path: Path) -> None:
        """end with nothing to end exits 1."""
        assert invoke(runner, tmp_path, "end").exit_code == 1


@pytest.mark.cli
class TestArgumentHandling:
    """Argument errors exit 1, leaving exit 2 to stop conditions."""

    def test_gate_output_starting_with_dashes(self, runner: CliRunner, session: Path) -> None:
        """Gate output that looks like an option is stored verbatim."""
        result = invoke(runner, session, "check-gate", "test", "failed", "--- FAIL: TestLogin")
        assert result.exit_code == 0
        assert load(session).gates.test.output == "--- FAIL: TestLogin"

    def test_negative_chunk_id(self, runner: CliRunner, session: Path) -> None:
        """A negative chunk id is counted, not taken for an option."""
        assert invoke(runner, session, "check-chunk", "-1").exit_code == 0
        assert load(session).chunk_iteration_counts == {"-1": 1}
        assert invoke(runner, session, "is-stopped").exit_code == 0

    def test_missing_argument(self, runner: CliRunner, session: Path) -> None:
        """A missing positional is an error, not a block."""
        assert invoke(runner, session, "phase").exit_code == 1
        assert invoke(runner, session, "check-gate", "test").exit_code == 1

    def test_unknown_option(self, runner: CliRunner, session: Path) -> None:
        """Unknown options exit 1."""
        assert invoke(runner, session, "status", "--bogus").exit_code == 1
        assert invoke(runner, session, "--bogus", "status").exit_code == 1

    def test_unknown_command(self, runner: CliRunner, session: Path) -> None:
        """An unknown command exits 1."""
        assert invoke(runner, session, "deploy").exit_code == 1
