"""Wiggum CLI: session state and enforcement for autonomous coding loops."""

from pathlib import Path

import click
import typer
from typer.core import TyperGroup

from wiggum import __version__

from .commands import (
    agent_end,
    agent_progress,
    agent_start,
    agent_status,
    check_chunk,
    check_gate,
    checkpoint,
    chunk,
    clear,
    commit,
    dashboard,
    end,
    gate,
    init,
    is_stopped,
    iteration,
    phase,
    plan_approve,
    plan_requirement,
    reset_chunk,
    reset_gate,
    resume,
    status,
    stop,
    task,
)
from .constants import EXIT_ERROR
from .core import set_project_root
from .logging import configure_logging
from .output import OutputContext, set_output_context


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"wiggum {__version__}")
        raise typer.Exit()


class WiggumGroup(TyperGroup):
    """Command group that reports argument errors as exit 1.

    Exit 2 tells the loop harness it is blocked by a stop condition, so a
    bad or missing argument must not produce it.
    """

    def make_context(self, info_name, args, parent=None, **extra):
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            e.exit_code = EXIT_ERROR
            raise

    def invoke(self, ctx: click.Context):
        # Subcommand arguments are parsed here, after the group context exists.
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = EXIT_ERROR
            raise


# Positionals may be negative numbers or free text starting with "-"
# (gate output such as "--- FAIL"), so unknown options are kept as arguments.
POSITIONAL_TEXT = {"ignore_unknown_options": True}

app = typer.Typer(
    name="wiggum",
    cls=WiggumGroup,
    help="Session state and enforcement for autonomous coding loops",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    root: Path | None = typer.Option(
        None,
        "--root",
        "-C",
        help="Project root containing .wiggum (defaults to current directory)",
        file_okay=False,
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format for automation",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
) -> None:
    """Wiggum - session state and enforcement for autonomous coding loops.

    Exit codes: 0 ok, 1 error, 2 blocked by a stop condition.
    """
    console = configure_logging(
        verbosity=verbose,
        quiet=quiet,
        no_color=no_color,
    )
    set_output_context(OutputContext(console=console, json_mode=json_output))
    set_project_root(root.resolve() if root is not None else None)


# Session lifecycle
app.command()(init)
app.command(context_settings=POSITIONAL_TEXT)(checkpoint)
app.command()(resume)
app.command()(end)

# State
app.command()(phase)
app.command(context_settings=POSITIONAL_TEXT)(iteration)
app.command(context_settings=POSITIONAL_TEXT)(task)
app.command(context_settings=POSITIONAL_TEXT)(chunk)
app.command(context_settings=POSITIONAL_TEXT)(commit)
app.command("plan-approve", context_settings=POSITIONAL_TEXT)(plan_approve)
app.command("plan-requirement", context_settings=POSITIONAL_TEXT)(plan_requirement)

# Agents
app.command("agent-start", context_settings=POSITIONAL_TEXT)(agent_start)
app.command("agent-progress", context_settings=POSITIONAL_TEXT)(agent_progress)
app.command("agent-end")(agent_end)
app.command("agent-status")(agent_status)

# Gates, chunks and enforcement
app.command(context_settings=POSITIONAL_TEXT)(gate)
app.command("check-gate", context_settings=POSITIONAL_TEXT)(check_gate)
app.command("check-chunk", context_settings=POSITIONAL_TEXT)(check_chunk)
app.command("reset-gate")(reset_gate)
app.command("reset-chunk", context_settings=POSITIONAL_TEXT)(reset_chunk)

# Stop condition
app.command("is-stopped")(is_stopped)
app.command(context_settings=POSITIONAL_TEXT)(stop)
app.command()(clear)

# Observation
app.command()(status)
app.command()(dashboard)


if __name__ == "__main__":
    app()
