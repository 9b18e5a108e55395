"""Command output for wiggum.

The loop harness reads two things from every invocation: the exit code and,
with --json, exactly one JSON object on stdout. Human-readable text goes to
the rich console and is dropped entirely in JSON mode, so a command may print
progress lines freely and still end with a single parseable result.
"""

import json
from dataclasses import dataclass
from typing import Any

from rich.console import Console


@dataclass
class OutputContext:
    """Where a command's result goes: rich text or one JSON object."""

    console: Console
    json_mode: bool = False

    def print(self, message: str, style: str | None = None) -> None:
        """Print a text line. Suppressed in JSON mode."""
        if not self.json_mode:
            self.console.print(message, style=style)

    def print_json(self, data: dict[str, Any]) -> None:
        """Write data as the JSON result. Datetimes become ISO strings via str()."""
        if self.json_mode:
            print(json.dumps(data, indent=2, default=str))

    def result(self, data: dict[str, Any], message: str = "") -> None:
        """Emit a command's result: data in JSON mode, message otherwise."""
        if self.json_mode:
            self.print_json(data)
        elif message:
            self.console.print(message)

    def _report(self, key: str, message: str, data: dict[str, Any] | None, style: str) -> None:
        if self.json_mode:
            self.print_json({key: message, **(data or {})})
        else:
            self.console.print(f"[{style}]{message}[/{style}]")

    def error(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Report a failure; the caller exits 1."""
        if self.json_mode:
            self._report("error", message, data, "red")
        else:
            self.console.print(f"[red]Error: {message}[/red]")

    def success(self, message: str, data: dict[str, Any] | None = None) -> None:
        self._report("success", message, data, "green")

    def warning(self, message: str, data: dict[str, Any] | None = None) -> None:
        self._report("warning", message, data, "yellow")

    def blocked(self, summary: str, data: dict[str, Any], hint: str) -> None:
        """Report an active stop condition; the caller exits 2.

        In JSON mode data is the whole result. In text mode the summary is
        followed by one indented line per entry of data["details"] and the hint.
        """
        if self.json_mode:
            self.print_json(data)
            return
        self.console.print(f"[bold red]STOPPED:[/bold red] {summary}")
        for key, value in data.get("details", {}).items():
            self.console.print(f"  {key}: {value}")
        self.console.print(hint)


# Set by the cli.py main callback for the duration of one invocation
_ctx: OutputContext | None = None


def get_output_context() -> OutputContext:
    """Get the current output context.

    Returns a text-mode context on a fresh console when called outside the CLI
    (tests, the dashboard module run directly).
    """
    if _ctx is None:
        return OutputContext(Console())
    return _ctx


def set_output_context(ctx: OutputContext | None) -> None:
    """Set (or with None, clear) the context for the current invocation."""
    global _ctx
    _ctx = ctx
