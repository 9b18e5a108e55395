"""Rich renderables for the status dashboard.

Everything here is a pure function of a StatusDocument (plus the animation
frame and the clock), so views can be rendered into a string console in
tests. There are five views keyed by phase: standby, plan, implement,
review and complete.
"""

from datetime import datetime, timedelta

from rich import box
from rich.align import Align
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.enforcement import describe_stop
from ..models import GATE_NAMES, StatusDocument

MINT = "#98D8C8"
BLUE = "#7EC8E3"
PEACH = "#FFCBA4"
PINK = "#FFB3BA"
LAVENDER = "#C9B1FF"
GRAY = "#9E9E9E"
DARK = "#2D2D2D"

TITLE_STYLE = f"bold {DARK} on {MINT}"
HEADER_STYLE = f"bold underline {BLUE}"
BANNER_STYLE = f"bold {DARK} on {PINK}"
PASSED_STYLE = f"bold {MINT}"
FAILED_STYLE = f"bold {PINK}"
RUNNING_STYLE = f"bold {PEACH}"
TEXT_STYLE = BLUE
DIM_STYLE = GRAY

BLINK_FRAMES = ["◉", "◎", "○", "◎", "◉", "●"]
DEFAULT_AGENTS = ["researcher", "test-writer", "code-reviewer", "code-simplifier"]

STANDBY = "standby"
MODES = (STANDBY, "plan", "implement", "review", "complete")


def blink(frame: int) -> str:
    """Get the blink glyph for an animation frame."""
    return BLINK_FRAMES[frame % len(BLINK_FRAMES)]


def truncate(text: str, width: int) -> str:
    """Shorten text to width characters, ending in '...' when cut."""
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def format_elapsed(start: datetime | None, now: datetime | None = None) -> str:
    """Format time since start as H:MM:SS, or --:--:-- when unknown."""
    if start is None:
        return "--:--:--"
    if now is None:
        now = datetime.now(start.tzinfo)
    seconds = max(0, int((now - start).total_seconds()))
    return str(timedelta(seconds=seconds))


def progress_bar(current: int, maximum: int, width: int = 15) -> str:
    """Render a fixed-width block progress bar, capped at full."""
    if maximum <= 0:
        maximum = 1
    filled = min(width, max(0, current * width // maximum))
    return "█" * filled + "░" * (width - filled)


def gate_icon(status: str) -> str:
    """Get the icon for a gate status."""
    return {"passed": "✓", "failed": "✗", "running": "◐", "skipped": "−"}.get(status, "○")


def chunk_icon(status: str) -> str:
    """Get the icon for a chunk status."""
    return {"completed": "●", "in_progress": "◐"}.get(status, "○")


def phase_label(phase: str | None) -> Text:
    """Get the styled label for a phase."""
    labels = {
        "plan": ("● Planning", RUNNING_STYLE),
        "implement": ("● Implementing", RUNNING_STYLE),
        "review": ("● Reviewing", RUNNING_STYLE),
        "complete": ("✓ Complete", PASSED_STYLE),
    }
    label, style = labels.get(phase or "", ("○ Standby", DIM_STYLE))
    return Text(label, style=style)


def task_status_label(status: str) -> Text:
    """Get the styled label for a task status."""
    labels = {
        "completed": ("Done", PASSED_STYLE),
        "failed": ("Failed", FAILED_STYLE),
        "in_progress": ("Running", RUNNING_STYLE),
    }
    label, style = labels.get(status, (status, DIM_STYLE))
    return Text(label, style=style)


def all_gates_passed(doc: StatusDocument) -> bool:
    """Return True if the review phase may consider the gates green.

    test and lint must not be failed or running; typecheck, build and
    format only count against the aggregate when explicitly failed.
    Pending and skipped never block.
    """
    for name in ("test", "lint"):
        if doc.gates.get(name).status in ("failed", "running"):
            return False
    return all(doc.gates.get(name).status != "failed" for name in ("typecheck", "build", "format"))


def render_mode(doc: StatusDocument, error: object | None = None) -> str:
    """Choose the view: standby on load errors or when no phase is set."""
    if error is not None or doc.session.phase is None:
        return STANDBY
    return doc.session.phase


# ----------------------------------------------------------------------------
# Building blocks
# ----------------------------------------------------------------------------


def section(title: str, body: RenderableType, active: bool = False) -> Group:
    """A headed box; active boxes use a heavy lavender border."""
    panel = Panel(
        body,
        box=box.HEAVY if active else box.ROUNDED,
        border_style=LAVENDER if active else GRAY,
        padding=(0, 1),
    )
    return Group(Text(f"◈ {title}", style=HEADER_STYLE), panel)


def stop_reason_text(doc: StatusDocument) -> str:
    """Describe the active stop condition."""
    sc = doc.stop_conditions
    return describe_stop(sc.reason, sc.details)


def stop_banner(doc: StatusDocument, frame: int = 0) -> Align:
    """Prominent banner shown while the stop condition is active."""
    glyph = blink(frame)
    reason = stop_reason_text(doc)
    return Align.center(Text(f" {glyph} STOPPED: {reason} {glyph} ", style=BANNER_STYLE))


def header(title: str, doc: StatusDocument, frame: int = 0, now: datetime | None = None) -> Group:
    """Title bar with clock, followed by the stop banner when active."""
    now = now or datetime.now()
    bar = Table.grid(expand=True)
    bar.add_column(justify="left")
    bar.add_column(justify="right")
    bar.add_row(
        Text(f" ✦ {title} ✦ ", style=TITLE_STYLE),
        Text(f"⏱ {now.strftime('%H:%M:%S')}", style=DIM_STYLE),
    )
    parts: list[RenderableType] = [bar]
    if doc.stop_conditions.active:
        parts.extend([Text(""), stop_banner(doc, frame)])
    return Group(*parts)


def footer(hint: str, status: str, status_style: str) -> Table:
    """Key hints on the left, view status on the right."""
    bar = Table.grid(expand=True)
    bar.add_column(justify="left")
    bar.add_column(justify="right")
    left = " [Q] Quit  [R] Refresh"
    if hint:
        left += f"    {hint}"
    bar.add_row(Text(left, style=DIM_STYLE), Text(f"{status} ", style=status_style))
    return bar


def session_info(doc: StatusDocument, now: datetime | None = None) -> Text:
    """Full session box for the implement view."""
    s = doc.session
    stats = doc.stats
    text = Text()
    text.append("PHASE.....: ")
    text.append_text(phase_label(s.phase))
    text.append("\nITERATION.: ")
    text.append(f"[{progress_bar(s.iteration, s.max_iterations)}]", style=TEXT_STYLE)
    text.append(f" {s.iteration}/{s.max_iterations}")
    text.append("\nELAPSED...: ")
    text.append(
        format_elapsed(s.start_time, now), style=TEXT_STYLE if s.start_time else DIM_STYLE
    )
    if len(s.start_commit) >= 7:
        text.append("\nBASE......: ")
        text.append(s.start_commit[:7], style=DIM_STYLE)
    text.append("\n\n")
    text.append(
        f"CHUNKS: {stats.chunks_completed}/{stats.chunks_total}  "
        f"COMMITS: {stats.commits_made}  "
        f"GATES: {stats.gates_passed}/{stats.gates_passed + stats.gates_failed}",
        style=DIM_STYLE,
    )
    return text


def minimal_session_info(doc: StatusDocument, now: datetime | None = None) -> Text:
    """Elapsed time and base commit only, for the plan view."""
    s = doc.session
    parts: list[Text] = []
    if s.start_time is not None:
        parts.append(Text.assemble("ELAPSED: ", (format_elapsed(s.start_time, now), TEXT_STYLE)))
    if len(s.start_commit) >= 7:
        parts.append(Text.assemble("BASE: ", (s.start_commit[:7], DIM_STYLE)))
    if not parts:
        return Text("Session starting...", style=DIM_STYLE)
    return Text("    ").join(parts)


def plan_requirements(doc: StatusDocument) -> Text:
    """Must/should/nice-to-have lists."""
    plan = doc.plan
    text = Text()
    buckets = [
        ("Must Have:", plan.must_have, ""),
        ("Should Have:", plan.should_have, DIM_STYLE),
        ("Nice To Have:", plan.nice_to_have, DIM_STYLE),
    ]
    for title, items, style in buckets:
        if not items:
            continue
        if text.plain:
            text.append("\n\n")
        text.append(title, style=TEXT_STYLE)
        for item in items:
            text.append("\n  • ")
            text.append(item, style=style)
    return text


def current_task(doc: StatusDocument, frame: int = 0) -> Text:
    """Current task name, description, status and attempt."""
    task = doc.current_task
    if not task.name:
        return Text("< NO ACTIVE TASK >", style=DIM_STYLE)
    text = Text()
    if task.status == "in_progress":
        text.append(f"{blink(frame)} ", style=RUNNING_STYLE)
    text.append(task.name, style=TEXT_STYLE)
    if task.description:
        text.append(f"\n{task.description}", style=DIM_STYLE)
    text.append("\n\nSTATUS: ")
    text.append_text(task_status_label(task.status))
    text.append("    ATTEMPT: ")
    text.append(f"{task.attempt}/{task.max_attempts}", style=TEXT_STYLE)
    return text


def active_agent(doc: StatusDocument, frame: int = 0, now: datetime | None = None) -> Text:
    """The running agent with its task, progress and running time."""
    agent = doc.active_agent
    if agent is None:
        return Text("< NO ACTIVE AGENT >", style=DIM_STYLE)
    text = Text(f"{blink(frame)} {agent.name}", style=RUNNING_STYLE)
    if agent.task:
        text.append(f"\n{agent.task}", style=TEXT_STYLE)
    if agent.progress:
        text.append(f"\n{agent.progress}", style=DIM_STYLE)
    text.append(f"\n\nRunning: {format_elapsed(agent.started_at, now)}", style=DIM_STYLE)
    return text


def chunks(doc: StatusDocument, frame: int = 0) -> Text:
    """Chunk list; in-progress chunks show their iteration count."""
    if not doc.chunks:
        return Text("< NO CHUNKS DEFINED >", style=DIM_STYLE)
    max_iter = doc.limits.max_iterations_per_chunk or 5
    lines: list[Text] = []
    for chunk in doc.chunks:
        label = f"{chunk_icon(chunk.status)} [{chunk.id:02d}] {chunk.name}"
        if chunk.status == "completed":
            line = Text(label, style=PASSED_STYLE)
        elif chunk.status == "failed":
            line = Text(label, style=FAILED_STYLE)
        elif chunk.status == "in_progress":
            line = Text(f"{label} {blink(frame)}", style=RUNNING_STYLE)
            count = doc.chunk_iteration_counts.get(str(chunk.id), 0)
            if count > 0:
                if count >= max_iter:
                    style = FAILED_STYLE
                elif count > max_iter // 2:
                    style = RUNNING_STYLE
                else:
                    style = DIM_STYLE
                line.append(f" [{count}/{max_iter}]", style=style)
        else:
            line = Text(label, style=DIM_STYLE)
        lines.append(line)
    return Text("\n").join(lines)


def _gate_line(doc: StatusDocument, name: str, width: int, frame: int) -> Text:
    result = doc.gates.get(name)
    command = truncate(result.command or "---", width)
    status = name.upper().ljust(9)
    style = {
        "passed": PASSED_STYLE,
        "failed": FAILED_STYLE,
        "running": RUNNING_STYLE,
    }.get(result.status, DIM_STYLE)
    line = Text.assemble(
        (gate_icon(result.status), style), " ", (status, style), " ", (command, DIM_STYLE)
    )
    if result.status == "running":
        line.append(f" {blink(frame)}", style=RUNNING_STYLE)
    return line


def gates(doc: StatusDocument, frame: int = 0) -> Text:
    """Gate list with failure counts against the limit."""
    max_fail = doc.limits.max_gate_failures or 3
    lines: list[Text] = []
    for name in GATE_NAMES:
        line = _gate_line(doc, name, 15, frame)
        count = doc.gate_failure_counts.get(name)
        if count > 0:
            style = FAILED_STYLE if count >= max_fail else RUNNING_STYLE
            line.append(f" [{count}/{max_fail}]", style=style)
        lines.append(line)
    return Text("\n").join(lines)


def gates_expanded(doc: StatusDocument, frame: int = 0) -> Text:
    """Gate list with longer commands, for the review view."""
    lines: list[Text] = []
    for name in GATE_NAMES:
        line = _gate_line(doc, name, 25, frame)
        count = doc.gate_failure_counts.get(name)
        if count > 0:
            line.append(f" [{count} fails]", style=FAILED_STYLE)
        lines.append(line)
    return Text("\n").join(lines)


def gates_compact(doc: StatusDocument) -> Text:
    """All gates on one line, for the complete view."""
    parts: list[Text] = []
    for name, result in doc.gates.items():
        label = name.upper()
        if result.status == "passed":
            parts.append(Text(f"✓ {label}", style=PASSED_STYLE))
        elif result.status in ("skipped", "pending"):
            parts.append(Text(f"− {label}", style=DIM_STYLE))
        else:
            parts.append(Text(f"✗ {label}", style=FAILED_STYLE))
    return Text("  ").join(parts)


def agents(doc: StatusDocument, frame: int = 0) -> Text:
    """Legacy agent rollup; shows the default roster before any agent ran."""
    if not doc.agents:
        return Text("\n").join(Text(f"[ ] {name}", style=DIM_STYLE) for name in DEFAULT_AGENTS)
    lines: list[Text] = []
    for agent in doc.agents:
        name = agent.name.ljust(15)
        if agent.status == "active":
            line = Text(f"[{blink(frame)}] {name}", style=RUNNING_STYLE)
        elif agent.status == "done":
            line = Text(f"[X] {name}", style=PASSED_STYLE)
        else:
            line = Text(f"[ ] {name}", style=DIM_STYLE)
        if agent.blockers > 0:
            line.append(f" !{agent.blockers}B", style=FAILED_STYLE)
        elif agent.warnings > 0:
            line.append(f" !{agent.warnings}W", style=RUNNING_STYLE)
        lines.append(line)
    return Text("\n").join(lines)


def agents_compact(doc: StatusDocument, frame: int = 0) -> Text:
    """Agent rollup for the review view, with blocker and warning counts."""
    if not doc.agents:
        return Text("No agents have run yet", style=DIM_STYLE)
    lines: list[Text] = []
    for agent in doc.agents:
        if agent.status == "done":
            icon, style = "[X]", PASSED_STYLE
        elif agent.status == "active":
            icon, style = f"[{blink(frame)}]", RUNNING_STYLE
        else:
            icon, style = "[ ]", DIM_STYLE
        line = Text(f"{icon} {agent.name.ljust(15)}", style=style)
        if agent.blockers > 0:
            line.append(f" {agent.blockers}B", style=FAILED_STYLE)
        if agent.warnings > 0:
            line.append(f" {agent.warnings}W", style=RUNNING_STYLE)
        lines.append(line)
    return Text("\n").join(lines)


def commits(doc: StatusDocument, limit: int = 5, width: int = 35) -> Text:
    """Most recent commits, short hash and truncated message."""
    if not doc.commits:
        return Text("< NO COMMITS YET >", style=DIM_STYLE)
    return Text("\n").join(_commit_line(c.hash, c.message, width) for c in doc.commits[-limit:])


def commits_expanded(doc: StatusDocument, limit: int = 10, width: int = 45) -> Text:
    """Up to `limit` commits with a note about older ones."""
    if not doc.commits:
        return Text("< NO COMMITS >", style=DIM_STYLE)
    lines: list[Text] = []
    earlier = len(doc.commits) - limit
    if earlier > 0:
        lines.append(Text(f"... and {earlier} earlier commits", style=DIM_STYLE))
    lines.extend(_commit_line(c.hash, c.message, width) for c in doc.commits[-limit:])
    return Text("\n").join(lines)


def _commit_line(hash: str, message: str, width: int) -> Text:
    return Text.assemble((hash[:7], PASSED_STYLE), " ", (truncate(message, width), TEXT_STYLE))


def session_summary(doc: StatusDocument, now: datetime | None = None) -> Text:
    """One-line chunk/commit/elapsed summary for the review view."""
    stats = doc.stats
    parts = [
        Text.assemble("CHUNKS: ", (f"{stats.chunks_completed}/{stats.chunks_total}", TEXT_STYLE)),
        Text.assemble("COMMITS: ", (str(stats.commits_made), TEXT_STYLE)),
    ]
    if doc.session.start_time is not None:
        elapsed = format_elapsed(doc.session.start_time, now)
        parts.append(Text.assemble("ELAPSED: ", (elapsed, TEXT_STYLE)))
    return Text("    ").join(parts)


def final_stats(doc: StatusDocument, now: datetime | None = None) -> Text:
    """Cumulative stats for the complete view."""
    stats = doc.stats
    total_gates = stats.gates_passed + stats.gates_failed
    lines = [Text.assemble("PHASE: ", ("✓ Complete", PASSED_STYLE))]
    if doc.session.start_time is not None:
        elapsed = format_elapsed(doc.session.start_time, now)
        lines.append(Text.assemble("ELAPSED: ", (elapsed, TEXT_STYLE)))
    lines.extend(
        [
            Text.assemble(
                "CHUNKS: ",
                (f"{stats.chunks_completed}/{stats.chunks_total}", PASSED_STYLE),
                " completed",
            ),
            Text.assemble("COMMITS: ", (str(stats.commits_made), PASSED_STYLE), " made"),
            Text.assemble(
                "GATES: ", (f"{stats.gates_passed}/{total_gates}", PASSED_STYLE), " passed"
            ),
        ]
    )
    return Text("\n").join(lines)


# ----------------------------------------------------------------------------
# Views
# ----------------------------------------------------------------------------


def render_standby(
    doc: StatusDocument, frame: int = 0, error: object | None = None, now: datetime | None = None
) -> Group:
    """Waiting view shown when there is no session or it cannot be read."""
    glyph = blink(frame)
    parts: list[RenderableType] = [
        header("WIGGUM", doc, frame, now),
        Text(""),
        Align.center(Text(f"{glyph} Awaiting session... {glyph}", style=RUNNING_STYLE)),
        Text(""),
        Align.center(Text("Run `wiggum init` to start a session", style=DIM_STYLE)),
    ]
    if error is not None:
        parts.extend([Text(""), Align.center(Text(f"[{error}]", style=DIM_STYLE))])
    parts.extend([Text(""), footer("", "○ Standby", DIM_STYLE)])
    return Group(*parts)


def render_plan(doc: StatusDocument, frame: int = 0, now: datetime | None = None) -> Group:
    """Planning view: session, active agent, task and requirements."""
    parts: list[RenderableType] = [
        header("PLANNING", doc, frame, now),
        section("Session", minimal_session_info(doc, now)),
    ]
    if doc.active_agent is not None:
        parts.append(section("Active Agent", active_agent(doc, frame, now), active=True))
    if doc.current_task.name:
        in_progress = doc.current_task.status == "in_progress"
        parts.append(section("Current Task", current_task(doc, frame), active=in_progress))
    plan = doc.plan
    if plan.must_have or plan.should_have or plan.nice_to_have:
        parts.append(section("Requirements", plan_requirements(doc)))
    parts.append(footer("", "● Planning", RUNNING_STYLE))
    return Group(*parts)


def render_implement(doc: StatusDocument, frame: int = 0, now: datetime | None = None) -> Group:
    """Two-column view: session/task/chunks left, gates/agents/commits right."""
    left: list[RenderableType] = []
    if doc.active_agent is not None:
        left.append(section("Active Agent", active_agent(doc, frame, now), active=True))
    left.append(section("Session", session_info(doc, now)))
    if doc.current_task.name:
        in_progress = doc.current_task.status == "in_progress"
        left.append(section("Active Task", current_task(doc, frame), active=in_progress))
    if doc.chunks:
        left.append(section("Chunks", chunks(doc, frame)))

    right: list[RenderableType] = [
        section("Gates", gates(doc, frame)),
        section("Agents", agents(doc, frame)),
    ]
    if doc.commits:
        right.append(section("Commits", commits(doc)))

    columns = Table.grid(expand=True, padding=(0, 1))
    columns.add_column(ratio=1)
    columns.add_column(ratio=1)
    columns.add_row(Group(*left), Group(*right))

    return Group(
        header("IMPLEMENTING", doc, frame, now),
        columns,
        footer("Watch gates", "● Implementing", RUNNING_STYLE),
    )


def render_review(doc: StatusDocument, frame: int = 0, now: datetime | None = None) -> Group:
    """Gates-first view for the final review."""
    title = "GATES - ALL PASSED ✓" if all_gates_passed(doc) else "GATES"
    parts: list[RenderableType] = [
        header("FINAL REVIEW", doc, frame, now),
        section(title, gates_expanded(doc, frame), active=True),
    ]
    if doc.active_agent is not None:
        parts.append(section("Active Agent", active_agent(doc, frame, now), active=True))
    parts.extend(
        [
            section("Agent Status", agents_compact(doc, frame)),
            section("Session Summary", session_summary(doc, now)),
            footer("All gates must show ✓", "● Reviewing", RUNNING_STYLE),
        ]
    )
    return Group(*parts)


def render_complete(doc: StatusDocument, frame: int = 0, now: datetime | None = None) -> Group:
    """Final view: stats, every commit and the gate summary."""
    parts: list[RenderableType] = [
        header("COMPLETE ✓", doc, frame, now),
        Align.center(Text("Session completed successfully", style=PASSED_STYLE)),
        section("Final Stats", final_stats(doc, now)),
    ]
    if doc.commits:
        parts.append(section("Commits Made", commits_expanded(doc)))
    parts.extend(
        [
            section("Gates", gates_compact(doc)),
            footer("", "✓ Complete", PASSED_STYLE),
        ]
    )
    return Group(*parts)


def render_view(
    doc: StatusDocument, frame: int = 0, error: object | None = None, now: datetime | None = None
) -> Group:
    """Render the view for the document's phase."""
    mode = render_mode(doc, error)
    if mode == "plan":
        return render_plan(doc, frame, now)
    if mode == "implement":
        return render_implement(doc, frame, now)
    if mode == "review":
        return render_review(doc, frame, now)
    if mode == "complete":
        return render_complete(doc, frame, now)
    return render_standby(doc, frame, error, now)
