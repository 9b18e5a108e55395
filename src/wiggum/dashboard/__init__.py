"""Live terminal dashboard for a wiggum session."""

from .app import Dashboard, KeyReader
from .render import all_gates_passed, render_mode, render_view
from .state import DashboardState

__all__ = [
    "Dashboard",
    "DashboardState",
    "KeyReader",
    "all_gates_passed",
    "render_mode",
    "render_view",
]
