"""External integrations for wiggum.

- git: HEAD lookup for session start and checkpoints
- launcher: opening the dashboard in a tmux pane
"""

from .git import GitError, get_head_sha, run_git
from .launcher import auto_launch_disabled, launch_dashboard

__all__ = [
    "GitError",
    "auto_launch_disabled",
    "get_head_sha",
    "launch_dashboard",
    "run_git",
]
