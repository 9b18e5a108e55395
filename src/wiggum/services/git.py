"""Git operations used when a session starts or checkpoints."""

import subprocess
from pathlib import Path

from ..constants import GIT_TIMEOUT


class GitError(Exception):
    """Git command failed."""


def run_git(*args: str, cwd: Path | None = None) -> str:
    """Run a git command and return stripped stdout.

    Raises:
        GitError: If git is missing, times out or exits non-zero
    """
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT,
        )
    except FileNotFoundError:
        raise GitError("git not found in PATH") from None
    except subprocess.TimeoutExpired as e:
        raise GitError(f"git {' '.join(args)} timed out") from e

    if result.returncode != 0:
        raise GitError(f"git {' '.join(args)} failed: {result.stderr.strip()}")
    return result.stdout.strip()


def get_head_sha(cwd: Path | None = None) -> str:
    """Get HEAD commit SHA, or an empty string outside a repository."""
    try:
        return run_git("rev-parse", "HEAD", cwd=cwd)
    except GitError:
        return ""
