"""Wiggum directory utilities."""

from pathlib import Path

from ..constants import ARCHIVE_DIR, WIGGUM_DIR

# Project root override (set by cli.py main callback from --root)
_root: Path | None = None


def set_project_root(root: Path | None) -> None:
    """Set the project root used when no root is passed explicitly."""
    global _root
    _root = root


def get_project_root() -> Path:
    """Get the project root: the --root override, else the current directory."""
    return _root if _root is not None else Path.cwd()


def get_wiggum_dir(root: Path | None = None) -> Path:
    """Get .wiggum directory path.

    Args:
        root: Project root, defaults to get_project_root()

    Returns:
        Path to .wiggum directory
    """
    if root is None:
        root = get_project_root()
    return root / WIGGUM_DIR


def get_archive_dir(wiggum_dir: Path) -> Path:
    """Get the directory ended sessions are archived into."""
    return wiggum_dir / ARCHIVE_DIR
