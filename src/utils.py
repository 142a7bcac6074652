"""Shared utilities for archguard."""

from __future__ import annotations

from pathlib import Path, PurePath


def to_relative_posix(path: str | PurePath, root: str | PurePath) -> str:
    """Convert a file path to a POSIX path relative to ``root``.

    Paths outside ``root`` keep all of their own segments, joined with ``/``.

    Examples:
        >>> to_relative_posix("/repo/src/domain/User.ts", "/repo")
        'src/domain/User.ts'
        >>> to_relative_posix(Path("/other/a.ts"), "/repo")
        'other/a.ts'
    """
    path_obj = PurePath(path)
    try:
        relative = path_obj.relative_to(PurePath(root))
    except ValueError:
        relative = path_obj

    # Windows-style separators may arrive from FileAccess implementations.
    parts = [part for part in relative.as_posix().replace("\\", "/").split("/") if part]
    return "/".join(parts)


def resolve_root(root: str | Path) -> Path:
    """Expand ``~`` and resolve a root directory argument."""
    return Path(root).expanduser().resolve()
