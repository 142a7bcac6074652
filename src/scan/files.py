"""File scanning and reading for analyzed projects."""

from __future__ import annotations

from fnmatch import fnmatch
from typing import TYPE_CHECKING, Protocol, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

from rules.config import DEFAULT_EXTENSIONS

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence
    from pathlib import Path


class FileAccess(Protocol):
    """File-system capabilities consumed by the analysis pipeline."""

    def scan(
        self,
        root: Path,
        include: Sequence[str] | None = None,
        exclude: Sequence[str] | None = None,
    ) -> list[Path]: ...

    def read_file(self, path: Path) -> str: ...


def _should_include_file(
    path: Path,
    directory: Path,
    gitignore_matches: Callable[[str], bool] | None,
    include_patterns: Sequence[str] | None,
    exclude_patterns: Sequence[str] | None,
) -> bool:
    """Check if a file should be included based on all filtering rules."""
    if not path.is_file() or path.is_symlink():
        return False

    if not _is_within_root(path, directory):
        return False

    try:
        rel_path = path.relative_to(directory)
    except ValueError:
        return False

    rel_path_str = rel_path.as_posix()

    if gitignore_matches is not None and gitignore_matches(str(path)):
        return False

    if include_patterns and not any(
        fnmatch(rel_path_str, pat) for pat in include_patterns
    ):
        return False

    has_excluded_match = exclude_patterns and any(
        fnmatch(rel_path_str, pat) for pat in exclude_patterns
    )
    return not has_excluded_match


def _is_within_root(path: Path, root: Path) -> bool:
    """Return True when the resolved path stays within the resolved root."""
    try:
        root_resolved = root.resolve()
        path_resolved = path.resolve()
    except OSError:
        return False

    try:
        path_resolved.relative_to(root_resolved)
    except ValueError:
        return False

    return True


def _iter_gitignore_files(root: Path) -> list[Path]:
    """Return sorted list of .gitignore files under root (including root)."""
    gitignore_paths = [root / ".gitignore"]
    gitignore_paths.extend(root.rglob(".gitignore"))
    unique_paths = {
        path for path in gitignore_paths if path.is_file() and not path.is_symlink()
    }
    return sorted(unique_paths, key=lambda p: p.relative_to(root).as_posix())


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> Callable[[str], bool] | None:
    if not nested_gitignore:
        gitignore_path = root / ".gitignore"
        if gitignore_path.is_file():
            return cast("Callable[[str], bool]", parse_gitignore(gitignore_path))
        return None

    gitignore_paths = _iter_gitignore_files(root)
    if not gitignore_paths:
        return None

    matchers = [parse_gitignore(path) for path in gitignore_paths]

    def matches(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                continue
        return False

    return matches


def find_source_files(
    directory: Path,
    *,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    include_patterns: Sequence[str] | None = None,
    exclude_patterns: Sequence[str] | None = None,
    nested_gitignore: bool = False,
) -> Iterator[Path]:
    """Find all source files in a directory, respecting .gitignore.

    Args:
        directory: Directory to search for source files
        extensions: File suffixes to collect (e.g. ".ts")
        include_patterns: Optional list of fnmatch patterns; if provided,
            files must match at least one pattern to be included
        exclude_patterns: Optional list of fnmatch patterns; files matching
            any pattern are excluded
        nested_gitignore: Compose every .gitignore below the root instead of
            only the root one

    Yields:
        Path objects for each source file found, sorted lexicographically
        by relative path for deterministic ordering.

    Raises:
        FileNotFoundError: If directory does not exist.
        NotADirectoryError: If directory is not a directory.
    """
    if not directory.exists():
        msg = f"Directory does not exist: {directory}"
        raise FileNotFoundError(msg)
    if not directory.is_dir():
        msg = f"Path is not a directory: {directory}"
        raise NotADirectoryError(msg)

    gitignore_matches = _build_gitignore_matcher(
        directory,
        nested_gitignore=nested_gitignore,
    )
    suffixes = frozenset(extensions)

    matched_files = [
        path
        for path in directory.rglob("*")
        if path.suffix in suffixes
        and _should_include_file(
            path,
            directory,
            gitignore_matches,
            include_patterns,
            exclude_patterns,
        )
    ]

    matched_files.sort(key=lambda p: p.relative_to(directory).as_posix())

    yield from matched_files


def read_source_file(path: Path) -> str:
    """Read a source file as UTF-8 text."""
    return path.read_text(encoding="utf-8")


class LocalFileAccess:
    """File access backed by the local file system."""

    def __init__(
        self,
        *,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        nested_gitignore: bool = False,
    ) -> None:
        self._extensions = tuple(extensions)
        self._nested_gitignore = nested_gitignore

    def scan(
        self,
        root: Path,
        include: Sequence[str] | None = None,
        exclude: Sequence[str] | None = None,
    ) -> list[Path]:
        return list(
            find_source_files(
                root,
                extensions=self._extensions,
                include_patterns=include,
                exclude_patterns=exclude,
                nested_gitignore=self._nested_gitignore,
            )
        )

    def read_file(self, path: Path) -> str:
        return read_source_file(path)


__all__ = [
    "FileAccess",
    "LocalFileAccess",
    "_should_include_file",
    "find_source_files",
    "read_source_file",
]
