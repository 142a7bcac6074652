"""Source model building: scan, read and classify project files."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import TYPE_CHECKING

from models.source import SourceUnit
from parse.lexical import extract_exports, extract_imports
from rules.layers import classify_layer
from utils import to_relative_posix

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from rules.config import LayersConfig
    from scan.files import FileAccess

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


def build_source_unit(
    path: str,
    content: str,
    layers_config: LayersConfig | None = None,
) -> SourceUnit:
    """Build a unit from a relative path and file content."""
    return SourceUnit(
        path=path,
        content=content,
        imports=tuple(extract_imports(content)),
        exports=tuple(extract_exports(content)),
        layer=classify_layer(path, layers_config),
    )


def _read_unit(
    path: Path,
    *,
    root: Path,
    file_access: FileAccess,
    layers_config: LayersConfig | None,
) -> SourceUnit | None:
    relative = to_relative_posix(path, root)
    try:
        content = file_access.read_file(path)
    except Exception as exc:
        logger.warning("Skipping unreadable file %s: %s", relative, exc)
        return None
    return build_source_unit(relative, content, layers_config)


def collect_source_units(
    root: Path,
    file_access: FileAccess,
    include: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
    layers_config: LayersConfig | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[SourceUnit]:
    """Scan the project and build one unit per readable source file.

    Reads run concurrently; the result is sorted by relative path so that
    completion order never leaks into the model. Files that fail to read are
    logged and skipped.

    Raises:
        FileNotFoundError: If root does not exist (from the file access).
        NotADirectoryError: If root is not a directory (from the file access).
    """
    paths = file_access.scan(root, include, exclude)
    logger.debug("Scanned %d source files under %s", len(paths), root)

    read = partial(
        _read_unit,
        root=root,
        file_access=file_access,
        layers_config=layers_config,
    )
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        results = list(executor.map(read, paths))

    units = sorted((unit for unit in results if unit is not None), key=lambda u: u.path)
    skipped = len(paths) - len(units)
    if skipped:
        logger.debug("Skipped %d unreadable files", skipped)
    return units


__all__ = ["build_source_unit", "collect_source_units"]
