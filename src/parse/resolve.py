"""Resolution of relative import specifiers to project-relative paths."""

from __future__ import annotations

import posixpath
from typing import TYPE_CHECKING

from rules.config import DEFAULT_EXTENSIONS

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

_JS_TO_TS = {".js": (".ts", ".tsx"), ".jsx": (".tsx",), ".mjs": (".mts",)}


def is_relative_specifier(specifier: str) -> bool:
    """Return True for ``./x``, ``../x``, ``.`` and ``..`` specifiers."""
    return specifier in {".", ".."} or specifier.startswith(("./", "../"))


def _candidates(base: str, extensions: Sequence[str]) -> list[str]:
    candidates = [base]
    candidates.extend(f"{base}{ext}" for ext in extensions)
    candidates.extend(f"{base}/index{ext}" for ext in extensions)

    stem, ext = posixpath.splitext(base)
    for ts_ext in _JS_TO_TS.get(ext, ()):
        candidates.append(f"{stem}{ts_ext}")
    return candidates


def resolve_import_path(
    source_path: str,
    specifier: str,
    known_paths: Collection[str],
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> str:
    """Resolve an import specifier to a project-relative path.

    Args:
        source_path: Relative POSIX path of the importing file
            (e.g., "src/domain/order/Order.ts")
        specifier: Import specifier as written (e.g., "../user/User")
        known_paths: Relative paths of every file in the project
        extensions: Extensions to try when the specifier omits one

    Returns:
        The first matching known path. When nothing matches, the normalized
        path for relative specifiers, or the specifier unchanged for package
        imports; callers treat those as external.

    Examples:
        >>> resolve_import_path("src/a/b.ts", "../c", {"src/c.ts"})
        'src/c.ts'
        >>> resolve_import_path("src/a/b.ts", "./d", {"src/a/d/index.ts"})
        'src/a/d/index.ts'
        >>> resolve_import_path("src/a/b.ts", "lodash", set())
        'lodash'
    """
    if not is_relative_specifier(specifier):
        return specifier

    source_dir = posixpath.dirname(source_path)
    joined = posixpath.normpath(posixpath.join(source_dir, specifier))

    for candidate in _candidates(joined, extensions):
        if candidate in known_paths:
            return candidate

    return joined


__all__ = ["is_relative_specifier", "resolve_import_path"]
