"""Lexical import/export extraction for TypeScript and JavaScript sources.

This is a cheap regex scan over raw text, not a parse: it finds module
specifiers in ``import``/``export ... from`` statements, ``require()`` and
dynamic ``import()`` calls, and the names of exported declarations.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

_IMPORT_PATTERN = re.compile(
    r"""
    \bimport\s+(?:type\s+)?[\w*{}\s,$]+?\s+from\s*['"](?P<from_spec>[^'"\n]+)['"]
    | \bexport\s+(?:type\s+)?(?:\*(?:\s+as\s+\w+)?|\{[^}]*\})\s*from\s*['"](?P<reexport>[^'"\n]+)['"]
    | \bimport\s*['"](?P<bare>[^'"\n]+)['"]
    | \b(?:require|import)\s*\(\s*['"](?P<call>[^'"\n]+)['"]\s*\)
    """,
    re.VERBOSE,
)

_EXPORT_PATTERN = re.compile(
    r"""
    \bexport\s+(?:default\s+)?(?:declare\s+)?(?:abstract\s+)?(?:async\s+)?
    (?:function\s*\*?\s*|(?:class|const|let|var|interface|type|enum)\s+)
    (?P<name>[A-Za-z_$][\w$]*)
    """,
    re.VERBOSE,
)


def _line_of(content: str, offset: int) -> int:
    return content.count("\n", 0, offset) + 1


def iter_import_statements(content: str) -> Iterator[tuple[int, str]]:
    """Yield ``(line, specifier)`` for every import found, in source order."""
    for match in _IMPORT_PATTERN.finditer(content):
        specifier = (
            match.group("from_spec")
            or match.group("reexport")
            or match.group("bare")
            or match.group("call")
        )
        if specifier:
            yield _line_of(content, match.start()), specifier


def extract_imports(content: str) -> list[str]:
    """Extract import specifiers as written, in source order."""
    return [specifier for _line, specifier in iter_import_statements(content)]


def extract_exports(content: str) -> list[str]:
    """Extract the names of exported declarations, in source order."""
    return [match.group("name") for match in _EXPORT_PATTERN.finditer(content)]


__all__ = ["extract_exports", "extract_imports", "iter_import_statements"]
