"""Tree-sitter parsing for TypeScript and JavaScript sources."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

if TYPE_CHECKING:
    from collections.abc import Iterator

FUNCTION_NODE_TYPES = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_expression",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)

_LANGUAGES: dict[str, Language] = {}
_LANGUAGES_LOCK = threading.Lock()
_LOCAL = threading.local()


def _grammar_for_path(path: str) -> str:
    lowered = path.lower()
    if lowered.endswith(".tsx"):
        return "tsx"
    if lowered.endswith((".ts", ".mts", ".cts")):
        return "typescript"
    return "javascript"


def _get_language(grammar: str) -> Language:
    with _LANGUAGES_LOCK:
        language = _LANGUAGES.get(grammar)
        if language is None:
            if grammar == "tsx":
                language = Language(tree_sitter_typescript.language_tsx())
            elif grammar == "typescript":
                language = Language(tree_sitter_typescript.language_typescript())
            else:
                language = Language(tree_sitter_javascript.language())
            _LANGUAGES[grammar] = language
        return language


def _get_parser(grammar: str) -> Parser:
    """Return this thread's parser for a grammar.

    Parsers are not safe to share between threads, so each worker thread
    keeps its own.
    """
    parsers: dict[str, Parser] | None = getattr(_LOCAL, "parsers", None)
    if parsers is None:
        parsers = {}
        _LOCAL.parsers = parsers

    parser = parsers.get(grammar)
    if parser is None:
        parser = Parser(_get_language(grammar))
        parsers[grammar] = parser
    return parser


def parse_source(content: str, path: str) -> Tree:
    """Parse source text with the grammar matching the file extension."""
    parser = _get_parser(_grammar_for_path(path))
    return parser.parse(content.encode("utf-8"))


def iter_nodes(root: Node) -> Iterator[Node]:
    """Yield every node below ``root`` in pre-order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def node_text(node: Node | None) -> str:
    """Decode a node's source text (empty string for a missing node)."""
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf8")


def node_line(node: Node) -> int:
    """Return the 1-based line where a node starts."""
    return node.start_point[0] + 1


def count_functions(content: str, path: str) -> int:
    """Count declared functions, methods and function expressions in a file."""
    if not content.strip():
        return 0
    tree = parse_source(content, path)
    return sum(
        1
        for node in iter_nodes(tree.root_node)
        if node.is_named and node.type in FUNCTION_NODE_TYPES
    )


__all__ = [
    "FUNCTION_NODE_TYPES",
    "count_functions",
    "iter_nodes",
    "node_line",
    "node_text",
    "parse_source",
]
