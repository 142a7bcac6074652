"""Parsing utilities for source files."""

from parse.lexical import extract_exports, extract_imports, iter_import_statements
from parse.resolve import is_relative_specifier, resolve_import_path
from parse.treesitter import count_functions, iter_nodes, parse_source

__all__ = [
    "count_functions",
    "extract_exports",
    "extract_imports",
    "is_relative_specifier",
    "iter_import_statements",
    "iter_nodes",
    "parse_source",
    "resolve_import_path",
]
