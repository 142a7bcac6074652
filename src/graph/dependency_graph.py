"""Project dependency graph keyed by relative file path.

The graph is assembled with :class:`GraphBuilder` and frozen into an
immutable :class:`DependencyGraph` once every unit and edge is known.
Nodes live in an arena (insertion-ordered tuple of units); adjacency is
stored as tuples of arena indices.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from graph.algos import fan_counts, find_cycles
from models.report import GraphMetrics
from parse.resolve import resolve_import_path

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

    from models.source import SourceUnit

logger = logging.getLogger(__name__)


class DependencyGraph:
    """Immutable directed graph of file-to-file dependencies."""

    __slots__ = ("_dependencies", "_dependents", "_index", "_units")

    def __init__(
        self,
        units: tuple[SourceUnit, ...],
        dependencies: tuple[tuple[int, ...], ...],
        dependents: tuple[tuple[int, ...], ...],
    ) -> None:
        self._units = units
        self._index = {unit.path: i for i, unit in enumerate(units)}
        self._dependencies = dependencies
        self._dependents = dependents

    @property
    def paths(self) -> tuple[str, ...]:
        """Node paths in insertion order."""
        return tuple(unit.path for unit in self._units)

    def __contains__(self, path: object) -> bool:
        return path in self._index

    def __len__(self) -> int:
        return len(self._units)

    def get_unit(self, path: str) -> SourceUnit | None:
        index = self._index.get(path)
        return None if index is None else self._units[index]

    def dependencies(self, path: str) -> tuple[str, ...]:
        """Paths this file imports, in first-seen order."""
        index = self._index.get(path)
        if index is None:
            return ()
        return tuple(self._units[i].path for i in self._dependencies[index])

    def dependents(self, path: str) -> tuple[str, ...]:
        """Paths importing this file, in first-seen order."""
        index = self._index.get(path)
        if index is None:
            return ()
        return tuple(self._units[i].path for i in self._dependents[index])

    def edges(self) -> Iterator[tuple[str, str]]:
        """Yield ``(from, to)`` path pairs, grouped by source node."""
        for source, targets in enumerate(self._dependencies):
            for target in targets:
                yield self._units[source].path, self._units[target].path

    def find_cycles(self) -> list[list[str]]:
        """Return dependency cycles as lists of paths in traversal order."""
        return [
            [self._units[i].path for i in cycle]
            for cycle in find_cycles(self._dependencies)
        ]

    def get_metrics(self) -> GraphMetrics:
        total_files = len(self._units)
        total_dependencies, max_dependencies = fan_counts(self._dependencies)
        avg_dependencies = total_dependencies / total_files if total_files else 0.0
        return GraphMetrics(
            total_files=total_files,
            total_dependencies=total_dependencies,
            avg_dependencies=avg_dependencies,
            max_dependencies=max_dependencies,
        )


class GraphBuilder:
    """Mutable accumulator for nodes and edges of a dependency graph."""

    def __init__(self) -> None:
        self._units: list[SourceUnit] = []
        self._index: dict[str, int] = {}
        self._dependencies: list[list[int]] = []
        self._dependents: list[list[int]] = []

    def add_node(self, unit: SourceUnit) -> None:
        """Register a unit; re-adding a known path is a no-op."""
        if unit.path in self._index:
            return
        self._index[unit.path] = len(self._units)
        self._units.append(unit)
        self._dependencies.append([])
        self._dependents.append([])

    def add_edge(self, from_path: str, to_path: str) -> bool:
        """Record that ``from_path`` imports ``to_path``.

        Edges to or from unregistered paths (external packages, unresolved
        specifiers) are dropped. Returns True when a new edge was stored.
        """
        source = self._index.get(from_path)
        target = self._index.get(to_path)
        if source is None or target is None:
            return False

        if target in self._dependencies[source]:
            return False

        self._dependencies[source].append(target)
        self._dependents[target].append(source)
        return True

    def build(self) -> DependencyGraph:
        return DependencyGraph(
            units=tuple(self._units),
            dependencies=tuple(tuple(targets) for targets in self._dependencies),
            dependents=tuple(tuple(sources) for sources in self._dependents),
        )


def build_dependency_graph(
    units: Iterable[SourceUnit],
    extensions: Sequence[str] | None = None,
) -> DependencyGraph:
    """Build the dependency graph for a finished list of units.

    Every unit is registered first, then each import is resolved against the
    registered paths and added as an edge.
    """
    builder = GraphBuilder()
    unit_list = list(units)
    for unit in unit_list:
        builder.add_node(unit)

    known_paths = frozenset(unit.path for unit in unit_list)
    edge_count = 0
    for unit in unit_list:
        for specifier in unit.imports:
            if extensions is None:
                target = resolve_import_path(unit.path, specifier, known_paths)
            else:
                target = resolve_import_path(
                    unit.path, specifier, known_paths, extensions
                )
            if builder.add_edge(unit.path, target):
                edge_count += 1

    logger.debug(
        "Built dependency graph: %d nodes, %d edges", len(unit_list), edge_count
    )
    return builder.build()


__all__ = ["DependencyGraph", "GraphBuilder", "build_dependency_graph"]
