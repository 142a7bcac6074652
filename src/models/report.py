"""Analysis results: metrics, the final report and the failure value."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from graph.dependency_graph import DependencyGraph
    from models.source import SourceUnit
    from models.violations import Violation
    from rules.severity import RuleCategory


@dataclass(frozen=True)
class GraphMetrics:
    total_files: int
    total_dependencies: int
    avg_dependencies: float
    max_dependencies: int


@dataclass(frozen=True)
class ProjectMetrics:
    total_files: int
    total_functions: int
    total_imports: int
    layer_distribution: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class Report:
    """Outcome of a successful analysis run.

    ``violations`` holds every rule category, in category declaration order,
    each sorted by severity (most severe first).
    """

    units: tuple[SourceUnit, ...]
    graph: DependencyGraph
    violations: Mapping[RuleCategory, tuple[Violation, ...]]
    metrics: ProjectMetrics
    graph_metrics: GraphMetrics

    def iter_violations(self) -> Iterator[Violation]:
        """Yield all violations, category by category."""
        for items in self.violations.values():
            yield from items

    @property
    def total_violations(self) -> int:
        return sum(len(items) for items in self.violations.values())


@dataclass(frozen=True)
class AnalysisFailure:
    """Outcome of an analysis run that could not complete."""

    message: str


__all__ = ["AnalysisFailure", "GraphMetrics", "ProjectMetrics", "Report"]
