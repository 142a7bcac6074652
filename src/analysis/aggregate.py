"""Result aggregation: metrics and severity-sorted violation lists."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING

from models.report import ProjectMetrics, Report
from models.source import Layer
from parse.treesitter import count_functions
from rules.severity import RuleCategory, sort_by_severity

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from graph.dependency_graph import DependencyGraph
    from models.source import SourceUnit
    from models.violations import Violation

logger = logging.getLogger(__name__)


def _count_unit_functions(unit: SourceUnit) -> int:
    try:
        return count_functions(unit.content, unit.path)
    except (ValueError, UnicodeError) as exc:
        logger.debug("Could not parse %s for function count: %s", unit.path, exc)
        return 0


def compute_project_metrics(units: Sequence[SourceUnit]) -> ProjectMetrics:
    """Compute project metrics from the unit list alone."""
    counts = {layer: 0 for layer in Layer}
    for unit in units:
        if unit.layer is not None:
            counts[unit.layer] += 1

    return ProjectMetrics(
        total_files=len(units),
        total_functions=sum(_count_unit_functions(unit) for unit in units),
        total_imports=sum(len(unit.imports) for unit in units),
        layer_distribution=MappingProxyType(
            {layer.value: count for layer, count in counts.items() if count}
        ),
    )


def aggregate_results(
    units: Sequence[SourceUnit],
    graph: DependencyGraph,
    detection: Mapping[RuleCategory, Sequence[Violation]],
) -> Report:
    """Assemble the final report.

    Every rule category is present, in declaration order, sorted by severity
    with ties kept in detection order.
    """
    violations = {
        category: tuple(sort_by_severity(detection.get(category, ())))
        for category in RuleCategory
    }
    return Report(
        units=tuple(units),
        graph=graph,
        violations=MappingProxyType(violations),
        metrics=compute_project_metrics(units),
        graph_metrics=graph.get_metrics(),
    )


__all__ = ["aggregate_results", "compute_project_metrics"]
