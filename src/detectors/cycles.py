"""Circular dependency reporting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from models.violations import CircularDependencyViolation
from rules.severity import RuleCategory

if TYPE_CHECKING:
    from detectors.base import DetectionContext

CYCLE_ARROW = " -> "


def format_cycle(cycle: list[str]) -> str:
    """Render a cycle as a closed chain, e.g. ``a -> b -> a``."""
    return CYCLE_ARROW.join([*cycle, cycle[0]])


class CircularDependencyDetector:
    """One violation per cycle reported by the dependency graph."""

    category = RuleCategory.CIRCULAR_DEPENDENCY

    def detect(self, context: DetectionContext) -> list[CircularDependencyViolation]:
        severity = context.severity_for(self.category)
        return [
            CircularDependencyViolation(
                message=f"Circular dependency detected: {format_cycle(cycle)}",
                file=cycle[0],
                severity=severity,
                cycle=tuple(cycle),
            )
            for cycle in context.graph.find_cycles()
        ]


__all__ = ["CircularDependencyDetector", "format_cycle"]
