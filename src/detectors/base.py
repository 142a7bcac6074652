"""Detector protocol and the shared detection context."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, ClassVar, Protocol

from rules.layers import DEFAULT_LAYERS_CONFIG, build_allowed_deps
from rules.severity import DEFAULT_SEVERITY_MAP

if TYPE_CHECKING:
    from collections.abc import Mapping

    from graph.dependency_graph import DependencyGraph
    from models.source import Layer, SourceUnit
    from models.violations import Violation
    from rules.config import LayersConfig
    from rules.severity import RuleCategory, Severity


@dataclass(frozen=True)
class DetectionContext:
    """Read-only inputs shared by every detector in a run."""

    units: tuple[SourceUnit, ...]
    graph: DependencyGraph
    severity_map: Mapping[RuleCategory, Severity] = field(
        default_factory=lambda: DEFAULT_SEVERITY_MAP
    )
    layers: LayersConfig = DEFAULT_LAYERS_CONFIG

    @cached_property
    def allowed_deps(self) -> dict[Layer, frozenset[Layer]]:
        return build_allowed_deps(self.layers)

    def severity_for(self, category: RuleCategory) -> Severity:
        return self.severity_map[category]


class Detector(Protocol):
    """Detectors read the context (never write it) and return violations."""

    category: RuleCategory

    def detect(self, context: DetectionContext) -> list[Violation]: ...


class UnitDetector:
    """Base for detectors that inspect one source unit at a time."""

    category: ClassVar[RuleCategory]

    def detect(self, context: DetectionContext) -> list[Violation]:
        violations: list[Violation] = []
        for unit in context.units:
            violations.extend(self.detect_unit(unit, context))
        return violations

    def detect_unit(
        self, unit: SourceUnit, context: DetectionContext
    ) -> list[Violation]:
        raise NotImplementedError


__all__ = ["DetectionContext", "Detector", "UnitDetector"]
