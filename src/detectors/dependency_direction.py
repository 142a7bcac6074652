"""Inward dependency direction over resolved project files.

Unlike the configurable layer rules, which classify the specifier text, this
check follows each relative import to the file it resolves to and compares
the layers of both files. Domain must stay independent of every outer layer
and application must not reach into infrastructure.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

from detectors.base import UnitDetector
from models.source import Layer
from models.violations import DependencyDirectionViolation
from parse.lexical import iter_import_statements
from parse.resolve import is_relative_specifier, resolve_import_path
from rules.severity import RuleCategory

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping

    from detectors.base import DetectionContext
    from models.source import SourceUnit
    from models.violations import Violation

FORBIDDEN_TARGETS: Mapping[Layer, frozenset[Layer]] = MappingProxyType(
    {
        Layer.DOMAIN: frozenset({Layer.APPLICATION, Layer.INFRASTRUCTURE}),
        Layer.APPLICATION: frozenset({Layer.INFRASTRUCTURE}),
    }
)

DOMAIN_SUGGESTION = "\n".join(
    (
        "Domain layer should be independent and not depend on other layers",
        "Move the imported code to the domain layer if it contains business logic",
        "Use dependency inversion: define an interface in domain and implement "
        "it in infrastructure",
    )
)

APPLICATION_SUGGESTION = "\n".join(
    (
        "Application layer should not depend on infrastructure",
        "Define an interface (Port) in application layer",
        "Implement the interface (Adapter) in infrastructure layer",
        "Use dependency injection to provide the implementation",
    )
)

_SUGGESTIONS = {
    Layer.DOMAIN: DOMAIN_SUGGESTION,
    Layer.APPLICATION: APPLICATION_SUGGESTION,
}


class DependencyDirectionDetector(UnitDetector):
    """Flag domain and application files that import outer-layer files."""

    category = RuleCategory.DEPENDENCY_DIRECTION

    def detect(self, context: DetectionContext) -> list[Violation]:
        known = frozenset(context.graph.paths)
        violations: list[Violation] = []
        for unit in context.units:
            violations.extend(self._check(unit, context, known))
        return violations

    def detect_unit(
        self, unit: SourceUnit, context: DetectionContext
    ) -> list[DependencyDirectionViolation]:
        return self._check(unit, context, frozenset(context.graph.paths))

    def _check(
        self,
        unit: SourceUnit,
        context: DetectionContext,
        known: Collection[str],
    ) -> list[DependencyDirectionViolation]:
        forbidden = FORBIDDEN_TARGETS.get(unit.layer) if unit.layer else None
        if not forbidden:
            return []

        severity = context.severity_for(self.category)
        violations: list[DependencyDirectionViolation] = []
        for line, specifier in iter_import_statements(unit.content):
            if not is_relative_specifier(specifier):
                continue
            target = context.graph.get_unit(
                resolve_import_path(unit.path, specifier, known)
            )
            if target is None or target.layer not in forbidden:
                continue
            violations.append(
                DependencyDirectionViolation(
                    message=(
                        f'Layer "{unit.layer.value}" must not depend on layer '
                        f'"{target.layer.value}" (imports {target.path})'
                    ),
                    file=unit.path,
                    line=line,
                    severity=severity,
                    from_layer=unit.layer,
                    to_layer=target.layer,
                    import_path=specifier,
                    suggestion=_SUGGESTIONS[unit.layer],
                )
            )
        return violations


__all__ = [
    "APPLICATION_SUGGESTION",
    "DOMAIN_SUGGESTION",
    "FORBIDDEN_TARGETS",
    "DependencyDirectionDetector",
]
