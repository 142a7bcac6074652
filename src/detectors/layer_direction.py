"""Layer dependency direction checks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from detectors.base import UnitDetector
from models.violations import ArchitectureViolation
from parse.lexical import iter_import_statements
from rules.layers import classify_layer, is_violation
from rules.severity import RuleCategory

if TYPE_CHECKING:
    from detectors.base import DetectionContext
    from models.source import SourceUnit


class LayerDirectionDetector(UnitDetector):
    """Flag imports whose target layer is not allowed for the importing layer.

    The imported layer is inferred from the specifier text alone, so package
    imports such as ``@app/infrastructure/db`` are classified too.
    """

    category = RuleCategory.ARCHITECTURE

    def detect_unit(
        self, unit: SourceUnit, context: DetectionContext
    ) -> list[ArchitectureViolation]:
        if unit.layer is None:
            return []

        severity = context.severity_for(self.category)
        violations: list[ArchitectureViolation] = []
        for line, specifier in iter_import_statements(unit.content):
            imported_layer = classify_layer(specifier, context.layers)
            if imported_layer is None:
                continue
            if not is_violation(unit.layer, imported_layer, context.allowed_deps):
                continue
            violations.append(
                ArchitectureViolation(
                    message=(
                        f'Layer "{unit.layer.value}" cannot import from '
                        f'"{imported_layer.value}"'
                    ),
                    file=unit.path,
                    line=line,
                    severity=severity,
                    from_layer=unit.layer,
                    to_layer=imported_layer,
                    import_path=specifier,
                )
            )
        return violations


__all__ = ["LayerDirectionDetector"]
