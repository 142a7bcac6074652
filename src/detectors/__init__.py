"""Rule detectors and the default detector set."""

from __future__ import annotations

from typing import TYPE_CHECKING

from detectors.aggregate_boundary import AggregateBoundaryDetector
from detectors.anemic_model import AnemicModelDetector
from detectors.base import DetectionContext, Detector, UnitDetector
from detectors.cycles import CircularDependencyDetector
from detectors.dependency_direction import DependencyDirectionDetector
from detectors.entity_exposure import EntityExposureDetector
from detectors.framework_leak import FrameworkLeakDetector
from detectors.hardcode import HardcodeDetector
from detectors.layer_direction import LayerDirectionDetector
from detectors.naming import NamingConventionDetector
from detectors.repository_pattern import RepositoryPatternDetector
from detectors.secrets import (
    DetectSecretsScanner,
    SecretExposureDetector,
    SecretFinding,
    SecretScanner,
)

if TYPE_CHECKING:
    from collections.abc import Collection

    from rules.severity import RuleCategory


def default_detectors(
    secret_scanner: SecretScanner | None = None,
    *,
    disabled: Collection[RuleCategory] = (),
) -> list[Detector]:
    """Return one detector per rule category, in category order."""
    detectors: list[Detector] = [
        LayerDirectionDetector(),
        CircularDependencyDetector(),
        AggregateBoundaryDetector(),
        NamingConventionDetector(),
        FrameworkLeakDetector(),
        EntityExposureDetector(),
        DependencyDirectionDetector(),
        HardcodeDetector(),
        RepositoryPatternDetector(),
        AnemicModelDetector(),
        SecretExposureDetector(secret_scanner),
    ]
    return [d for d in detectors if d.category not in disabled]


__all__ = [
    "AggregateBoundaryDetector",
    "AnemicModelDetector",
    "CircularDependencyDetector",
    "DependencyDirectionDetector",
    "DetectSecretsScanner",
    "DetectionContext",
    "Detector",
    "EntityExposureDetector",
    "FrameworkLeakDetector",
    "HardcodeDetector",
    "LayerDirectionDetector",
    "NamingConventionDetector",
    "RepositoryPatternDetector",
    "SecretExposureDetector",
    "SecretFinding",
    "SecretScanner",
    "UnitDetector",
    "default_detectors",
]
