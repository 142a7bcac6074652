"""Severity taxonomy and rule categories."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


class Severity(str, Enum):
    """Violation severity levels, most severe first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RuleCategory(str, Enum):
    """Violation categories. The value doubles as the rule identifier."""

    ARCHITECTURE = "clean-architecture"
    CIRCULAR_DEPENDENCY = "circular-dependency"
    AGGREGATE_BOUNDARY = "aggregate-boundary"
    NAMING_CONVENTION = "naming-convention"
    FRAMEWORK_LEAK = "framework-leak"
    ENTITY_EXPOSURE = "entity-exposure"
    DEPENDENCY_DIRECTION = "dependency-direction"
    HARDCODE = "hardcoded-value"
    REPOSITORY_PATTERN = "repository-pattern"
    ANEMIC_MODEL = "anemic-model"
    SECRET_EXPOSURE = "secret-exposure"


SEVERITY_ORDER: Mapping[Severity, int] = MappingProxyType(
    {
        Severity.CRITICAL: 0,
        Severity.HIGH: 1,
        Severity.MEDIUM: 2,
        Severity.LOW: 3,
    }
)

DEFAULT_SEVERITY_MAP: Mapping[RuleCategory, Severity] = MappingProxyType(
    {
        RuleCategory.SECRET_EXPOSURE: Severity.CRITICAL,
        RuleCategory.CIRCULAR_DEPENDENCY: Severity.CRITICAL,
        RuleCategory.REPOSITORY_PATTERN: Severity.CRITICAL,
        RuleCategory.AGGREGATE_BOUNDARY: Severity.CRITICAL,
        RuleCategory.DEPENDENCY_DIRECTION: Severity.HIGH,
        RuleCategory.FRAMEWORK_LEAK: Severity.HIGH,
        RuleCategory.ENTITY_EXPOSURE: Severity.HIGH,
        RuleCategory.ANEMIC_MODEL: Severity.MEDIUM,
        RuleCategory.NAMING_CONVENTION: Severity.MEDIUM,
        RuleCategory.ARCHITECTURE: Severity.MEDIUM,
        RuleCategory.HARDCODE: Severity.LOW,
    }
)

_T = TypeVar("_T")


def build_severity_map(
    overrides: Mapping[RuleCategory, Severity] | None = None,
) -> Mapping[RuleCategory, Severity]:
    """Return a read-only severity map with per-category overrides applied."""
    merged = dict(DEFAULT_SEVERITY_MAP)
    if overrides:
        merged.update(overrides)
    return MappingProxyType(merged)


def severity_rank(severity: Severity) -> int:
    """Return the sort rank of a severity (0 is most severe)."""
    return SEVERITY_ORDER[severity]


def is_at_least(severity: Severity, threshold: Severity) -> bool:
    """Check whether ``severity`` is as severe as ``threshold`` or more."""
    return severity_rank(severity) <= severity_rank(threshold)


def sort_by_severity(violations: Iterable[_T]) -> list[_T]:
    """Sort violations by severity rank, keeping input order within a tier.

    Items must expose a ``severity`` attribute holding a :class:`Severity`.
    """
    return sorted(violations, key=lambda v: severity_rank(v.severity))  # type: ignore[attr-defined]


__all__ = [
    "DEFAULT_SEVERITY_MAP",
    "SEVERITY_ORDER",
    "RuleCategory",
    "Severity",
    "build_severity_map",
    "is_at_least",
    "severity_rank",
    "sort_by_severity",
]
