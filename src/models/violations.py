"""Violation records emitted by detectors.

Every variant shares the common fields of :class:`BaseViolation` and is
discriminated by its ``rule`` field, so a list of mixed violations
round-trips through :data:`Violation` without losing its variant.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from models.source import Layer
from rules.severity import RuleCategory, Severity


class BaseViolation(BaseModel):
    """Fields common to every violation."""

    model_config = ConfigDict(frozen=True)

    message: str
    file: str = Field(description="Relative path of the offending file")
    line: int | None = Field(default=None, description="1-based line, if known")
    severity: Severity


class ArchitectureViolation(BaseViolation):
    """An import that crosses layers against the allow-list."""

    rule: Literal[RuleCategory.ARCHITECTURE] = RuleCategory.ARCHITECTURE
    from_layer: Layer
    to_layer: Layer
    import_path: str


class CircularDependencyViolation(BaseViolation):
    """A dependency cycle between project files."""

    rule: Literal[RuleCategory.CIRCULAR_DEPENDENCY] = RuleCategory.CIRCULAR_DEPENDENCY
    cycle: tuple[str, ...]


class AggregateBoundaryViolation(BaseViolation):
    """A direct entity reference across aggregate boundaries."""

    rule: Literal[RuleCategory.AGGREGATE_BOUNDARY] = RuleCategory.AGGREGATE_BOUNDARY
    from_aggregate: str
    to_aggregate: str
    entity_name: str
    import_path: str
    suggestion: str


class NamingViolation(BaseViolation):
    rule: Literal[RuleCategory.NAMING_CONVENTION] = RuleCategory.NAMING_CONVENTION
    name: str
    violation_type: str
    layer: Layer
    expected: str
    suggestion: str | None = None


class FrameworkLeakViolation(BaseViolation):
    """A framework or driver package imported into an inner layer."""

    rule: Literal[RuleCategory.FRAMEWORK_LEAK] = RuleCategory.FRAMEWORK_LEAK
    package_name: str
    category: str
    category_description: str
    layer: Layer
    suggestion: str


class EntityExposureViolation(BaseViolation):
    """A domain entity returned across the presentation boundary."""

    rule: Literal[RuleCategory.ENTITY_EXPOSURE] = RuleCategory.ENTITY_EXPOSURE
    entity_name: str
    return_type: str
    method_name: str
    layer: Layer
    suggestion: str


class DependencyDirectionViolation(BaseViolation):
    """An inner-layer file depending on a file of an outer layer."""

    rule: Literal[RuleCategory.DEPENDENCY_DIRECTION] = RuleCategory.DEPENDENCY_DIRECTION
    from_layer: Layer
    to_layer: Layer
    import_path: str
    suggestion: str


class HardcodeViolation(BaseViolation):
    rule: Literal[RuleCategory.HARDCODE] = RuleCategory.HARDCODE
    hardcode_type: Literal["magic-number", "magic-string"]
    value: str | int | float
    column: int
    context: str
    suggested_constant: str
    suggested_location: str


class RepositoryPatternViolation(BaseViolation):
    rule: Literal[RuleCategory.REPOSITORY_PATTERN] = RuleCategory.REPOSITORY_PATTERN
    violation_type: str
    layer: Layer
    details: str
    orm_type: str | None = None
    repository_name: str | None = None
    method_name: str | None = None
    suggestion: str


class AnemicModelViolation(BaseViolation):
    rule: Literal[RuleCategory.ANEMIC_MODEL] = RuleCategory.ANEMIC_MODEL
    class_name: str
    layer: Layer
    method_count: int
    property_count: int
    has_only_getters_setters: bool
    has_public_setters: bool
    suggestion: str


class SecretViolation(BaseViolation):
    """A credential found in source text by the secret scanner."""

    rule: Literal[RuleCategory.SECRET_EXPOSURE] = RuleCategory.SECRET_EXPOSURE
    secret_type: str
    column: int
    suggestion: str


Violation = Annotated[
    Union[
        ArchitectureViolation,
        CircularDependencyViolation,
        AggregateBoundaryViolation,
        NamingViolation,
        FrameworkLeakViolation,
        EntityExposureViolation,
        DependencyDirectionViolation,
        HardcodeViolation,
        RepositoryPatternViolation,
        AnemicModelViolation,
        SecretViolation,
    ],
    Field(discriminator="rule"),
]

VIOLATION_ADAPTER: TypeAdapter[Violation] = TypeAdapter(Violation)


__all__ = [
    "VIOLATION_ADAPTER",
    "AggregateBoundaryViolation",
    "AnemicModelViolation",
    "ArchitectureViolation",
    "BaseViolation",
    "CircularDependencyViolation",
    "DependencyDirectionViolation",
    "EntityExposureViolation",
    "FrameworkLeakViolation",
    "HardcodeViolation",
    "NamingViolation",
    "RepositoryPatternViolation",
    "SecretViolation",
    "Violation",
]
