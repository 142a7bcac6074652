"""Data model for analysis runs."""

from models.report import AnalysisFailure, GraphMetrics, ProjectMetrics, Report
from models.source import Layer, SourceUnit
from models.violations import (
    AggregateBoundaryViolation,
    AnemicModelViolation,
    ArchitectureViolation,
    CircularDependencyViolation,
    HardcodeViolation,
    NamingViolation,
    RepositoryPatternViolation,
    SecretViolation,
    Violation,
)

__all__ = [
    "AggregateBoundaryViolation",
    "AnalysisFailure",
    "AnemicModelViolation",
    "ArchitectureViolation",
    "CircularDependencyViolation",
    "GraphMetrics",
    "HardcodeViolation",
    "Layer",
    "NamingViolation",
    "ProjectMetrics",
    "RepositoryPatternViolation",
    "Report",
    "SecretViolation",
    "SourceUnit",
    "Violation",
]
