"""Layer, severity and configuration rules."""

from rules.config import (
    ArchGuardConfig,
    ConfigError,
    LayersConfig,
    load_config,
)
from rules.layers import build_allowed_deps, classify_layer, is_violation
from rules.severity import (
    DEFAULT_SEVERITY_MAP,
    RuleCategory,
    Severity,
    build_severity_map,
    sort_by_severity,
)

__all__ = [
    "DEFAULT_SEVERITY_MAP",
    "ArchGuardConfig",
    "ConfigError",
    "LayersConfig",
    "RuleCategory",
    "Severity",
    "build_allowed_deps",
    "build_severity_map",
    "classify_layer",
    "is_violation",
    "load_config",
    "sort_by_severity",
]
