"""Configuration loading for archguard.toml."""

from __future__ import annotations

from typing import TYPE_CHECKING

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.source import Layer
from rules.severity import RuleCategory, Severity, build_severity_map

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

CONFIG_FILENAME = "archguard.toml"

DEFAULT_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")

DEFAULT_EXCLUDE = (
    "node_modules/*",
    "*/node_modules/*",
    "dist/*",
    "build/*",
    "coverage/*",
)


class LayerDef(BaseModel):
    """Definition of a single architectural layer."""

    model_config = ConfigDict(frozen=True)

    name: Layer = Field(description="Layer name")
    segments: tuple[str, ...] = Field(
        default=(),
        description="Path segments marking this layer (default: the layer name)",
    )

    @field_validator("segments", mode="after")
    @classmethod
    def lowercase_segments(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(segment.lower() for segment in v)

    def keywords(self) -> tuple[str, ...]:
        """Return the path segments that identify this layer."""
        return self.segments or (self.name.value,)


class LayerRule(BaseModel):
    """Allowed dependencies from one layer to others."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_layer: Layer = Field(alias="from", description="Source layer name")
    to: tuple[Layer, ...] = Field(
        default=(),
        description="Layers this layer may depend on",
    )


def _default_layer_defs() -> tuple[LayerDef, ...]:
    return tuple(LayerDef(name=layer) for layer in Layer)


def _default_layer_rules() -> tuple[LayerRule, ...]:
    return (
        LayerRule(from_layer=Layer.DOMAIN, to=(Layer.SHARED,)),
        LayerRule(from_layer=Layer.APPLICATION, to=(Layer.DOMAIN, Layer.SHARED)),
        LayerRule(
            from_layer=Layer.INFRASTRUCTURE,
            to=(Layer.DOMAIN, Layer.APPLICATION, Layer.SHARED),
        ),
        LayerRule(from_layer=Layer.SHARED, to=()),
    )


class LayersConfig(BaseModel):
    """Configuration for architectural layer classification and rules."""

    model_config = ConfigDict(frozen=True)

    layer: tuple[LayerDef, ...] = Field(
        default_factory=_default_layer_defs,
        description="Layer definitions in priority order (first match wins)",
    )
    rules: tuple[LayerRule, ...] = Field(
        default_factory=_default_layer_rules,
        description="Allowed dependency rules between layers",
    )


class ArchGuardConfig(BaseModel):
    """Configuration for an analysis run."""

    model_config = ConfigDict(extra="forbid")

    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to include (empty = all source files)",
    )
    exclude: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE),
        description="Glob patterns for files to exclude",
    )
    extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTENSIONS),
        description="Source file extensions to analyze",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    max_workers: int = Field(
        default=8,
        ge=1,
        description="Upper bound for concurrent file reads and detectors",
    )
    layers: LayersConfig = Field(
        default_factory=LayersConfig,
        description="Architectural layer classification and rules",
    )
    severity: dict[RuleCategory, Severity] = Field(
        default_factory=dict,
        description="Per-category severity overrides",
    )
    disabled_rules: list[RuleCategory] = Field(
        default_factory=list,
        description="Rule categories to skip entirely",
    )

    @field_validator("extensions", mode="after")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        for ext in v:
            if not ext.startswith("."):
                msg = f"Invalid extension '{ext}': extensions must start with '.'"
                raise ValueError(msg)
        return v

    def severity_map(self) -> Mapping[RuleCategory, Severity]:
        """Build the read-only severity map for this configuration."""
        return build_severity_map(self.severity)


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def load_config(root: Path) -> ArchGuardConfig:
    """Load configuration from archguard.toml if it exists."""
    config_path = root / CONFIG_FILENAME

    if not config_path.is_file():
        return ArchGuardConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return ArchGuardConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_EXCLUDE",
    "DEFAULT_EXTENSIONS",
    "ArchGuardConfig",
    "ConfigError",
    "LayerDef",
    "LayerRule",
    "LayersConfig",
    "load_config",
]
