"""Layer classification and violation detection."""

from __future__ import annotations

import re

from models.source import Layer
from rules.config import LayersConfig

DEFAULT_LAYERS_CONFIG = LayersConfig()

_SEGMENT_SEPARATOR = re.compile(r"[\\/]+")


def path_segments(path: str) -> list[str]:
    """Split a path or import specifier into lower-cased segments."""
    return [segment for segment in _SEGMENT_SEPARATOR.split(path.lower()) if segment]


def classify_layer(
    path: str,
    layers_config: LayersConfig | None = None,
) -> Layer | None:
    """Classify a file path or import specifier into an architectural layer.

    Uses first-match-wins semantics over the configured priority order: the
    first layer definition with a keyword equal to one of the path segments
    determines the layer, regardless of where the segment appears.
    """
    config = layers_config or DEFAULT_LAYERS_CONFIG
    segments = set(path_segments(path))
    for layer_def in config.layer:
        for keyword in layer_def.keywords():
            if keyword in segments:
                return layer_def.name
    return None


def build_allowed_deps(layers_config: LayersConfig) -> dict[Layer, frozenset[Layer]]:
    """Build a mapping of layer -> set of allowed dependency layers."""
    allowed: dict[Layer, frozenset[Layer]] = {}
    for rule in layers_config.rules:
        allowed[rule.from_layer] = frozenset(rule.to)
    return allowed


def is_violation(
    from_layer: Layer | None,
    to_layer: Layer | None,
    allowed_deps: dict[Layer, frozenset[Layer]],
) -> bool:
    """Check if a dependency from one layer to another is a violation."""
    if from_layer is None or to_layer is None:
        return False

    if from_layer == to_layer:
        return False

    if from_layer not in allowed_deps:
        return False

    return to_layer not in allowed_deps[from_layer]


__all__ = [
    "DEFAULT_LAYERS_CONFIG",
    "build_allowed_deps",
    "classify_layer",
    "is_violation",
    "path_segments",
]
