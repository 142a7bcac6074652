"""Domain entity exposure from presentation code.

Controllers, routes and resolvers should answer with DTOs. A handler whose
declared return type names a domain entity or aggregate leaks the domain
model to API consumers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from detectors.base import UnitDetector
from models.source import Layer
from models.violations import EntityExposureViolation
from parse.treesitter import iter_nodes, node_line, node_text, parse_source
from rules.layers import classify_layer, path_segments
from rules.severity import RuleCategory

if TYPE_CHECKING:
    from tree_sitter import Node

    from detectors.base import DetectionContext
    from models.source import SourceUnit
    from rules.config import LayersConfig

PRESENTATION_SEGMENTS = frozenset(
    {
        "controllers",
        "controller",
        "presentation",
        "http",
        "api",
        "routes",
        "resolvers",
    }
)
ENTITY_SEGMENTS = frozenset({"entities", "aggregates"})
HANDLER_NODES = frozenset({"method_definition", "function_declaration"})

DEFAULT_METHOD_NAME = "getEntity"


def is_presentation_file(path: str) -> bool:
    """Return True for files that serve requests (controllers, routes, ...)."""
    segments = path_segments(path)
    if PRESENTATION_SEGMENTS.intersection(segments[:-1]):
        return True
    return bool(segments) and "controller" in segments[-1]


def _unquote(text: str) -> str:
    return text.strip("'\"`")


def entity_imports(root: Node, layers: LayersConfig | None = None) -> dict[str, str]:
    """Map local names to entity names for imports from domain entity modules."""
    entities: dict[str, str] = {}
    for node in iter_nodes(root):
        if node.type != "import_statement":
            continue
        specifier = _unquote(node_text(node.child_by_field_name("source")))
        if classify_layer(specifier, layers) is not Layer.DOMAIN:
            continue
        if not ENTITY_SEGMENTS.intersection(path_segments(specifier)):
            continue

        for child in iter_nodes(node):
            if child.type == "import_specifier":
                name = node_text(child.child_by_field_name("name"))
                alias = node_text(child.child_by_field_name("alias")) or name
                entities[alias] = name
            elif child.type == "import_clause":
                default = next(
                    (c for c in child.named_children if c.type == "identifier"), None
                )
                if default is not None:
                    entities[node_text(default)] = node_text(default)
    return entities


def _exposed_entity(return_type: Node, entities: dict[str, str]) -> str | None:
    for node in iter_nodes(return_type):
        if node.type == "type_identifier" and node_text(node) in entities:
            return entities[node_text(node)]
    return None


class EntityExposureDetector(UnitDetector):
    """Flag presentation handlers whose return type is a domain entity."""

    category = RuleCategory.ENTITY_EXPOSURE

    def detect_unit(
        self, unit: SourceUnit, context: DetectionContext
    ) -> list[EntityExposureViolation]:
        if unit.layer is None or unit.layer is Layer.DOMAIN:
            return []
        if not is_presentation_file(unit.path) or not unit.content.strip():
            return []

        tree = parse_source(unit.content, unit.path)
        entities = entity_imports(tree.root_node, context.layers)
        if not entities:
            return []

        severity = context.severity_for(self.category)
        violations: list[EntityExposureViolation] = []
        for node in iter_nodes(tree.root_node):
            if node.type not in HANDLER_NODES:
                continue
            method_name = node_text(node.child_by_field_name("name"))
            if method_name == "constructor":
                continue
            return_type = node.child_by_field_name("return_type")
            if return_type is None:
                continue
            entity = _exposed_entity(return_type, entities)
            if entity is None:
                continue

            rendered = node_text(return_type).lstrip(":").strip()
            method_name = method_name or DEFAULT_METHOD_NAME
            violations.append(
                EntityExposureViolation(
                    message=(
                        f'Method "{method_name}" exposes domain entity '
                        f'"{entity}" through return type {rendered}'
                    ),
                    file=unit.path,
                    line=node_line(node),
                    severity=severity,
                    entity_name=entity,
                    return_type=rendered,
                    method_name=method_name,
                    layer=unit.layer,
                    suggestion="\n".join(
                        (
                            f"Create a {entity}ResponseDto in the application layer",
                            f"Map {entity} to the DTO with a mapper",
                            f"Return the DTO from {method_name} instead of the entity",
                        )
                    ),
                )
            )
        return violations


__all__ = [
    "EntityExposureDetector",
    "entity_imports",
    "is_presentation_file",
]
