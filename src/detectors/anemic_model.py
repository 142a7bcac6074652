"""Anemic domain model detection for entity and aggregate classes."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from detectors.base import UnitDetector
from models.source import Layer
from models.violations import AnemicModelViolation
from rules.severity import RuleCategory

if TYPE_CHECKING:
    from detectors.base import DetectionContext
    from models.source import SourceUnit

_ENTITY_PATHS = (re.compile(r"/entities/"), re.compile(r"/aggregates/"))
_EXCLUDED_PATHS = tuple(
    re.compile(pattern)
    for pattern in (
        r"\.test\.ts$",
        r"\.spec\.ts$",
        r"Dto\.ts$",
        r"Request\.ts$",
        r"Response\.ts$",
        r"Mapper\.ts$",
    )
)

_CLASS_START = re.compile(r"^\s*(?:export\s+)?(?:abstract\s+)?class\s+(\w+)")
_PROPERTY = re.compile(r"(?:private|protected|public|readonly)*\s*(\w+)(?:\?)?:\s*\w+")
_METHOD = re.compile(
    r"(public|private|protected)?\s*(get|set)?\s+(\w+)\s*\([^)]*\)(?:\s*:\s*\w+)?"
)
# Statements inside method bodies that the method pattern would otherwise pick up.
_NOT_METHODS = frozenset(
    {"constructor", "if", "for", "while", "switch", "catch", "return", "function"}
)

PUBLIC_SETTER_SUGGESTION = "\n".join(
    (
        "1. Remove public setters",
        "2. Change state through intention-revealing methods (e.g. approve(), cancel())",
        "3. Enforce invariants inside the entity",
    )
)
BUSINESS_LOGIC_SUGGESTION = "\n".join(
    (
        "1. Add business methods that express domain behavior",
        "2. Move logic from services into the entity",
        "3. Encapsulate business rules and validations",
        "4. Raise domain events for significant state changes",
    )
)


@dataclass(frozen=True)
class MethodInfo:
    name: str
    is_getter: bool
    is_setter: bool
    is_public: bool

    @property
    def is_business_logic(self) -> bool:
        return not self.is_getter and not self.is_setter


@dataclass
class ClassInfo:
    name: str
    line: int
    properties: list[str] = field(default_factory=list)
    methods: list[MethodInfo] = field(default_factory=list)


def should_analyze(path: str, layer: Layer | None) -> bool:
    if layer is not Layer.DOMAIN:
        return False
    if any(pattern.search(path) for pattern in _EXCLUDED_PATHS):
        return False
    return any(pattern.search(path) for pattern in _ENTITY_PATHS)


def _extract_properties(body: str) -> list[str]:
    return [
        match.group(1)
        for match in _PROPERTY.finditer(body)
        if not ("(" in match.group(0) and ")" in match.group(0))
    ]


def _extract_methods(body: str) -> list[MethodInfo]:
    methods: list[MethodInfo] = []
    for match in _METHOD.finditer(body):
        visibility, accessor, name = match.groups()
        if name in _NOT_METHODS:
            continue
        methods.append(
            MethodInfo(
                name=name,
                is_getter=accessor == "get" or name.startswith(("get", "is", "has")),
                is_setter=accessor == "set" or name.startswith("set"),
                is_public=visibility in {None, "public"},
            )
        )
    return methods


def extract_classes(content: str) -> list[ClassInfo]:
    """Split source text into classes by brace counting."""
    classes: list[ClassInfo] = []
    current: ClassInfo | None = None
    depth = 0
    body: list[str] = []

    for number, line in enumerate(content.split("\n"), start=1):
        if current is None:
            match = _CLASS_START.match(line)
            if match:
                current = ClassInfo(name=match.group(1), line=number)
                depth = 0
                body = []

        if current is None:
            continue

        depth += line.count("{") - line.count("}")
        if depth > 0:
            body.append(line)
        elif depth == 0 and body:
            text = "\n".join(body) + "\n"
            current.properties = _extract_properties(text)
            current.methods = _extract_methods(text)
            classes.append(current)
            current = None
            body = []

    return classes


class AnemicModelDetector(UnitDetector):
    category = RuleCategory.ANEMIC_MODEL

    def detect_unit(
        self, unit: SourceUnit, context: DetectionContext
    ) -> list[AnemicModelViolation]:
        if not should_analyze(unit.path, unit.layer):
            return []

        violations: list[AnemicModelViolation] = []
        for info in extract_classes(unit.content):
            violation = self._analyze(info, unit, context)
            if violation is not None:
                violations.append(violation)
        return violations

    def _analyze(
        self, info: ClassInfo, unit: SourceUnit, context: DetectionContext
    ) -> AnemicModelViolation | None:
        method_count = len(info.methods)
        property_count = len(info.properties)
        if not method_count and not property_count:
            return None

        business_methods = [m for m in info.methods if m.is_business_logic]
        only_accessors = not business_methods and method_count > 0
        public_setters = any(m.is_setter and m.is_public for m in info.methods)
        ratio = method_count / max(property_count, 1)

        if public_setters:
            message = f"Class '{info.name}' has public setters (anti-pattern in DDD)"
            suggestion = PUBLIC_SETTER_SUGGESTION
            flags = (False, True)
        elif only_accessors and method_count >= 2 and property_count > 0:
            message = (
                f"Class '{info.name}' is anemic: {method_count} methods "
                f"(all getters/setters) for {property_count} properties"
            )
            suggestion = BUSINESS_LOGIC_SUGGESTION
            flags = (True, False)
        elif (
            property_count > 0
            and len(business_methods) < 2
            and ratio < 1.0
            and method_count > 0
        ):
            message = (
                f"Class '{info.name}' appears anemic: low method-to-property "
                f"ratio ({ratio:.1f}:1)"
            )
            suggestion = BUSINESS_LOGIC_SUGGESTION
            flags = (False, False)
        else:
            return None

        has_only_getters_setters, has_public_setters = flags
        return AnemicModelViolation(
            message=message,
            file=unit.path,
            line=info.line,
            severity=context.severity_for(self.category),
            class_name=info.name,
            layer=Layer.DOMAIN,
            method_count=method_count,
            property_count=property_count,
            has_only_getters_setters=has_only_getters_setters,
            has_public_setters=has_public_setters,
            suggestion=suggestion,
        )


__all__ = ["AnemicModelDetector", "extract_classes", "should_analyze"]
