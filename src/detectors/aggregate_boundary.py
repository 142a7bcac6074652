"""Aggregate boundary checks for domain-driven layouts.

Aggregates should reference each other by identifier or value object only.
The aggregate a file belongs to is inferred from its path below the
``domain`` folder, for example::

    domain/aggregates/order/Order.ts -> order
    domain/entities/order/Order.ts   -> order
    domain/order/Order.ts            -> order

Import specifiers are inspected textually and never resolved to files.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from detectors.base import UnitDetector
from models.source import Layer
from models.violations import AggregateBoundaryViolation
from parse.lexical import iter_import_statements
from rules.severity import RuleCategory

if TYPE_CHECKING:
    from detectors.base import DetectionContext
    from models.source import SourceUnit

ENTITY_FOLDERS = frozenset({"entities", "aggregates"})
VALUE_OBJECT_FOLDERS = frozenset({"value-objects", "vo"})
ALLOWED_FOLDERS = frozenset(
    {
        "value-objects",
        "vo",
        "events",
        "domain-events",
        "repositories",
        "services",
        "specifications",
        "errors",
        "exceptions",
    }
)
NON_AGGREGATE_FOLDERS = ALLOWED_FOLDERS | {
    "entities",
    "constants",
    "shared",
    "factories",
    "ports",
    "interfaces",
}

AGGREGATE_SUGGESTION = "\n".join(
    (
        "1. Reference other aggregates by ID (UserId, OrderId) instead of entity",
        "2. Use Value Objects to store needed data from other aggregates "
        "(CustomerInfo, ProductSummary)",
        "3. Avoid direct entity references to maintain aggregate independence",
        "4. Each aggregate should be independently modifiable and deployable",
    )
)

_DOMAIN_SEGMENT = re.compile(r"(?:^|/)domain/")
_SOURCE_SUFFIX = re.compile(r"\.(ts|js)$")
_ENTITY_LIKE = re.compile(r"^[a-z][a-z]")


def aggregate_from_path(path: str) -> str | None:
    """Infer the aggregate a file belongs to from its path."""
    normalized = path.lower().replace("\\", "/")
    match = _DOMAIN_SEGMENT.search(normalized)
    if match is None:
        return None

    segments = [s for s in normalized[match.end() :].split("/") if s]
    if len(segments) < 2:
        return None

    if segments[0] in ENTITY_FOLDERS:
        if len(segments) < 3:
            return None
        aggregate = segments[1]
    else:
        aggregate = segments[0]

    if aggregate in NON_AGGREGATE_FOLDERS:
        return None
    return aggregate


def aggregate_from_import(specifier: str) -> str | None:
    """Infer the aggregate an import specifier points into."""
    segments = [s for s in specifier.lower().split("/") if s not in {"..", "."}]
    if not segments:
        return None

    for i, segment in enumerate(segments):
        if segment not in {"domain", "aggregates"} or i + 1 >= len(segments):
            continue
        following = segments[i + 1]
        if following in ENTITY_FOLDERS:
            if i + 2 < len(segments):
                return segments[i + 2]
        else:
            return following

    if len(segments) >= 2:
        second_last = segments[-2]
        if (
            second_last not in ENTITY_FOLDERS
            and second_last not in VALUE_OBJECT_FOLDERS
            and second_last not in ALLOWED_FOLDERS
            and second_last != "domain"
        ):
            return second_last

    return None


def _is_internal_import(normalized: str) -> bool:
    # "../aggregates/X" climbs to the bounded context root and back down.
    parts = normalized.split("/")
    if parts.count("..") != 1:
        return False
    named = [p for p in parts if p not in {"..", "."}]
    return bool(named) and named[0] in ENTITY_FOLDERS


def _is_allowed_import(normalized: str) -> bool:
    return any(f"/{folder}/" in normalized for folder in ALLOWED_FOLDERS)


def _looks_like_entity(normalized: str) -> bool:
    last = normalized.split("/")[-1]
    if not last:
        return False
    return _ENTITY_LIKE.match(_SOURCE_SUFFIX.sub("", last)) is not None


def crosses_aggregate_boundary(specifier: str, current_aggregate: str) -> bool:
    """Check whether an import references an entity of another aggregate."""
    normalized = specifier.lower()

    if "/" not in normalized or not normalized.startswith((".", "/")):
        return False

    if _is_internal_import(normalized):
        return False

    target = aggregate_from_import(normalized)
    if target is None or target == current_aggregate:
        return False

    if _is_allowed_import(normalized):
        return False

    return _looks_like_entity(normalized)


def entity_name(specifier: str) -> str | None:
    last = specifier.split("/")[-1]
    return _SOURCE_SUFFIX.sub("", last) or None


class AggregateBoundaryDetector(UnitDetector):
    category = RuleCategory.AGGREGATE_BOUNDARY

    def detect_unit(
        self, unit: SourceUnit, context: DetectionContext
    ) -> list[AggregateBoundaryViolation]:
        if unit.layer is not Layer.DOMAIN:
            return []

        current = aggregate_from_path(unit.path)
        if current is None:
            return []

        severity = context.severity_for(self.category)
        violations: list[AggregateBoundaryViolation] = []
        for line, specifier in iter_import_statements(unit.content):
            if not crosses_aggregate_boundary(specifier, current):
                continue
            target = aggregate_from_import(specifier)
            name = entity_name(specifier)
            if target is None or name is None:
                continue
            violations.append(
                AggregateBoundaryViolation(
                    message=(
                        f"Aggregate '{current}' directly references entity "
                        f"'{name}' from aggregate '{target}'"
                    ),
                    file=unit.path,
                    line=line,
                    severity=severity,
                    from_aggregate=current,
                    to_aggregate=target,
                    entity_name=name,
                    import_path=specifier,
                    suggestion=AGGREGATE_SUGGESTION,
                )
            )
        return violations


__all__ = [
    "AggregateBoundaryDetector",
    "aggregate_from_import",
    "aggregate_from_path",
    "crosses_aggregate_boundary",
]
