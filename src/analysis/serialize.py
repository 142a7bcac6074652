"""Deterministic JSON rendering of analysis reports."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING, Any

import orjson

from rules.severity import Severity, is_at_least

if TYPE_CHECKING:
    from collections.abc import Iterable

    from models.report import Report
    from models.violations import Violation

JSON_OPTIONS = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2


def _severity_counts(violations: Iterable[Violation]) -> dict[str, int]:
    counts = {severity.value: 0 for severity in Severity}
    for violation in violations:
        counts[violation.severity.value] += 1
    return counts


def report_to_dict(
    report: Report, min_severity: Severity = Severity.LOW
) -> dict[str, Any]:
    """Convert a report to plain JSON-compatible data.

    File contents are left out; everything else needed to reproduce the
    findings (units, edges, violations, metrics) is included. Violations
    less severe than ``min_severity`` are dropped from both the per-category
    lists and the summary.
    """
    # asdict() would deep-copy the read-only layer mapping, which is not copyable.
    metrics = {
        "total_files": report.metrics.total_files,
        "total_functions": report.metrics.total_functions,
        "total_imports": report.metrics.total_imports,
        "layer_distribution": dict(report.metrics.layer_distribution),
    }

    violations = {
        category: [v for v in items if is_at_least(v.severity, min_severity)]
        for category, items in report.violations.items()
    }
    reported = [v for items in violations.values() for v in items]

    return {
        "files": [
            {
                "path": unit.path,
                "layer": unit.layer.value if unit.layer else None,
                "imports": list(unit.imports),
                "exports": list(unit.exports),
            }
            for unit in report.units
        ],
        "dependencies": [[source, target] for source, target in report.graph.edges()],
        "metrics": metrics,
        "graph_metrics": asdict(report.graph_metrics),
        "violations": {
            category.value: [v.model_dump(mode="json") for v in items]
            for category, items in violations.items()
        },
        "summary": {
            "total_violations": len(reported),
            "by_severity": _severity_counts(reported),
        },
    }


def dump_report(report: Report, min_severity: Severity = Severity.LOW) -> bytes:
    """Serialize a report to JSON bytes with sorted keys."""
    return orjson.dumps(report_to_dict(report, min_severity), option=JSON_OPTIONS)


__all__ = ["dump_report", "report_to_dict"]
