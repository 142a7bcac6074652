from __future__ import annotations

import time
from pathlib import Path

import pytest

from analysis.aggregate import aggregate_results, compute_project_metrics
from analysis.collect import build_source_unit
from analysis.detect import execute_detection
from detectors import default_detectors
from detectors.base import DetectionContext
from graph.dependency_graph import build_dependency_graph
from models.source import Layer
from models.violations import VIOLATION_ADAPTER, ArchitectureViolation
from rules.severity import RuleCategory, Severity
from utils import resolve_root, to_relative_posix


def _violation(file: str, severity: Severity) -> ArchitectureViolation:
    return ArchitectureViolation(
        message="x",
        file=file,
        line=1,
        severity=severity,
        from_layer=Layer.DOMAIN,
        to_layer=Layer.INFRASTRUCTURE,
        import_path="../infrastructure/x",
    )


class _StaticDetector:
    category = RuleCategory.ARCHITECTURE

    def __init__(self, violations: list[ArchitectureViolation], delay: float = 0.0) -> None:
        self._violations = violations
        self._delay = delay

    def detect(self, context: DetectionContext) -> list[ArchitectureViolation]:
        time.sleep(self._delay)
        return list(self._violations)


def _empty_context() -> DetectionContext:
    return DetectionContext(units=(), graph=build_dependency_graph([]))


def test_build_source_unit() -> None:
    unit = build_source_unit(
        "src/domain/Order.ts",
        "import { Id } from './Id';\nexport class Order {}\n",
    )

    assert unit.layer == Layer.DOMAIN
    assert unit.imports == ("./Id",)
    assert unit.exports == ("Order",)
    assert unit.filename == "Order.ts"
    assert "content" not in repr(unit)


def test_default_detectors_cover_every_category_in_order() -> None:
    detectors = default_detectors()
    assert [d.category for d in detectors] == list(RuleCategory)

    remaining = default_detectors(
        disabled={RuleCategory.HARDCODE, RuleCategory.SECRET_EXPOSURE}
    )
    assert RuleCategory.HARDCODE not in {d.category for d in remaining}
    assert len(remaining) == len(RuleCategory) - 2


def test_execute_detection_collects_in_detector_order_not_completion_order() -> None:
    slow = _StaticDetector([_violation("slow.ts", Severity.LOW)], delay=0.05)
    fast = _StaticDetector([_violation("fast.ts", Severity.LOW)])

    results = execute_detection(_empty_context(), [slow, fast], max_workers=2)

    assert [v.file for v in results[RuleCategory.ARCHITECTURE]] == ["slow.ts", "fast.ts"]


def test_execute_detection_propagates_detector_errors() -> None:
    class _Broken:
        category = RuleCategory.ARCHITECTURE

        def detect(self, context: DetectionContext) -> list[ArchitectureViolation]:
            msg = "boom"
            raise ValueError(msg)

    with pytest.raises(ValueError, match="boom"):
        execute_detection(_empty_context(), [_Broken()])


def test_execute_detection_no_detectors() -> None:
    assert execute_detection(_empty_context(), []) == {}


def test_aggregate_results_sorts_each_category_stably() -> None:
    detection = {
        RuleCategory.ARCHITECTURE: [
            _violation("a.ts", Severity.LOW),
            _violation("b.ts", Severity.CRITICAL),
            _violation("c.ts", Severity.LOW),
            _violation("d.ts", Severity.HIGH),
        ]
    }

    report = aggregate_results([], build_dependency_graph([]), detection)

    assert [v.file for v in report.violations[RuleCategory.ARCHITECTURE]] == [
        "b.ts",
        "d.ts",
        "a.ts",
        "c.ts",
    ]
    assert report.violations[RuleCategory.ANEMIC_MODEL] == ()
    assert list(report.violations) == list(RuleCategory)


def test_compute_project_metrics() -> None:
    units = [
        build_source_unit("src/domain/a.ts", "import x from './b';\nfunction f() {}\n"),
        build_source_unit("src/domain/b.ts", "const g = () => 1;\n"),
        build_source_unit("src/main.ts", ""),
    ]

    metrics = compute_project_metrics(units)

    assert metrics.total_files == 3
    assert metrics.total_imports == 1
    assert metrics.total_functions == 2
    assert dict(metrics.layer_distribution) == {"domain": 2}


def test_violation_adapter_round_trips_variant() -> None:
    violation = _violation("a.ts", Severity.HIGH)

    data = violation.model_dump(mode="json")
    restored = VIOLATION_ADAPTER.validate_python(data)

    assert data["rule"] == "clean-architecture"
    assert isinstance(restored, ArchitectureViolation)
    assert restored == violation


def test_to_relative_posix() -> None:
    assert to_relative_posix("/repo/src/domain/User.ts", "/repo") == "src/domain/User.ts"
    assert to_relative_posix(Path("/other/a.ts"), "/repo") == "other/a.ts"


def test_resolve_root_expands_user(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))

    assert resolve_root("~/project") == (tmp_path / "project").resolve()
