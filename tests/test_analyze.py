from __future__ import annotations

import importlib
import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

import orjson

import analysis
from analysis import analyze
from analysis.serialize import dump_report, report_to_dict
from detectors.secrets import SecretFinding
from models.report import AnalysisFailure, Report
from models.source import Layer
from rules.config import ArchGuardConfig
from rules.severity import RuleCategory, Severity

if TYPE_CHECKING:
    from collections.abc import Sequence

    import pytest

_FIXTURE_REPO = Path(__file__).parent / "fixtures" / "layered_app"


class _NoSecrets:
    async def detect_secrets(self, content: str, path: str) -> list[SecretFinding]:
        return []


class _FlakyFileAccess:
    """In-memory project where some files fail to read."""

    def __init__(
        self,
        root: Path,
        files: dict[str, str],
        unreadable: set[str],
        error: type[Exception] = PermissionError,
    ) -> None:
        self._root = root
        self._files = files
        self._unreadable = unreadable
        self._error = error

    def scan(
        self,
        root: Path,
        include: Sequence[str] | None = None,
        exclude: Sequence[str] | None = None,
    ) -> list[Path]:
        return [root / rel for rel in sorted(self._files)]

    def read_file(self, path: Path) -> str:
        rel = path.relative_to(self._root).as_posix()
        if rel in self._unreadable:
            msg = f"cannot read {rel}"
            raise self._error(msg)
        return self._files[rel]


def _copy_fixture(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    shutil.copytree(_FIXTURE_REPO, root)
    return root


def _analyze_fixture(tmp_path: Path, **kwargs: object) -> Report:
    result = analyze(_copy_fixture(tmp_path), secret_scanner=_NoSecrets(), **kwargs)  # type: ignore[arg-type]
    assert isinstance(result, Report)
    return result


def test_fixture_violations_by_category(tmp_path: Path) -> None:
    report = _analyze_fixture(tmp_path)

    counts = {category: len(items) for category, items in report.violations.items()}
    assert list(report.violations) == list(RuleCategory)
    assert counts == {
        RuleCategory.ARCHITECTURE: 2,
        RuleCategory.CIRCULAR_DEPENDENCY: 1,
        RuleCategory.AGGREGATE_BOUNDARY: 0,
        RuleCategory.NAMING_CONVENTION: 0,
        RuleCategory.FRAMEWORK_LEAK: 0,
        RuleCategory.ENTITY_EXPOSURE: 0,
        RuleCategory.DEPENDENCY_DIRECTION: 2,
        RuleCategory.HARDCODE: 0,
        RuleCategory.REPOSITORY_PATTERN: 1,
        RuleCategory.ANEMIC_MODEL: 0,
        RuleCategory.SECRET_EXPOSURE: 0,
    }
    assert report.total_violations == 6

    architecture = report.violations[RuleCategory.ARCHITECTURE]
    assert [(v.file, v.line) for v in architecture] == [
        ("src/application/use-cases/RegisterUser.ts", 2),
        ("src/domain/entities/User.ts", 1),
    ]

    direction = report.violations[RuleCategory.DEPENDENCY_DIRECTION]
    assert [(v.file, v.to_layer) for v in direction] == [
        ("src/application/use-cases/RegisterUser.ts", Layer.INFRASTRUCTURE),
        ("src/domain/entities/User.ts", Layer.INFRASTRUCTURE),
    ]

    (cycle,) = report.violations[RuleCategory.CIRCULAR_DEPENDENCY]
    assert cycle.message == (
        "Circular dependency detected: src/shared/events/publish.ts -> "
        "src/shared/events/subscribe.ts -> src/shared/events/publish.ts"
    )


def test_fixture_metrics(tmp_path: Path) -> None:
    report = _analyze_fixture(tmp_path)

    assert report.metrics.total_files == 7
    assert report.metrics.total_imports == 7
    assert report.metrics.total_functions == 9
    assert dict(report.metrics.layer_distribution) == {
        "domain": 2,
        "application": 1,
        "infrastructure": 2,
        "shared": 2,
    }
    assert report.graph_metrics.total_files == 7
    assert report.graph_metrics.total_dependencies == 7
    assert report.graph_metrics.max_dependencies == 2
    assert [unit.path for unit in report.units] == sorted(unit.path for unit in report.units)


def test_severity_override_and_disabled_rules(tmp_path: Path) -> None:
    config = ArchGuardConfig(
        severity={RuleCategory.ARCHITECTURE: Severity.CRITICAL},
        disabled_rules=[RuleCategory.CIRCULAR_DEPENDENCY],
    )

    report = _analyze_fixture(tmp_path, config=config)

    assert report.violations[RuleCategory.CIRCULAR_DEPENDENCY] == ()
    assert {v.severity for v in report.violations[RuleCategory.ARCHITECTURE]} == {
        Severity.CRITICAL
    }


def test_include_and_exclude_patterns(tmp_path: Path) -> None:
    report = _analyze_fixture(tmp_path, include=["src/shared/*"])
    assert [unit.path for unit in report.units] == [
        "src/shared/events/publish.ts",
        "src/shared/events/subscribe.ts",
    ]

    report = _analyze_fixture(tmp_path / "second", exclude=["src/shared/*"])
    assert report.metrics.total_files == 5
    assert report.violations[RuleCategory.CIRCULAR_DEPENDENCY] == ()


def test_config_file_is_loaded_from_root(tmp_path: Path) -> None:
    root = _copy_fixture(tmp_path)
    (root / "archguard.toml").write_text(
        'disabled_rules = ["clean-architecture"]\n', encoding="utf-8"
    )

    result = analyze(root, secret_scanner=_NoSecrets())

    assert isinstance(result, Report)
    assert result.violations[RuleCategory.ARCHITECTURE] == ()


def test_unreadable_file_is_skipped(tmp_path: Path) -> None:
    files = {
        "src/domain/a.ts": "export const a = 1;\n",
        "src/domain/b.ts": "export const b = 2;\n",
        "src/domain/c.ts": "export const c = 3;\n",
    }
    file_access = _FlakyFileAccess(tmp_path, files, unreadable={"src/domain/b.ts"})

    result = analyze(
        tmp_path,
        config=ArchGuardConfig(),
        file_access=file_access,
        secret_scanner=_NoSecrets(),
    )

    assert isinstance(result, Report)
    assert [unit.path for unit in result.units] == ["src/domain/a.ts", "src/domain/c.ts"]
    assert result.metrics.total_files == len(files) - 1


def test_any_read_error_skips_only_that_file(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    files = {
        "src/shared/a.ts": "export const a = 1;\n",
        "src/shared/b.ts": "export const b = 2;\n",
        "src/shared/c.ts": "export const c = 3;\n",
    }
    file_access = _FlakyFileAccess(
        tmp_path, files, unreadable={"src/shared/c.ts"}, error=RuntimeError
    )

    with caplog.at_level(logging.WARNING, logger="analysis.collect"):
        result = analyze(
            tmp_path,
            config=ArchGuardConfig(),
            file_access=file_access,
            secret_scanner=_NoSecrets(),
        )

    assert isinstance(result, Report)
    assert [unit.path for unit in result.units] == ["src/shared/a.ts", "src/shared/b.ts"]
    assert "Skipping unreadable file src/shared/c.ts: cannot read src/shared/c.ts" in caplog.text


def test_missing_root_returns_failure(tmp_path: Path) -> None:
    result = analyze(tmp_path / "missing")

    assert isinstance(result, AnalysisFailure)
    assert result.message.startswith("Failed to analyze project: ")
    assert "does not exist" in result.message


def test_invalid_config_returns_failure(tmp_path: Path) -> None:
    (tmp_path / "archguard.toml").write_text("max_workers = 0\n", encoding="utf-8")

    result = analyze(tmp_path)

    assert isinstance(result, AnalysisFailure)
    assert "Invalid config" in result.message


def test_failing_detector_fails_the_run(tmp_path: Path) -> None:
    class _Broken:
        category = RuleCategory.NAMING_CONVENTION

        def detect(self, context: object) -> list[object]:
            msg = "detector exploded"
            raise RuntimeError(msg)

    result = analyze(_copy_fixture(tmp_path), detectors=[_Broken()])  # type: ignore[list-item]

    assert isinstance(result, AnalysisFailure)
    assert result.message == "Failed to analyze project: detector exploded"


def test_empty_project(tmp_path: Path) -> None:
    result = analyze(tmp_path, secret_scanner=_NoSecrets())

    assert isinstance(result, Report)
    assert result.units == ()
    assert result.total_violations == 0
    assert result.graph_metrics.avg_dependencies == 0.0


def test_two_runs_serialize_identically(tmp_path: Path) -> None:
    root = _copy_fixture(tmp_path)

    first = analyze(root, secret_scanner=_NoSecrets())
    second = analyze(root, secret_scanner=_NoSecrets())

    assert isinstance(first, Report)
    assert isinstance(second, Report)
    assert dump_report(first) == dump_report(second)


def test_serialized_report_shape(tmp_path: Path) -> None:
    report = _analyze_fixture(tmp_path)

    payload = orjson.loads(dump_report(report))

    assert payload == report_to_dict(report)
    assert set(payload) == {
        "dependencies",
        "files",
        "graph_metrics",
        "metrics",
        "summary",
        "violations",
    }
    assert all("content" not in entry for entry in payload["files"])
    assert set(payload["violations"]) == {category.value for category in RuleCategory}
    assert payload["summary"]["total_violations"] == 6
    assert payload["summary"]["by_severity"]["critical"] == 2
    assert payload["violations"]["circular-dependency"][0]["rule"] == "circular-dependency"


def test_package_analyze_stays_callable_after_pipeline_import(tmp_path: Path) -> None:
    importlib.import_module("analysis.pipeline")
    importlib.import_module("verify.verify")
    importlib.import_module("cli")

    assert callable(analysis.analyze)
    assert isinstance(analysis.analyze(tmp_path, secret_scanner=_NoSecrets()), Report)
