"""Analysis pipeline: scan, model, graph, detect, aggregate."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from analysis.aggregate import aggregate_results
from analysis.collect import collect_source_units
from analysis.detect import execute_detection
from detectors import default_detectors
from detectors.base import DetectionContext
from graph.dependency_graph import build_dependency_graph
from models.report import AnalysisFailure, Report
from rules.config import load_config
from scan.files import LocalFileAccess

if TYPE_CHECKING:
    from collections.abc import Sequence

    from detectors.base import Detector
    from detectors.secrets import SecretScanner
    from rules.config import ArchGuardConfig
    from scan.files import FileAccess

logger = logging.getLogger(__name__)

FAILURE_PREFIX = "Failed to analyze project"


def run_analysis(
    root: Path,
    include: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
    *,
    config: ArchGuardConfig | None = None,
    file_access: FileAccess | None = None,
    secret_scanner: SecretScanner | None = None,
    detectors: Sequence[Detector] | None = None,
) -> Report:
    """Run the full pipeline and return the report, raising on failure.

    ``include``/``exclude`` default to the configured patterns. Explicit
    ``detectors`` replace the default set; disabled rule categories are
    dropped either way.

    Raises:
        ConfigError: If archguard.toml exists but is invalid.
        FileNotFoundError: If root does not exist.
        NotADirectoryError: If root is not a directory.
    """
    if config is None:
        config = load_config(root)

    if include is None:
        include = config.include or None
    if exclude is None:
        exclude = config.exclude

    if file_access is None:
        file_access = LocalFileAccess(
            extensions=config.extensions,
            nested_gitignore=config.nested_gitignore,
        )

    units = collect_source_units(
        root,
        file_access,
        include,
        exclude,
        layers_config=config.layers,
        max_workers=config.max_workers,
    )
    graph = build_dependency_graph(units, config.extensions)

    context = DetectionContext(
        units=tuple(units),
        graph=graph,
        severity_map=config.severity_map(),
        layers=config.layers,
    )

    disabled = set(config.disabled_rules)
    if detectors is None:
        active = default_detectors(secret_scanner, disabled=disabled)
    else:
        active = [d for d in detectors if d.category not in disabled]

    detection = execute_detection(context, active, max_workers=config.max_workers)
    report = aggregate_results(units, graph, detection)
    logger.debug(
        "Analyzed %d files, %d violations", len(report.units), report.total_violations
    )
    return report


def analyze(
    root: str | Path,
    include: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
    *,
    config: ArchGuardConfig | None = None,
    file_access: FileAccess | None = None,
    secret_scanner: SecretScanner | None = None,
    detectors: Sequence[Detector] | None = None,
) -> Report | AnalysisFailure:
    """Analyze a project directory.

    Never raises for run-level problems: a missing root, invalid
    configuration or any other error that prevents the run from completing
    yields an :class:`AnalysisFailure` instead of a partial report.
    """
    try:
        return run_analysis(
            Path(root),
            include,
            exclude,
            config=config,
            file_access=file_access,
            secret_scanner=secret_scanner,
            detectors=detectors,
        )
    except Exception as exc:
        logger.debug("Analysis of %s failed", root, exc_info=True)
        return AnalysisFailure(message=f"{FAILURE_PREFIX}: {exc}")


__all__ = ["analyze", "run_analysis"]
