"""Determinism verification for archguard reports."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import TYPE_CHECKING

from analysis import analyze
from analysis.errors import AnalysisError
from analysis.serialize import dump_report
from models.report import AnalysisFailure

if TYPE_CHECKING:
    from pathlib import Path

    from rules.config import ArchGuardConfig


@dataclass(frozen=True)
class DeterminismResult:
    ok: bool
    first_digest: str
    second_digest: str


def _report_digest(root: Path, config: ArchGuardConfig | None) -> str:
    result = analyze(root, config=config)
    if isinstance(result, AnalysisFailure):
        raise AnalysisError(result.message)
    return hashlib.sha256(dump_report(result)).hexdigest()


def verify_determinism(
    root: Path, config: ArchGuardConfig | None = None
) -> DeterminismResult:
    """Verify that two analyses of the same tree serialize identically.

    The project is analyzed twice and the JSON renderings are compared by
    SHA-256 digest.

    Args:
        root: Project root to analyze.
        config: Optional configuration; loaded from ``root`` when omitted.

    Returns:
        DeterminismResult with ok status and both digests.

    Raises:
        AnalysisError: If either run fails.
    """
    first = _report_digest(root, config)
    second = _report_digest(root, config)
    return DeterminismResult(ok=first == second, first_digest=first, second_digest=second)


__all__ = ["DeterminismResult", "verify_determinism"]
