"""Analysis pipeline entry points."""

from __future__ import annotations

from analysis.errors import AnalysisError
from analysis.pipeline import analyze, run_analysis

__all__ = ["AnalysisError", "analyze", "run_analysis"]
