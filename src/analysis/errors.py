"""Exceptions raised by the analysis pipeline."""


class AnalysisError(Exception):
    """Raised when a whole analysis run cannot complete."""


__all__ = ["AnalysisError"]
