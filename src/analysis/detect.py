"""Detector orchestration."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from detectors.base import DetectionContext, Detector
    from models.violations import Violation
    from rules.severity import RuleCategory

logger = logging.getLogger(__name__)


def execute_detection(
    context: DetectionContext,
    detectors: Sequence[Detector],
    max_workers: int = 8,
) -> dict[RuleCategory, list[Violation]]:
    """Run detectors concurrently and collect their violations by category.

    Results are gathered in detector order, not completion order. Detectors
    sharing a category have their violations concatenated. An exception
    raised by a detector propagates to the caller.
    """
    results: dict[RuleCategory, list[Violation]] = {}
    if not detectors:
        return results

    with ThreadPoolExecutor(max_workers=min(max_workers, len(detectors))) as executor:
        futures = [executor.submit(detector.detect, context) for detector in detectors]
        for detector, future in zip(detectors, futures, strict=True):
            violations = future.result()
            logger.debug(
                "%s reported %d violations", type(detector).__name__, len(violations)
            )
            results.setdefault(detector.category, []).extend(violations)

    return results


__all__ = ["execute_detection"]
