"""Command-line interface for archguard."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

from analysis import analyze
from analysis.errors import AnalysisError
from analysis.serialize import dump_report
from models.report import AnalysisFailure
from rules.severity import Severity, is_at_least, sort_by_severity
from utils import resolve_root
from verify.verify import verify_determinism

if TYPE_CHECKING:
    from pathlib import Path

    from models.report import Report
    from models.violations import Violation


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Project root (default: .)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="archguard")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a project")
    _add_common_paths(analyze_parser)
    analyze_parser.add_argument(
        "--include",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Glob of files to include (repeatable, default: config)",
    )
    analyze_parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Glob of files to exclude (repeatable, default: config)",
    )
    analyze_parser.add_argument(
        "--min-severity",
        choices=[severity.value for severity in Severity],
        default=Severity.LOW.value,
        help="Lowest severity that is reported and fails the run (default: low)",
    )
    analyze_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of violations to print in text output (JSON lists all)",
    )
    analyze_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    verify_parser = subparsers.add_parser(
        "verify", help="Verify that analysis output is deterministic"
    )
    _add_common_paths(verify_parser)

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _format_violation(violation: Violation) -> str:
    location = violation.file
    if violation.line is not None:
        location = f"{location}:{violation.line}"
    return f"{location}: [{violation.severity.value}] {violation.rule.value}: {violation.message}"


def _write_text(report: Report, reported: list[Violation], limit: int | None) -> None:
    metrics = report.metrics
    sys.stdout.write(
        f"files: {metrics.total_files}  functions: {metrics.total_functions}  "
        f"imports: {metrics.total_imports}\n"
    )
    for layer, count in metrics.layer_distribution.items():
        sys.stdout.write(f"  {layer}: {count}\n")

    shown = reported if limit is None else reported[: max(limit, 0)]
    for violation in shown:
        sys.stdout.write(_format_violation(violation) + "\n")
    if len(shown) < len(reported):
        sys.stdout.write(f"... {len(reported) - len(shown)} more\n")
    sys.stdout.write(f"violations: {len(reported)}\n")


def _handle_analyze(root: Path, args: argparse.Namespace) -> int:
    result = analyze(root, args.include, args.exclude)
    if isinstance(result, AnalysisFailure):
        sys.stderr.write(f"error: {result.message}\n")
        return 2

    threshold = Severity(args.min_severity)
    reported = sort_by_severity(
        v for v in result.iter_violations() if is_at_least(v.severity, threshold)
    )

    if args.format == "json":
        sys.stdout.write(dump_report(result, threshold).decode("utf-8") + "\n")
    else:
        _write_text(result, reported, args.limit)

    return 1 if reported else 0


def _handle_verify(root: Path) -> int:
    try:
        result = verify_determinism(root)
    except AnalysisError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2
    if not result.ok:
        sys.stderr.write(f"first: {result.first_digest}\n")
        sys.stderr.write(f"second: {result.second_digest}\n")
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    root = resolve_root(args.root)

    if args.command == "analyze":
        return _handle_analyze(root, args)

    if args.command == "verify":
        return _handle_verify(root)

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
