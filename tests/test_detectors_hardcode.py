from __future__ import annotations

from analysis.collect import build_source_unit
from detectors.base import DetectionContext
from detectors.hardcode import (
    HardcodeDetector,
    find_magic_numbers,
    find_magic_strings,
    is_constants_file,
)
from graph.dependency_graph import build_dependency_graph
from models.violations import HardcodeViolation
from rules.severity import Severity


def _detect(path: str, content: str) -> list[HardcodeViolation]:
    units = (build_source_unit(path, content),)
    context = DetectionContext(units=units, graph=build_dependency_graph(units))
    return HardcodeDetector().detect(context)


_CLIENT_SOURCE = """\
const client = createClient({ timeout: 5000 });
const ok = 1;
const url = "https://api.example.com/v1";
logger.info("Starting the client");
console.log("debug output here");
// retries: 5
import { x } from "./x";
"""


def test_detector_reports_numbers_then_strings() -> None:
    violations = _detect("src/application/services/Client.ts", _CLIENT_SOURCE)

    assert [(v.hardcode_type, v.value, v.line) for v in violations] == [
        ("magic-number", 5000, 1),
        ("magic-string", "https://api.example.com/v1", 3),
        ("magic-string", "Starting the client", 4),
    ]
    assert all(v.severity == Severity.LOW for v in violations)
    assert [v.suggested_constant for v in violations] == [
        "TIMEOUT_MS",
        "API_BASE_URL",
        "STARTING_THE_CLIENT",
    ]
    assert {v.suggested_location for v in violations} == {"application/constants"}
    assert violations[0].message == "Magic number 5000 should be extracted to a constant"
    assert violations[1].message == (
        'Magic string "https://api.example.com/v1" should be extracted to a constant'
    )


def test_keyword_and_generic_matches_are_not_duplicated() -> None:
    found = find_magic_numbers("server.listen({ port: 8080 });\n")

    assert [(item.value, item.suggest_constant_name()) for item in found] == [
        (8080, "DEFAULT_PORT")
    ]


def test_allowed_numbers_are_ignored() -> None:
    assert find_magic_numbers("const retries = 2;\nconst limit = 100;\n") == []


def test_generic_number_needs_configuration_context() -> None:
    assert find_magic_numbers("const year = 2024;\n") == []
    assert [item.value for item in find_magic_numbers("const pollInterval = 2500;\n")] == [
        2500
    ]


def test_lines_inside_exported_as_const_block_are_skipped() -> None:
    source = """\
export const LIMITS = {
  maxItems: 500,
  timeout: 3000,
} as const
const retries = 5
"""

    found = find_magic_numbers(source)

    assert [(item.value, item.line) for item in found] == [(5, 5)]
    assert found[0].suggest_constant_name() == "MAX_RETRIES"


def test_magic_strings_skip_type_contexts_and_templates() -> None:
    source = """\
type Status = "active" | "inactive";
const label = `Hello ${name}`;
const kind = typeof value === "string";
const sym = Symbol("identifier");
describe("creates the user", () => {});
"""

    assert find_magic_strings(source) == []


def test_constants_files_are_skipped() -> None:
    assert is_constants_file("src/shared/constants/Timeouts.ts") is True
    assert is_constants_file("src/infrastructure/config.ts") is True
    assert is_constants_file("src/application/Client.ts") is False
    assert _detect("src/shared/constants/Timeouts.ts", "const timeout = 5000;\n") == []


def test_unclassified_file_suggests_shared_location() -> None:
    violations = _detect("src/main.ts", "const timeout = 5000;\n")

    assert [v.suggested_location for v in violations] == ["shared/constants"]
