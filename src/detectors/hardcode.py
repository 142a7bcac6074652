"""Magic number and magic string detection.

Both scans are line-based. Lines inside exported ``as const`` blocks and
files that are themselves constants or configuration modules are skipped,
since that is where extracted values are expected to live.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, NamedTuple

from detectors.base import UnitDetector
from models.source import Layer
from models.violations import HardcodeViolation
from rules.severity import RuleCategory

if TYPE_CHECKING:
    from detectors.base import DetectionContext
    from models.source import SourceUnit

MAGIC_NUMBER = "magic-number"
MAGIC_STRING = "magic-string"

ALLOWED_NUMBERS = frozenset({-1, 0, 1, 2, 10, 100, 1000})

_CONSTANTS_FILE_PATTERNS = (
    re.compile(r"^constants?\.(ts|js)$", re.IGNORECASE),
    re.compile(r"constants?/.*\.(ts|js)$", re.IGNORECASE),
    re.compile(r"/(constants|config|settings|defaults)\.ts$", re.IGNORECASE),
)

_NUMBER_PATTERNS = (
    re.compile(r"(?:setTimeout|setInterval)\s*\(\s*[^,]+,\s*(\d+)"),
    re.compile(r"(?:maxRetries|retries|attempts)\s*[=:]\s*(\d+)", re.IGNORECASE),
    re.compile(r"(?:limit|max|min)\s*[=:]\s*(\d+)", re.IGNORECASE),
    re.compile(r"(?:port|PORT)\s*[=:]\s*(\d+)"),
    re.compile(r"(?:delay|timeout|TIMEOUT)\s*[=:]\s*(\d+)", re.IGNORECASE),
)
_GENERIC_NUMBER = re.compile(r"\b(\d{3,})\b")
_CONFIG_KEYWORDS = (
    "timeout",
    "delay",
    "retry",
    "limit",
    "max",
    "min",
    "port",
    "interval",
)

_STRING_LITERAL = re.compile(r"""(['"`])(?:(?!\1).)+\1""")
_ALLOWED_STRINGS = (
    re.compile(r"[a-z]", re.IGNORECASE),
    re.compile(r"/"),
    re.compile(r"\\"),
    re.compile(r"\s+"),
    re.compile(r","),
    re.compile(r"\."),
)
_TYPE_CONTEXT_PATTERNS = (
    re.compile(r"^\s*type\s+\w+\s*=", re.IGNORECASE),
    re.compile(r"^\s*interface\s+\w+", re.IGNORECASE),
    re.compile(r"""^\s*\w+\s*:\s*['"`]"""),
    re.compile(r"""\s+as\s+['"`]"""),
    re.compile(r"Record<.*,\s*import\("),
    re.compile(r"""typeof\s+\w+\s*===\s*['"`]"""),
    re.compile(r"""['"`]\s*===\s*typeof\s+\w+"""),
)
_UNION_LITERAL = re.compile(r"""['"`][^'"`]+['"`]\s*\|""")
_ALL_DIGITS = re.compile(r"\d{2,}")
_WORDS = re.compile(r"[A-Za-z0-9]+")

_NUMBER_CONSTANT_NAMES = (
    ("timeout", "TIMEOUT_MS"),
    ("delay", "DELAY_MS"),
    ("interval", "INTERVAL_MS"),
    ("retr", "MAX_RETRIES"),
    ("attempt", "MAX_ATTEMPTS"),
    ("port", "DEFAULT_PORT"),
    ("limit", "DEFAULT_LIMIT"),
    ("max", "MAX_VALUE"),
    ("min", "MIN_VALUE"),
)

_CONSTANT_LOCATIONS = {
    Layer.DOMAIN: "domain/constants",
    Layer.APPLICATION: "application/constants",
    Layer.INFRASTRUCTURE: "infrastructure/config",
    Layer.SHARED: "shared/constants",
}


class HardcodedValue(NamedTuple):
    value: str | int
    kind: str
    line: int
    column: int
    context: str

    def suggest_constant_name(self) -> str:
        lowered = self.context.lower()
        if self.kind == MAGIC_NUMBER:
            for keyword, name in _NUMBER_CONSTANT_NAMES:
                if keyword in lowered:
                    return name
            return f"MAGIC_NUMBER_{self.value}"

        text = str(self.value)
        if text.startswith(("http://", "https://")):
            return "API_BASE_URL"
        if "@" in text and " " not in text:
            return "DEFAULT_EMAIL"
        if "api" in text.lower():
            return "API_ENDPOINT"
        words = _WORDS.findall(text)[:4]
        if not words:
            return "MAGIC_STRING"
        return "_".join(word.upper() for word in words)

    def suggest_location(self, layer: Layer | None) -> str:
        if layer is None:
            return "shared/constants"
        return _CONSTANT_LOCATIONS[layer]


def is_constants_file(path: str) -> bool:
    return any(pattern.search(path) for pattern in _CONSTANTS_FILE_PATTERNS)


def _is_single_line_export_const(line: str) -> bool:
    if not line.startswith("export const"):
        return False
    if "= {" in line or "= [" in line:
        return "} as const" in line or "] as const" in line
    return "as const" in line


def _find_export_const_start(lines: list[str], index: int) -> int | None:
    for current in range(index, -1, -1):
        trimmed = lines[current].strip()
        if trimmed.startswith("export const") and ("= {" in trimmed or "= [" in trimmed):
            return current
        if current < index and trimmed.startswith(("export", "import")):
            break
    return None


def _unclosed_brackets(lines: list[str], start: int, end: int) -> tuple[int, int]:
    braces = 0
    brackets = 0
    for line in lines[start : end + 1]:
        quote = ""
        previous = ""
        for char in line:
            if char in "'\"`" and previous != "\\":
                if not quote:
                    quote = char
                elif char == quote:
                    quote = ""
            if not quote:
                if char == "{":
                    braces += 1
                elif char == "}":
                    braces -= 1
                elif char == "[":
                    brackets += 1
                elif char == "]":
                    brackets -= 1
            previous = char
    return braces, brackets


def is_in_exported_constant(lines: list[str], index: int) -> bool:
    """Check whether a line sits inside an ``export const`` object or array."""
    if _is_single_line_export_const(lines[index].strip()):
        return True
    start = _find_export_const_start(lines, index)
    if start is None:
        return False
    braces, brackets = _unclosed_brackets(lines, start, index)
    return braces > 0 or brackets > 0


def _is_comment_line(line: str) -> bool:
    return line.strip().startswith(("//", "*"))


def _in_comment(line: str, index: int) -> bool:
    before = line[:index]
    return "//" in before or "/*" in before


def _in_string(line: str, index: int) -> bool:
    before = line[:index]
    return any(before.count(quote) % 2 for quote in "'\"`")


def _looks_like_magic_number(line: str, index: int) -> bool:
    context = line[max(0, index - 30) : index + 30].lower()
    return any(keyword in context for keyword in _CONFIG_KEYWORDS)


def find_magic_numbers(content: str) -> list[HardcodedValue]:
    results: list[HardcodedValue] = []
    lines = content.split("\n")
    for index, line in enumerate(lines):
        if _is_comment_line(line) or is_in_exported_constant(lines, index):
            continue

        reported: set[int] = set()
        for pattern in _NUMBER_PATTERNS:
            for match in pattern.finditer(line):
                value = int(match.group(1))
                if value not in ALLOWED_NUMBERS:
                    reported.add(value)
                    results.append(
                        HardcodedValue(
                            value, MAGIC_NUMBER, index + 1, match.start(), line.strip()
                        )
                    )

        # One finding per value and line when a keyword pattern already matched.
        for match in _GENERIC_NUMBER.finditer(line):
            value = int(match.group(1))
            if value in ALLOWED_NUMBERS or value in reported:
                continue
            if _in_comment(line, match.start()) or _in_string(line, match.start()):
                continue
            if _looks_like_magic_number(line, match.start()):
                results.append(
                    HardcodedValue(
                        value, MAGIC_NUMBER, index + 1, match.start(), line.strip()
                    )
                )
    return results


def _is_allowed_string(value: str) -> bool:
    if len(value) <= 1:
        return True
    return any(pattern.fullmatch(value) for pattern in _ALLOWED_STRINGS)


def _is_type_context(line: str) -> bool:
    trimmed = line.strip()
    if any(pattern.search(trimmed) for pattern in _TYPE_CONTEXT_PATTERNS):
        return True
    return "|" in trimmed and _UNION_LITERAL.search(trimmed) is not None


def _in_symbol_call(line: str, value: str) -> bool:
    pattern = rf"""Symbol\s*\(\s*['"`]{re.escape(value)}['"`]\s*\)"""
    return re.search(pattern, line) is not None


def _in_import_call(line: str, value: str) -> bool:
    return re.search(r"""import\s*\(\s*['"`]""", line) is not None and value in line


def _looks_like_magic_string(line: str, value: str) -> bool:
    lowered = line.lower()
    if "test" in lowered or "describe" in lowered:
        return False
    if "console.log" in lowered or "console.error" in lowered:
        return False
    if _is_type_context(line):
        return False
    if _in_symbol_call(line, value) or _in_import_call(line, value):
        return False
    if "http" in value or "api" in value:
        return True
    if _ALL_DIGITS.fullmatch(value):
        return False
    return len(value) > 3


def find_magic_strings(content: str) -> list[HardcodedValue]:
    results: list[HardcodedValue] = []
    lines = content.split("\n")
    for index, line in enumerate(lines):
        if _is_comment_line(line) or "import " in line or "from " in line:
            continue
        if is_in_exported_constant(lines, index):
            continue

        for match in _STRING_LITERAL.finditer(line):
            literal = match.group(0)
            value = literal[1:-1]
            if literal.startswith("`") or "${" in value:
                continue
            if _is_allowed_string(value) or not _looks_like_magic_string(line, value):
                continue
            results.append(
                HardcodedValue(
                    value, MAGIC_STRING, index + 1, match.start(), line.strip()
                )
            )
    return results


class HardcodeDetector(UnitDetector):
    category = RuleCategory.HARDCODE

    def detect_unit(
        self, unit: SourceUnit, context: DetectionContext
    ) -> list[HardcodeViolation]:
        if is_constants_file(unit.path):
            return []

        severity = context.severity_for(self.category)
        found = find_magic_numbers(unit.content) + find_magic_strings(unit.content)
        violations: list[HardcodeViolation] = []
        for item in found:
            label = "Magic number" if item.kind == MAGIC_NUMBER else "Magic string"
            shown = item.value if item.kind == MAGIC_NUMBER else f'"{item.value}"'
            violations.append(
                HardcodeViolation(
                    message=f"{label} {shown} should be extracted to a constant",
                    file=unit.path,
                    line=item.line,
                    severity=severity,
                    hardcode_type=item.kind,
                    value=item.value,
                    column=item.column,
                    context=item.context,
                    suggested_constant=item.suggest_constant_name(),
                    suggested_location=item.suggest_location(unit.layer),
                )
            )
        return violations


__all__ = [
    "ALLOWED_NUMBERS",
    "HardcodeDetector",
    "HardcodedValue",
    "find_magic_numbers",
    "find_magic_strings",
    "is_constants_file",
]
