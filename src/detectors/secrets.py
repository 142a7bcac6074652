"""Hardcoded secret detection backed by an external scanner."""

from __future__ import annotations

import asyncio
import logging
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Protocol

from detect_secrets.core.scan import scan_file
from detect_secrets.settings import default_settings

from models.violations import SecretViolation
from rules.severity import RuleCategory

if TYPE_CHECKING:
    from detectors.base import DetectionContext
    from models.source import SourceUnit

logger = logging.getLogger(__name__)

SECRET_SUGGESTION = "\n".join(
    (
        "1. Use environment variables for sensitive data (process.env.API_KEY)",
        "2. Use a secret manager (AWS Secrets Manager, HashiCorp Vault, etc.)",
        "3. Never commit secrets to version control",
        "4. Rotate the secret if it has been exposed",
        "5. Keep .env files out of the repository via .gitignore",
    )
)

# detect-secrets keeps its active plugins and filters in process-wide settings.
_SETTINGS_LOCK = threading.Lock()


@dataclass(frozen=True)
class SecretFinding:
    line: int
    column: int
    secret_type: str
    message: str | None = None


class SecretScanner(Protocol):
    """Finds credentials in the text of one file."""

    async def detect_secrets(self, content: str, path: str) -> list[SecretFinding]: ...


class DetectSecretsScanner:
    """Secret scanner using the ``detect-secrets`` file scan.

    Content is written to a scratch file named like the source file so the
    library applies its file-mode entropy limits and heuristic filters.
    Scans run in a worker thread to keep the event loop free.
    """

    async def detect_secrets(self, content: str, path: str) -> list[SecretFinding]:
        return await asyncio.to_thread(self.scan, content, path)

    def scan(self, content: str, path: str = "source.ts") -> list[SecretFinding]:
        lines = content.splitlines()
        with tempfile.TemporaryDirectory(prefix="archguard-") as scratch:
            target = Path(scratch) / PurePosixPath(path).name
            target.write_text(content, encoding="utf-8")
            with _SETTINGS_LOCK, default_settings():
                secrets = list(scan_file(str(target)))

        findings: list[SecretFinding] = []
        for secret in secrets:
            line = lines[secret.line_number - 1] if secret.line_number <= len(lines) else ""
            value = secret.secret_value or ""
            column = line.find(value) + 1 if value else 1
            findings.append(
                SecretFinding(
                    line=secret.line_number,
                    column=max(column, 1),
                    secret_type=secret.type,
                )
            )
        return sorted(findings, key=lambda f: (f.line, f.column, f.secret_type))


class SecretExposureDetector:
    """Run the secret scanner over every unit concurrently.

    A scanner failure on one file is logged and counted as no findings for
    that file; the other files are unaffected.
    """

    category = RuleCategory.SECRET_EXPOSURE

    def __init__(self, scanner: SecretScanner | None = None) -> None:
        self._scanner: SecretScanner = scanner or DetectSecretsScanner()

    def detect(self, context: DetectionContext) -> list[SecretViolation]:
        return asyncio.run(self.detect_async(context))

    async def detect_async(self, context: DetectionContext) -> list[SecretViolation]:
        severity = context.severity_for(self.category)
        results = await asyncio.gather(
            *(self._scan_unit(unit) for unit in context.units)
        )

        violations: list[SecretViolation] = []
        for unit, findings in zip(context.units, results, strict=True):
            violations.extend(
                SecretViolation(
                    message=finding.message
                    or f"Hardcoded {finding.secret_type} detected",
                    file=unit.path,
                    line=finding.line,
                    severity=severity,
                    secret_type=finding.secret_type,
                    column=finding.column,
                    suggestion=SECRET_SUGGESTION,
                )
                for finding in findings
            )
        return violations

    async def _scan_unit(self, unit: SourceUnit) -> list[SecretFinding]:
        try:
            return await self._scanner.detect_secrets(unit.content, unit.path)
        except Exception as exc:
            logger.warning("Secret scan failed for %s: %s", unit.path, exc)
            return []


__all__ = [
    "DetectSecretsScanner",
    "SecretExposureDetector",
    "SecretFinding",
    "SecretScanner",
]
