"""Framework leak checks for the inner layers.

Domain and application code should depend on abstractions it owns. Imports
of ORMs, web frameworks, HTTP clients or cloud SDKs from those layers tie
business rules to an infrastructure choice.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

from detectors.base import UnitDetector
from models.source import Layer
from models.violations import FrameworkLeakViolation
from parse.lexical import iter_import_statements
from parse.resolve import is_relative_specifier
from rules.severity import RuleCategory

if TYPE_CHECKING:
    from collections.abc import Mapping

    from detectors.base import DetectionContext
    from models.source import SourceUnit

ORM = "orm"
WEB_FRAMEWORK = "web-framework"
HTTP_CLIENT = "http-client"
CLOUD_SDK = "cloud-sdk"

CATEGORY_DESCRIPTIONS: Mapping[str, str] = MappingProxyType(
    {
        ORM: "ORM or database driver",
        WEB_FRAMEWORK: "Web framework",
        HTTP_CLIENT: "HTTP client",
        CLOUD_SDK: "Cloud provider SDK",
    }
)

FRAMEWORK_PACKAGES: Mapping[str, str] = MappingProxyType(
    {
        "@prisma/client": ORM,
        "prisma": ORM,
        "typeorm": ORM,
        "mongoose": ORM,
        "sequelize": ORM,
        "sequelize-typescript": ORM,
        "knex": ORM,
        "drizzle-orm": ORM,
        "objection": ORM,
        "pg": ORM,
        "mysql": ORM,
        "mysql2": ORM,
        "mongodb": ORM,
        "sqlite3": ORM,
        "better-sqlite3": ORM,
        "redis": ORM,
        "ioredis": ORM,
        "express": WEB_FRAMEWORK,
        "fastify": WEB_FRAMEWORK,
        "koa": WEB_FRAMEWORK,
        "koa-router": WEB_FRAMEWORK,
        "@koa/router": WEB_FRAMEWORK,
        "hapi": WEB_FRAMEWORK,
        "@hapi/hapi": WEB_FRAMEWORK,
        "restify": WEB_FRAMEWORK,
        "next": WEB_FRAMEWORK,
        "axios": HTTP_CLIENT,
        "node-fetch": HTTP_CLIENT,
        "cross-fetch": HTTP_CLIENT,
        "got": HTTP_CLIENT,
        "superagent": HTTP_CLIENT,
        "undici": HTTP_CLIENT,
        "ky": HTTP_CLIENT,
        "request": HTTP_CLIENT,
        "aws-sdk": CLOUD_SDK,
        "firebase-admin": CLOUD_SDK,
    }
)

FRAMEWORK_SCOPES: Mapping[str, str] = MappingProxyType(
    {
        "@mikro-orm": ORM,
        "@nestjs": WEB_FRAMEWORK,
        "@aws-sdk": CLOUD_SDK,
        "@google-cloud": CLOUD_SDK,
        "@azure": CLOUD_SDK,
    }
)

LEAK_LAYERS = frozenset({Layer.DOMAIN, Layer.APPLICATION})

_SUGGESTIONS = {
    ORM: (
        "Define a repository interface in the {layer} layer and implement it "
        "with {package} in the infrastructure layer"
    ),
    WEB_FRAMEWORK: (
        "Keep {package} request and response handling in infrastructure "
        "controllers and pass plain DTOs inward"
    ),
    HTTP_CLIENT: (
        "Define a port for the external service in the {layer} layer and "
        "implement it with {package} in the infrastructure layer"
    ),
    CLOUD_SDK: (
        "Wrap {package} in an infrastructure adapter behind an interface "
        "owned by the {layer} layer"
    ),
}


def package_name(specifier: str) -> str | None:
    """Return the npm package a bare specifier refers to.

    Relative paths and ``node:`` built-ins have no package.

    Examples:
        >>> package_name("@prisma/client/runtime")
        '@prisma/client'
        >>> package_name("express/lib/router")
        'express'
        >>> package_name("../db/Database") is None
        True
    """
    if is_relative_specifier(specifier) or specifier.startswith(("node:", "/")):
        return None
    parts = specifier.split("/")
    if specifier.startswith("@"):
        if len(parts) < 2:
            return None
        return "/".join(parts[:2])
    return parts[0]


def framework_category(package: str) -> str | None:
    """Return the framework category of a package, if it is a known one."""
    category = FRAMEWORK_PACKAGES.get(package)
    if category is None and package.startswith("@"):
        category = FRAMEWORK_SCOPES.get(package.split("/", 1)[0])
    return category


class FrameworkLeakDetector(UnitDetector):
    """Flag framework package imports in domain and application files."""

    category = RuleCategory.FRAMEWORK_LEAK

    def detect_unit(
        self, unit: SourceUnit, context: DetectionContext
    ) -> list[FrameworkLeakViolation]:
        if unit.layer not in LEAK_LAYERS:
            return []

        severity = context.severity_for(self.category)
        violations: list[FrameworkLeakViolation] = []
        for line, specifier in iter_import_statements(unit.content):
            package = package_name(specifier)
            if package is None:
                continue
            category = framework_category(package)
            if category is None:
                continue

            description = CATEGORY_DESCRIPTIONS[category]
            violations.append(
                FrameworkLeakViolation(
                    message=(
                        f'Layer "{unit.layer.value}" depends on framework package '
                        f'"{package}" ({description})'
                    ),
                    file=unit.path,
                    line=line,
                    severity=severity,
                    package_name=package,
                    category=category,
                    category_description=description,
                    layer=unit.layer,
                    suggestion=_SUGGESTIONS[category].format(
                        layer=unit.layer.value, package=package
                    ),
                )
            )
        return violations


__all__ = [
    "CATEGORY_DESCRIPTIONS",
    "FRAMEWORK_PACKAGES",
    "FRAMEWORK_SCOPES",
    "FrameworkLeakDetector",
    "framework_category",
    "package_name",
]
