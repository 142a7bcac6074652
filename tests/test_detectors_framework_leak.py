from __future__ import annotations

import pytest

from analysis.collect import build_source_unit
from detectors.base import DetectionContext
from detectors.framework_leak import (
    FrameworkLeakDetector,
    framework_category,
    package_name,
)
from graph.dependency_graph import build_dependency_graph
from models.source import Layer
from rules.severity import RuleCategory, Severity


def _context(files: dict[str, str]) -> DetectionContext:
    units = tuple(build_source_unit(path, content) for path, content in files.items())
    return DetectionContext(units=units, graph=build_dependency_graph(units))


@pytest.mark.parametrize(
    ("specifier", "expected"),
    [
        ("@prisma/client", "@prisma/client"),
        ("@nestjs/common/decorators", "@nestjs/common"),
        ("express", "express"),
        ("axios/lib/core", "axios"),
        ("./Order", None),
        ("../infrastructure/db", None),
        ("node:fs", None),
        ("@scope", None),
    ],
)
def test_package_name(specifier: str, expected: str | None) -> None:
    assert package_name(specifier) == expected


def test_framework_category_covers_scoped_families() -> None:
    assert framework_category("@prisma/client") == "orm"
    assert framework_category("@mikro-orm/core") == "orm"
    assert framework_category("@nestjs/common") == "web-framework"
    assert framework_category("node-fetch") == "http-client"
    assert framework_category("@aws-sdk/client-s3") == "cloud-sdk"
    assert framework_category("lodash") is None
    assert framework_category("@types/node") is None


def test_domain_importing_orm_web_and_http_packages() -> None:
    context = _context(
        {
            "src/domain/entities/Order.ts": (
                "import { PrismaClient } from '@prisma/client';\n"
                "import { Request, Response } from 'express';\n"
                "import axios from 'axios';\n"
                "import { OrderId } from '../value-objects/OrderId';\n"
                "import { v4 } from 'uuid';\n"
            ),
        }
    )

    violations = FrameworkLeakDetector().detect(context)

    assert [(v.line, v.package_name, v.category) for v in violations] == [
        (1, "@prisma/client", "orm"),
        (2, "express", "web-framework"),
        (3, "axios", "http-client"),
    ]
    first = violations[0]
    assert first.rule == RuleCategory.FRAMEWORK_LEAK
    assert first.severity == Severity.HIGH
    assert first.layer == Layer.DOMAIN
    assert first.category_description == "ORM or database driver"
    assert first.message == (
        'Layer "domain" depends on framework package "@prisma/client" '
        "(ORM or database driver)"
    )
    assert "repository interface in the domain layer" in first.suggestion


def test_application_layer_is_checked_too() -> None:
    context = _context(
        {
            "src/application/use-cases/PlaceOrder.ts": (
                "import { Injectable } from '@nestjs/common';\n"
            ),
        }
    )

    violations = FrameworkLeakDetector().detect(context)

    assert [(v.layer, v.package_name) for v in violations] == [
        (Layer.APPLICATION, "@nestjs/common")
    ]


def test_outer_layers_may_use_frameworks() -> None:
    context = _context(
        {
            "src/infrastructure/db/OrderRepository.ts": (
                "import { PrismaClient } from '@prisma/client';\n"
            ),
            "src/shared/http.ts": "import axios from 'axios';\n",
            "src/main.ts": "import express from 'express';\n",
        }
    )

    assert FrameworkLeakDetector().detect(context) == []
