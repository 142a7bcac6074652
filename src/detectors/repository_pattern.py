"""Repository pattern checks.

Domain repository interfaces (``I*Repository`` under ``repositories/``) must
stay persistence-agnostic and speak the domain language. Application use
cases must depend on those interfaces rather than on concrete repositories.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from detectors.base import UnitDetector
from models.source import Layer
from models.violations import RepositoryPatternViolation
from rules.severity import RuleCategory

if TYPE_CHECKING:
    from detectors.base import DetectionContext
    from models.source import SourceUnit

ORM_TYPE_IN_INTERFACE = "orm-type-in-interface"
CONCRETE_REPOSITORY_IN_USE_CASE = "concrete-repository-in-use-case"
NEW_REPOSITORY_IN_USE_CASE = "new-repository-in-use-case"
NON_DOMAIN_METHOD_NAME = "non-domain-method-name"

ORM_QUERY_METHODS = frozenset(
    {
        "findOne",
        "findMany",
        "findFirst",
        "findAndCountAll",
        "insert",
        "insertMany",
        "insertOne",
        "updateOne",
        "updateMany",
        "deleteOne",
        "deleteMany",
        "select",
        "query",
        "execute",
        "run",
        "exec",
        "aggregate",
    }
)

_ORM_TYPE_PATTERNS = tuple(
    re.compile(pattern)
    for pattern in (
        r"Prisma\.",
        r"PrismaClient",
        r"TypeORM",
        r"@Entity",
        r"@Column",
        r"@PrimaryColumn",
        r"@PrimaryGeneratedColumn",
        r"@ManyToOne",
        r"@OneToMany",
        r"@ManyToMany",
        r"@JoinColumn",
        r"@JoinTable",
        r"Mongoose\.",
        r"Schema",
        r"Model<",
        r"Document",
        r"Sequelize\.",
        r"DataTypes\.",
        r"FindOptions",
        r"WhereOptions",
        r"IncludeOptions",
        r"QueryInterface",
        r"MikroORM",
        r"EntityManager",
        r"EntityRepository",
        r"Collection<",
    )
)

_DOMAIN_METHOD_PATTERNS = tuple(
    re.compile(pattern)
    for pattern in (
        r"^findBy[A-Z]",
        r"^findAll$",
        r"^find[A-Z]",
        r"^save$",
        r"^saveAll$",
        r"^create$",
        r"^update$",
        r"^delete$",
        r"^deleteBy[A-Z]",
        r"^deleteAll$",
        r"^remove$",
        r"^removeBy[A-Z]",
        r"^removeAll$",
        r"^add$",
        r"^add[A-Z]",
        r"^get[A-Z]",
        r"^getAll$",
        r"^search",
        r"^list",
        r"^has[A-Z]",
        r"^is[A-Z]",
        r"^exists$",
        r"^exists[A-Z]",
        r"^existsBy[A-Z]",
        r"^clear[A-Z]",
        r"^clearAll$",
        r"^store[A-Z]",
        r"^initialize$",
        r"^initializeCollection$",
        r"^close$",
        r"^connect$",
        r"^disconnect$",
        r"^count$",
        r"^countBy[A-Z]",
    )
)

_METHOD_NAME_SUGGESTIONS = {
    "query": ("search", "findBy[Property]"),
    "select": ("findBy[Property]", "get[Entity]"),
    "insert": ("create", "add[Entity]", "store[Entity]"),
    "update": ("update", "modify[Entity]"),
    "upsert": ("save", "store[Entity]"),
    "remove": ("delete", "removeBy[Property]"),
    "fetch": ("findBy[Property]", "get[Entity]"),
    "retrieve": ("findBy[Property]", "get[Entity]"),
    "load": ("findBy[Property]", "get[Entity]"),
}
_DEFAULT_METHOD_SUGGESTION = (
    "Use domain-specific names like: findBy[Property], save, create, delete, "
    "update, add[Entity]"
)
_TECHNICAL_TO_DOMAIN = {
    "findOne": "findById",
    "findMany": "findAll or findByFilter",
    "insert": "save or create",
    "update": "save",
    "delete": "remove or delete",
    "query": "find or search",
}

_REPOSITORY_INTERFACE_FILE = re.compile(r"I[A-Z]\w*Repository\.ts$")
_REPOSITORIES_DIR = re.compile(r"repositories?/")
_USE_CASES_DIR = re.compile(r"use-cases?/")
_USE_CASE_FILE = re.compile(r"[A-Z][a-z]+[A-Z]\w*\.ts$")

_METHOD_SIGNATURE = re.compile(
    r"(\w+)\s*\([^)]*:\s*([^)]+)\)\s*:\s*.*?(?:Promise<([^>]+)>|([A-Z]\w+))"
)
_METHOD_START = re.compile(r"^\s*(\w+)\s*\(")
_CONSTRUCTOR_PARAM = re.compile(
    r"constructor\s*\([^)]*(?:private|public|protected)\s+(?:readonly\s+)?"
    r"(\w+)\s*:\s*([A-Z]\w*Repository)"
)
_FIELD = re.compile(
    r"(?:private|public|protected)\s+(?:readonly\s+)?(\w+)\s*:\s*([A-Z]\w*Repository)"
)
_NEW_REPOSITORY = re.compile(r"new\s+([A-Z]\w*Repository)\s*\(")
_TYPE_TOKEN = re.compile(r"[\w.]+")


def is_orm_type(text: str) -> bool:
    return any(pattern.search(text) for pattern in _ORM_TYPE_PATTERNS)


def extract_orm_type(text: str) -> str:
    for pattern in _ORM_TYPE_PATTERNS:
        match = pattern.search(text)
        if match:
            token = _TYPE_TOKEN.match(text, match.start())
            return token.group(0) if token else "Unknown"
    return "Unknown"


def is_domain_method_name(name: str) -> bool:
    if name in ORM_QUERY_METHODS:
        return False
    return any(pattern.search(name) for pattern in _DOMAIN_METHOD_PATTERNS)


def suggest_domain_method_name(name: str) -> str:
    lowered = name.lower()
    suggestions: list[str] = []
    for keyword, candidates in _METHOD_NAME_SUGGESTIONS.items():
        if keyword in lowered:
            suggestions.extend(candidates)
    if "get" in lowered and "all" in lowered:
        suggestions.extend(("findAll", "listAll"))
    if not suggestions:
        return _DEFAULT_METHOD_SUGGESTION
    return f"Consider: {', '.join(suggestions[:3])}"


def is_repository_interface(path: str, layer: Layer | None) -> bool:
    if layer is not Layer.DOMAIN:
        return False
    return bool(
        _REPOSITORY_INTERFACE_FILE.search(path) and _REPOSITORIES_DIR.search(path)
    )


def is_use_case(path: str, layer: Layer | None) -> bool:
    if layer is not Layer.APPLICATION:
        return False
    return bool(_USE_CASES_DIR.search(path) and _USE_CASE_FILE.search(path))


def _is_commented(line: str) -> bool:
    return line.strip().startswith("//")


class RepositoryPatternDetector(UnitDetector):
    category = RuleCategory.REPOSITORY_PATTERN

    def detect_unit(
        self, unit: SourceUnit, context: DetectionContext
    ) -> list[RepositoryPatternViolation]:
        lines = unit.content.split("\n")
        violations: list[RepositoryPatternViolation] = []

        if is_repository_interface(unit.path, unit.layer):
            violations.extend(self._orm_types_in_interface(unit, lines, context))
            violations.extend(self._non_domain_method_names(unit, lines, context))

        if is_use_case(unit.path, unit.layer):
            violations.extend(self._concrete_repository_usage(unit, lines, context))
            violations.extend(self._new_repository(unit, lines, context))

        return violations

    def _violation(
        self,
        unit: SourceUnit,
        context: DetectionContext,
        *,
        violation_type: str,
        line: int,
        details: str,
        message: str,
        suggestion: str,
        orm_type: str | None = None,
        repository_name: str | None = None,
        method_name: str | None = None,
    ) -> RepositoryPatternViolation:
        return RepositoryPatternViolation(
            message=message,
            file=unit.path,
            line=line,
            severity=context.severity_for(self.category),
            violation_type=violation_type,
            layer=unit.layer or Layer.DOMAIN,
            details=details,
            orm_type=orm_type,
            repository_name=repository_name,
            method_name=method_name,
            suggestion=suggestion,
        )

    def _orm_types_in_interface(
        self, unit: SourceUnit, lines: list[str], context: DetectionContext
    ) -> list[RepositoryPatternViolation]:
        found: list[tuple[int, str, str]] = []
        for number, line in enumerate(lines, start=1):
            signature = _METHOD_SIGNATURE.search(line)
            if signature:
                params = signature.group(2)
                return_type = signature.group(3) or signature.group(4)
                if is_orm_type(params):
                    orm_type = extract_orm_type(params)
                    found.append(
                        (number, orm_type, f"Method parameter uses ORM type: {orm_type}")
                    )
                if return_type and is_orm_type(return_type):
                    orm_type = extract_orm_type(return_type)
                    found.append(
                        (
                            number,
                            orm_type,
                            f"Method return type uses ORM type: {orm_type}",
                        )
                    )

            if not _is_commented(line) and is_orm_type(line):
                orm_type = extract_orm_type(line)
                found.append(
                    (
                        number,
                        orm_type,
                        f"Repository interface contains ORM-specific type: {orm_type}",
                    )
                )

        suggestion = "\n".join(
            (
                "1. Remove ORM-specific types from repository interface",
                "2. Use domain types (entities, value objects) instead",
                "3. Keep repository interface clean and persistence-agnostic",
            )
        )
        return [
            self._violation(
                unit,
                context,
                violation_type=ORM_TYPE_IN_INTERFACE,
                line=number,
                details=details,
                message=(
                    f"Repository interface uses ORM-specific type '{orm_type}'. "
                    "Domain should not depend on infrastructure concerns."
                ),
                suggestion=suggestion,
                orm_type=orm_type,
            )
            for number, orm_type, details in found
        ]

    def _non_domain_method_names(
        self, unit: SourceUnit, lines: list[str], context: DetectionContext
    ) -> list[RepositoryPatternViolation]:
        violations: list[RepositoryPatternViolation] = []
        for number, line in enumerate(lines, start=1):
            match = _METHOD_START.match(line)
            if match is None or _is_commented(line):
                continue
            method_name = match.group(1)
            if is_domain_method_name(method_name):
                continue

            hint = suggest_domain_method_name(method_name)
            better = (
                hint.removeprefix("Consider: ")
                if hint.startswith("Consider: ")
                else _TECHNICAL_TO_DOMAIN.get(method_name, "findById() or findByEmail()")
            )
            violations.append(
                self._violation(
                    unit,
                    context,
                    violation_type=NON_DOMAIN_METHOD_NAME,
                    line=number,
                    details=(
                        f"Method '{method_name}' uses technical name instead of "
                        f"domain language. {hint}"
                    ),
                    message=(
                        f"Repository method '{method_name}' uses technical name. "
                        "Use domain language instead."
                    ),
                    suggestion="\n".join(
                        (
                            "1. Rename method to use domain language",
                            "2. Method names should reflect business operations",
                            "3. Avoid technical database terms (query, insert, select)",
                            f"Example: {better}",
                        )
                    ),
                    method_name=method_name,
                )
            )
        return violations

    def _concrete_repository_usage(
        self, unit: SourceUnit, lines: list[str], context: DetectionContext
    ) -> list[RepositoryPatternViolation]:
        violations: list[RepositoryPatternViolation] = []
        suggestion = "\n".join(
            (
                "1. Depend on repository interface (IUserRepository) in constructor",
                "2. Move concrete implementation to infrastructure layer",
                "3. Use dependency injection to provide implementation",
            )
        )
        for number, line in enumerate(lines, start=1):
            found: list[tuple[str, str]] = []
            param = _CONSTRUCTOR_PARAM.search(line)
            if param and not param.group(2).startswith("I"):
                found.append(
                    (
                        param.group(2),
                        f"Use case depends on concrete repository '{param.group(2)}'",
                    )
                )
            field = _FIELD.search(line)
            if field and not field.group(2).startswith("I") and "constructor" not in line:
                found.append(
                    (
                        field.group(2),
                        f"Use case field uses concrete repository '{field.group(2)}'",
                    )
                )

            for repository_name, details in found:
                violations.append(
                    self._violation(
                        unit,
                        context,
                        violation_type=CONCRETE_REPOSITORY_IN_USE_CASE,
                        line=number,
                        details=details,
                        message=(
                            "Use case depends on concrete repository "
                            f"'{repository_name}' instead of interface. "
                            "Use dependency inversion."
                        ),
                        suggestion=suggestion,
                        repository_name=repository_name,
                    )
                )
        return violations

    def _new_repository(
        self, unit: SourceUnit, lines: list[str], context: DetectionContext
    ) -> list[RepositoryPatternViolation]:
        violations: list[RepositoryPatternViolation] = []
        for number, line in enumerate(lines, start=1):
            match = _NEW_REPOSITORY.search(line)
            if match is None or _is_commented(line):
                continue
            repository_name = match.group(1)
            violations.append(
                self._violation(
                    unit,
                    context,
                    violation_type=NEW_REPOSITORY_IN_USE_CASE,
                    line=number,
                    details=f"Use case creates repository with 'new {repository_name}()'",
                    message=(
                        f"Use case creates repository with 'new {repository_name}()'. "
                        "Use dependency injection instead."
                    ),
                    suggestion="\n".join(
                        (
                            "1. Remove 'new Repository()' from use case",
                            "2. Inject repository through constructor",
                            "3. Configure dependency injection container",
                        )
                    ),
                    repository_name=repository_name,
                )
            )
        return violations


__all__ = [
    "ORM_QUERY_METHODS",
    "RepositoryPatternDetector",
    "is_domain_method_name",
    "is_repository_interface",
    "is_use_case",
]
