from __future__ import annotations

from analysis.collect import build_source_unit
from detectors.base import DetectionContext
from detectors.repository_pattern import (
    CONCRETE_REPOSITORY_IN_USE_CASE,
    NEW_REPOSITORY_IN_USE_CASE,
    NON_DOMAIN_METHOD_NAME,
    ORM_TYPE_IN_INTERFACE,
    RepositoryPatternDetector,
    is_domain_method_name,
    is_repository_interface,
    is_use_case,
    suggest_domain_method_name,
)
from graph.dependency_graph import build_dependency_graph
from models.source import Layer
from models.violations import RepositoryPatternViolation
from rules.severity import Severity


def _detect(path: str, content: str) -> list[RepositoryPatternViolation]:
    units = (build_source_unit(path, content),)
    context = DetectionContext(units=units, graph=build_dependency_graph(units))
    return RepositoryPatternDetector().detect(context)


_INTERFACE_SOURCE = """\
export interface IUserRepository {
  findById(id: UserId): Promise<User | null>
  query(filter: WhereOptions): Promise<User[]>
  save(user: User): Promise<void>
}
"""

_USE_CASE_SOURCE = """\
export class CreateUser {
  constructor(private readonly userRepository: PrismaUserRepository) {}

  async execute(): Promise<void> {
    const repo = new UserRepository()
  }
}
"""


def test_repository_interface_with_orm_type_and_technical_method() -> None:
    violations = _detect("src/domain/repositories/IUserRepository.ts", _INTERFACE_SOURCE)

    assert [(v.violation_type, v.line) for v in violations] == [
        (ORM_TYPE_IN_INTERFACE, 3),
        (ORM_TYPE_IN_INTERFACE, 3),
        (NON_DOMAIN_METHOD_NAME, 3),
    ]
    assert violations[0].orm_type == "WhereOptions"
    assert violations[0].details == "Method parameter uses ORM type: WhereOptions"
    assert violations[2].method_name == "query"
    assert violations[2].message == (
        "Repository method 'query' uses technical name. Use domain language instead."
    )
    assert all(v.severity == Severity.CRITICAL for v in violations)
    assert all(v.layer == Layer.DOMAIN for v in violations)


def test_use_case_with_concrete_repository_and_new() -> None:
    violations = _detect("src/application/use-cases/CreateUser.ts", _USE_CASE_SOURCE)

    assert [(v.violation_type, v.repository_name, v.line) for v in violations] == [
        (CONCRETE_REPOSITORY_IN_USE_CASE, "PrismaUserRepository", 2),
        (NEW_REPOSITORY_IN_USE_CASE, "UserRepository", 5),
    ]
    assert violations[1].message == (
        "Use case creates repository with 'new UserRepository()'. "
        "Use dependency injection instead."
    )
    assert all(v.layer == Layer.APPLICATION for v in violations)


def test_use_case_depending_on_interface_is_clean() -> None:
    source = """\
export class CreateUser {
  constructor(private readonly users: IUserRepository) {}
}
"""

    assert _detect("src/application/use-cases/CreateUser.ts", source) == []


def test_files_outside_the_pattern_are_ignored() -> None:
    assert _detect("src/infrastructure/repositories/UserRepository.ts", _USE_CASE_SOURCE) == []
    assert _detect("src/application/services/CreateUser.ts", _USE_CASE_SOURCE) == []


def test_is_repository_interface_and_use_case() -> None:
    assert is_repository_interface("src/domain/repositories/IOrderRepository.ts", Layer.DOMAIN)
    assert not is_repository_interface("src/domain/repositories/OrderRepository.ts", Layer.DOMAIN)
    assert not is_repository_interface(
        "src/infrastructure/repositories/IOrderRepository.ts", Layer.INFRASTRUCTURE
    )
    assert is_use_case("src/application/use-cases/PlaceOrder.ts", Layer.APPLICATION)
    assert not is_use_case("src/application/use-cases/index.ts", Layer.APPLICATION)


def test_domain_method_names() -> None:
    assert is_domain_method_name("findByEmail") is True
    assert is_domain_method_name("save") is True
    assert is_domain_method_name("existsById") is True
    assert is_domain_method_name("findOne") is False
    assert is_domain_method_name("insert") is False
    assert is_domain_method_name("upsertRecord") is False


def test_suggest_domain_method_name() -> None:
    assert suggest_domain_method_name("insertUser") == (
        "Consider: create, add[Entity], store[Entity]"
    )
    assert suggest_domain_method_name("frobnicate").startswith("Use domain-specific")
