from __future__ import annotations

from analysis.collect import build_source_unit
from detectors.base import DetectionContext
from detectors.naming import NamingConventionDetector, find_naming_issues
from graph.dependency_graph import build_dependency_graph
from models.source import Layer
from models.violations import NamingViolation
from parse.treesitter import parse_source
from rules.severity import Severity


def _detect(path: str, content: str) -> list[NamingViolation]:
    units = (build_source_unit(path, content),)
    context = DetectionContext(units=units, graph=build_dependency_graph(units))
    return NamingConventionDetector().detect(context)


def _issues(content: str, layer: Layer, path: str = "x.ts") -> list[tuple[str, str, str]]:
    tree = parse_source(content, path)
    return [
        (finding.kind, finding.name, finding.violation_type)
        for finding in find_naming_issues(tree.root_node, layer)
    ]


_DOMAIN_SOURCE = """\
export class userProfile {
  GetName(): string {
    return "";
  }
}
export interface UserRepository {}
const max_value = 5;
export const Max_Retries = 3;
export const MAX_ITEMS = 3;
export const maxRetries = 3;
"""


def test_domain_file_findings_in_document_order() -> None:
    violations = _detect("src/domain/entities/userProfile.ts", _DOMAIN_SOURCE)

    assert [(v.name, v.violation_type, v.line) for v in violations] == [
        ("userProfile", "wrong-case", 1),
        ("GetName", "wrong-case", 2),
        ("UserRepository", "wrong-prefix", 6),
        ("max_value", "wrong-case", 7),
        ("Max_Retries", "wrong-case", 8),
    ]
    assert all(v.severity == Severity.MEDIUM for v in violations)
    assert all(v.layer == Layer.DOMAIN for v in violations)
    assert violations[0].message == (
        'Class "userProfile": Domain entities must be PascalCase nouns'
    )
    assert violations[2].suggestion == "Rename to IUserRepository"


def test_application_use_case_classes_need_verb_noun() -> None:
    source = "export class createUser {}\nexport class CreateUser {}\n"

    assert _issues(source, Layer.APPLICATION) == [
        ("Class", "createUser", "wrong-verb-noun"),
    ]


def test_application_dto_and_mapper_names() -> None:
    source = "export class UserResponseDto {}\nexport class UserMapper {}\n"

    assert _issues(source, Layer.APPLICATION) == []


def test_infrastructure_controller_must_be_pascal_case() -> None:
    source = "export class userController {}\nexport class UserController {}\n"

    assert _issues(source, Layer.INFRASTRUCTURE) == [
        ("Class", "userController", "wrong-suffix"),
    ]


def test_repository_interface_outside_domain_is_not_prefixed() -> None:
    assert _issues("export interface UserRepository {}\n", Layer.APPLICATION) == []


def test_private_and_constructor_names_are_skipped() -> None:
    source = """\
class Service {
  constructor() {}
  _Internal(): void {}
}
const _Hidden = 1;
"""

    assert _issues(source, Layer.SHARED) == []


def test_destructuring_is_skipped() -> None:
    assert _issues("const { Foo_Bar, baz } = load();\n", Layer.SHARED) == []


def test_unclassified_and_excluded_files_are_skipped() -> None:
    assert _detect("src/main.ts", "const Bad_Name = 1;\nlet Worse_Name = 2;\n") == []
    assert _detect("src/domain/index.ts", "let Bad_Name = 1;\n") == []
    assert _detect("src/domain/Empty.ts", "   \n") == []


def test_parameter_names_must_be_camel_case() -> None:
    source = """\
export function load(User_Id: string, Opt_Flag?: boolean, _skip?: number, { Raw }: Options): void {}
export const handle = (Bad_Arg: number) => Bad_Arg;
"""

    assert _issues(source, Layer.SHARED) == [
        ("Variable", "User_Id", "wrong-case"),
        ("Variable", "Opt_Flag", "wrong-case"),
        ("Variable", "Bad_Arg", "wrong-case"),
    ]
