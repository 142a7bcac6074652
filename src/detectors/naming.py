"""Naming convention checks over the tree-sitter syntax tree."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, NamedTuple

from detectors.base import UnitDetector
from models.source import Layer
from models.violations import NamingViolation
from parse.treesitter import iter_nodes, node_line, node_text, parse_source
from rules.severity import RuleCategory

if TYPE_CHECKING:
    from tree_sitter import Node

    from detectors.base import DetectionContext
    from models.source import SourceUnit

EXCLUDED_FILES = frozenset(
    {
        "index.ts",
        "BaseUseCase.ts",
        "BaseMapper.ts",
        "IBaseRepository.ts",
        "BaseEntity.ts",
        "ValueObject.ts",
        "BaseRepository.ts",
        "BaseError.ts",
        "DomainEvent.ts",
        "Suggestions.ts",
    }
)

USE_CASE_VERBS = (
    "Analyze",
    "Create",
    "Update",
    "Delete",
    "Get",
    "Find",
    "List",
    "Search",
    "Validate",
    "Calculate",
    "Generate",
    "Send",
    "Fetch",
    "Process",
    "Execute",
    "Handle",
    "Register",
    "Authenticate",
    "Authorize",
    "Import",
    "Export",
    "Place",
    "Cancel",
    "Approve",
    "Reject",
    "Confirm",
)

WRONG_CASE = "wrong-case"
WRONG_SUFFIX = "wrong-suffix"
WRONG_PREFIX = "wrong-prefix"
WRONG_VERB_NOUN = "wrong-verb-noun"

USE_PASCAL_CASE = "Use PascalCase noun (e.g., User.ts, Order.ts, Email.ts)"
USE_DTO_SUFFIX = "Use *Dto, *Request, or *Response suffix (e.g., UserResponseDto.ts)"
USE_VERB_NOUN = "Use verb + noun in PascalCase (e.g., CreateUser.ts, UpdateProfile.ts)"
USE_PASCAL_CASE_INTERFACE = "Use PascalCase for interface names"
USE_CAMEL_CASE_FUNCTION = (
    "Use camelCase for function names (e.g., getUserById, createOrder)"
)
USE_UPPER_SNAKE_CASE_CONSTANT = (
    "Use UPPER_SNAKE_CASE for constant names (e.g., MAX_RETRIES, API_URL)"
)
USE_CAMEL_CASE_VARIABLE = "Use camelCase for variable names (e.g., userId, orderList)"

_PASCAL = re.compile(r"[A-Z][a-zA-Z0-9]*")
_CAMEL = re.compile(r"[a-z][a-zA-Z0-9]*")
_UPPER_SNAKE = re.compile(r"[A-Z][A-Z0-9_]*")
_DOMAIN_SERVICE = re.compile(r"[A-Z][a-zA-Z0-9]*Service")
_DTO = re.compile(r"[A-Z][a-zA-Z0-9]*(Dto|Request|Response)")
_MAPPER = re.compile(r"[A-Z][a-zA-Z0-9]*Mapper")
_VERB_NOUN = re.compile(r"[A-Z][a-z]+[A-Z][a-zA-Z0-9]*")
_CONTROLLER = re.compile(r"[A-Z][a-zA-Z0-9]*Controller")
_REPOSITORY_IMPL = re.compile(r"[A-Z][a-zA-Z0-9]*Repository")
_SERVICE_ADAPTER = re.compile(r"[A-Z][a-zA-Z0-9]*(Service|Adapter)")
_REPOSITORY_INTERFACE = re.compile(r"I[A-Z][a-zA-Z0-9]*Repository")

FUNCTION_NODES = frozenset(
    {"function_declaration", "method_definition", "function_signature"}
)
VARIABLE_NODES = frozenset(
    {
        "variable_declarator",
        "required_parameter",
        "optional_parameter",
        "public_field_definition",
        "property_signature",
    }
)
FIELD_NODES = frozenset({"public_field_definition", "field_definition"})
PARAMETER_NODES = frozenset({"required_parameter", "optional_parameter"})
DESTRUCTURING_NODES = frozenset({"object_pattern", "array_pattern"})


class Finding(NamedTuple):
    """A naming problem before it is bound to a file and severity."""

    kind: str
    name: str
    line: int
    violation_type: str
    expected: str
    suggestion: str | None = None


def _check_domain_class(name: str, line: int) -> Finding | None:
    if name.endswith("Service"):
        if not _DOMAIN_SERVICE.fullmatch(name):
            return Finding(
                "Class",
                name,
                line,
                WRONG_CASE,
                "Domain services must be PascalCase ending with 'Service'",
            )
        return None

    if not _PASCAL.fullmatch(name):
        return Finding(
            "Class",
            name,
            line,
            WRONG_CASE,
            "Domain entities must be PascalCase nouns",
            USE_PASCAL_CASE,
        )
    return None


def _check_application_class(name: str, line: int) -> Finding | None:
    if name.endswith(("Dto", "Request", "Response")):
        if not _DTO.fullmatch(name):
            return Finding(
                "Class",
                name,
                line,
                WRONG_SUFFIX,
                "DTOs must be PascalCase ending with 'Dto', 'Request', or 'Response'",
                USE_DTO_SUFFIX,
            )
        return None

    if name.endswith("Mapper"):
        if not _MAPPER.fullmatch(name):
            return Finding(
                "Class",
                name,
                line,
                WRONG_SUFFIX,
                "Mappers must be PascalCase ending with 'Mapper'",
            )
        return None

    use_case_rule = "Use cases must be PascalCase Verb+Noun (e.g., CreateUser)"
    if name.startswith(USE_CASE_VERBS):
        if not _VERB_NOUN.fullmatch(name):
            return Finding(
                "Class", name, line, WRONG_VERB_NOUN, use_case_rule, USE_VERB_NOUN
            )
    elif name.startswith(tuple(verb.lower() for verb in USE_CASE_VERBS)):
        return Finding(
            "Class", name, line, WRONG_VERB_NOUN, use_case_rule, USE_VERB_NOUN
        )
    return None


def _check_infrastructure_class(name: str, line: int) -> Finding | None:
    if name.endswith("Controller"):
        if not _CONTROLLER.fullmatch(name):
            return Finding(
                "Class",
                name,
                line,
                WRONG_SUFFIX,
                "Controllers must be PascalCase ending with 'Controller'",
            )
        return None

    if name.endswith("Repository") and not name.startswith("I"):
        if not _REPOSITORY_IMPL.fullmatch(name):
            return Finding(
                "Class",
                name,
                line,
                WRONG_SUFFIX,
                "Repository implementations must be PascalCase ending with 'Repository'",
            )
        return None

    if name.endswith(("Service", "Adapter")) and not _SERVICE_ADAPTER.fullmatch(name):
        return Finding(
            "Class",
            name,
            line,
            WRONG_SUFFIX,
            "Services/Adapters must be PascalCase ending with 'Service' or 'Adapter'",
        )
    return None


_CLASS_CHECKS = {
    Layer.DOMAIN: _check_domain_class,
    Layer.APPLICATION: _check_application_class,
    Layer.INFRASTRUCTURE: _check_infrastructure_class,
}


def check_class(node: Node, layer: Layer) -> Finding | None:
    name_node = node.child_by_field_name("name")
    check = _CLASS_CHECKS.get(layer)
    if name_node is None or check is None:
        return None
    return check(node_text(name_node), node_line(name_node))


def check_interface(node: Node, layer: Layer) -> Finding | None:
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return None

    name = node_text(name_node)
    line = node_line(name_node)

    if not _PASCAL.fullmatch(name):
        return Finding(
            "Interface",
            name,
            line,
            WRONG_CASE,
            "Interfaces must be PascalCase",
            USE_PASCAL_CASE_INTERFACE,
        )

    if layer is not Layer.DOMAIN or not name.endswith("Repository"):
        return None

    if not name.startswith("I"):
        return Finding(
            "Interface",
            name,
            line,
            WRONG_PREFIX,
            "Domain repository interfaces must start with 'I' (e.g., IUserRepository)",
            f"Rename to I{name}",
        )
    if not _REPOSITORY_INTERFACE.fullmatch(name):
        return Finding(
            "Interface",
            name,
            line,
            WRONG_CASE,
            "Repository interfaces must be I + PascalCase + Repository",
        )
    return None


def check_function(node: Node) -> Finding | None:
    name_node = node.child_by_field_name("name")
    if name_node is None or name_node.type == "computed_property_name":
        return None

    name = node_text(name_node)
    if name.startswith("_") or name == "constructor":
        return None

    if not _CAMEL.fullmatch(name):
        return Finding(
            "Function",
            name,
            node_line(name_node),
            WRONG_CASE,
            "Functions and methods must be camelCase",
            USE_CAMEL_CASE_FUNCTION,
        )
    return None


def _has_const_modifiers(field_node: Node) -> bool:
    return any(
        child.type in {"readonly", "static"}
        or node_text(child) in {"readonly", "static"}
        for child in field_node.children
    )


def _is_constant(node: Node, name: str) -> bool:
    if node.type in PARAMETER_NODES or not name[:1].isupper():
        return False

    if node.type in FIELD_NODES:
        return _has_const_modifiers(node)

    current = node.parent
    while current is not None:
        if current.type == "lexical_declaration":
            first = current.child(0)
            if first is not None and first.type == "const":
                return True
        if current.type in FIELD_NODES:
            return _has_const_modifiers(current)
        current = current.parent
    return False


def check_variable(node: Node) -> Finding | None:
    if node.type in PARAMETER_NODES:
        # Parameters carry their binding in `pattern`; only plain names are checked.
        name_node = node.child_by_field_name("pattern")
        if name_node is None or name_node.type != "identifier":
            return None
    else:
        name_node = node.child_by_field_name("name")
    if name_node is None or name_node.type in DESTRUCTURING_NODES:
        return None
    if name_node.type == "computed_property_name":
        return None

    name = node_text(name_node)
    if name.startswith("_"):
        return None

    line = node_line(name_node)
    if _is_constant(node, name):
        if not _UPPER_SNAKE.fullmatch(name):
            return Finding(
                "Variable",
                name,
                line,
                WRONG_CASE,
                "Exported constants must be UPPER_SNAKE_CASE",
                USE_UPPER_SNAKE_CASE_CONSTANT,
            )
    elif not _CAMEL.fullmatch(name):
        return Finding(
            "Variable",
            name,
            line,
            WRONG_CASE,
            "Variables must be camelCase",
            USE_CAMEL_CASE_VARIABLE,
        )
    return None


def find_naming_issues(root: Node, layer: Layer) -> list[Finding]:
    """Walk a syntax tree and collect naming problems in document order."""
    findings: list[Finding] = []
    for node in iter_nodes(root):
        if node.type == "class_declaration":
            finding = check_class(node, layer)
        elif node.type == "interface_declaration":
            finding = check_interface(node, layer)
        elif node.type in FUNCTION_NODES:
            finding = check_function(node)
        elif node.type in VARIABLE_NODES:
            finding = check_variable(node)
        else:
            continue
        if finding is not None:
            findings.append(finding)
    return findings


class NamingConventionDetector(UnitDetector):
    category = RuleCategory.NAMING_CONVENTION

    def detect_unit(
        self, unit: SourceUnit, context: DetectionContext
    ) -> list[NamingViolation]:
        if unit.layer is None or unit.filename in EXCLUDED_FILES:
            return []
        if not unit.content.strip():
            return []

        tree = parse_source(unit.content, unit.path)
        severity = context.severity_for(self.category)
        return [
            NamingViolation(
                message=f'{finding.kind} "{finding.name}": {finding.expected}',
                file=unit.path,
                line=finding.line,
                severity=severity,
                name=finding.name,
                violation_type=finding.violation_type,
                layer=unit.layer,
                expected=finding.expected,
                suggestion=finding.suggestion,
            )
            for finding in find_naming_issues(tree.root_node, unit.layer)
        ]


__all__ = [
    "EXCLUDED_FILES",
    "USE_CASE_VERBS",
    "NamingConventionDetector",
    "find_naming_issues",
]
