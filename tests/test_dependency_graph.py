from __future__ import annotations

from graph.algos import fan_counts, find_cycles
from graph.dependency_graph import GraphBuilder, build_dependency_graph
from models.source import SourceUnit


def _unit(path: str, *imports: str) -> SourceUnit:
    return SourceUnit(path=path, content="", imports=imports)


def test_acyclic_graph_has_no_cycles() -> None:
    graph = build_dependency_graph(
        [
            _unit("src/a.ts", "./b"),
            _unit("src/b.ts", "./c"),
            _unit("src/c.ts"),
        ]
    )

    assert graph.find_cycles() == []


def test_three_node_cycle_reported_once_in_traversal_order() -> None:
    graph = build_dependency_graph(
        [
            _unit("src/a.ts", "./b"),
            _unit("src/b.ts", "./c"),
            _unit("src/c.ts", "./a"),
        ]
    )

    assert graph.find_cycles() == [["src/a.ts", "src/b.ts", "src/c.ts"]]


def test_self_import_is_a_single_node_cycle() -> None:
    graph = build_dependency_graph([_unit("src/a.ts", "./a")])

    assert graph.find_cycles() == [["src/a.ts"]]


def test_external_and_unresolved_imports_are_dropped() -> None:
    graph = build_dependency_graph(
        [
            _unit("src/a.ts", "lodash", "./missing", "@scope/pkg", "./b"),
            _unit("src/b.ts"),
        ]
    )

    assert list(graph.edges()) == [("src/a.ts", "src/b.ts")]
    assert graph.dependencies("src/a.ts") == ("src/b.ts",)
    assert graph.dependents("src/b.ts") == ("src/a.ts",)


def test_duplicate_imports_produce_one_edge() -> None:
    graph = build_dependency_graph(
        [
            _unit("src/a.ts", "./b", "./b.ts", "./b"),
            _unit("src/b.ts"),
        ]
    )

    assert graph.get_metrics().total_dependencies == 1


def test_index_and_js_extension_resolution() -> None:
    graph = build_dependency_graph(
        [
            _unit("src/a.ts", "./lib", "./util.js"),
            _unit("src/lib/index.ts"),
            _unit("src/util.ts"),
        ]
    )

    assert graph.dependencies("src/a.ts") == ("src/lib/index.ts", "src/util.ts")


def test_metrics() -> None:
    graph = build_dependency_graph(
        [
            _unit("a.ts", "./b", "./c"),
            _unit("b.ts", "./c"),
            _unit("c.ts"),
            _unit("d.ts"),
        ]
    )

    metrics = graph.get_metrics()

    assert metrics.total_files == 4
    assert metrics.total_dependencies == 3
    assert metrics.avg_dependencies == 0.75
    assert metrics.max_dependencies == 2


def test_empty_graph_metrics() -> None:
    metrics = build_dependency_graph([]).get_metrics()

    assert metrics.total_files == 0
    assert metrics.avg_dependencies == 0.0
    assert metrics.max_dependencies == 0


def test_builder_ignores_unknown_endpoints_and_duplicate_nodes() -> None:
    builder = GraphBuilder()
    unit = _unit("a.ts")
    builder.add_node(unit)
    builder.add_node(unit)

    assert builder.add_edge("a.ts", "nope.ts") is False
    assert builder.add_edge("a.ts", "a.ts") is True
    assert builder.add_edge("a.ts", "a.ts") is False

    graph = builder.build()
    assert len(graph) == 1
    assert "a.ts" in graph
    assert graph.get_unit("a.ts") is unit
    assert graph.get_unit("nope.ts") is None


def test_find_cycles_each_back_edge_on_shared_path() -> None:
    # 0 -> 1 -> 2 -> 0 and 2 -> 1
    assert find_cycles([[1], [2], [0, 1]]) == [[0, 1, 2], [1, 2]]


def test_find_cycles_skips_nodes_already_visited_from_earlier_roots() -> None:
    # The 1 <-> 2 cycle is found from root 0 and not reported again.
    assert find_cycles([[1], [2], [1]]) == [[1, 2]]


def test_fan_counts() -> None:
    assert fan_counts([[1, 2], [2], []]) == (3, 2)
    assert fan_counts([]) == (0, 0)
