"""Graph algorithms over integer-indexed adjacency lists."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


def find_cycles(adjacency: Sequence[Sequence[int]]) -> list[list[int]]:
    """Find dependency cycles with a depth-first path enumeration.

    Roots are visited in index order and each node's successors in list
    order. Whenever an edge leads back to a node on the active path, the
    sub-path from that node to the current node (inclusive) is reported.
    Nodes are entered at most once across the whole traversal, so this
    reports the first cycle discovered per back edge rather than every
    elementary cycle. A self-loop yields a one-node cycle.

    Args:
        adjacency: ``adjacency[i]`` lists the successors of node ``i``

    Returns:
        List of cycles, each a list of node indices in traversal order

    Examples:
        >>> find_cycles([[1], [2], [0]])
        [[0, 1, 2]]
        >>> find_cycles([[0]])
        [[0]]
        >>> find_cycles([[1], []])
        []
    """
    node_count = len(adjacency)
    visited = [False] * node_count
    on_path = [False] * node_count
    cycles: list[list[int]] = []

    for root in range(node_count):
        if visited[root]:
            continue

        visited[root] = True
        on_path[root] = True
        path = [root]
        frames: list[tuple[int, Iterator[int]]] = [(root, iter(adjacency[root]))]

        while frames:
            node, successors = frames[-1]
            descended = False
            for successor in successors:
                if not visited[successor]:
                    visited[successor] = True
                    on_path[successor] = True
                    path.append(successor)
                    frames.append((successor, iter(adjacency[successor])))
                    descended = True
                    break
                if on_path[successor]:
                    cycles.append(path[path.index(successor) :])

            if not descended:
                frames.pop()
                path.pop()
                on_path[node] = False

    return cycles


def fan_counts(adjacency: Sequence[Sequence[int]]) -> tuple[int, int]:
    """Return ``(total_edges, max_out_degree)`` for an adjacency list."""
    degrees = [len(successors) for successors in adjacency]
    return sum(degrees), max(degrees, default=0)


__all__ = ["fan_counts", "find_cycles"]
