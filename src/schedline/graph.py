"""Dependency graph helpers: successor edges, cycle search, traversal order.

Graphs are plain mappings ``node -> ordered neighbours``. Traversals use an
explicit stack so long dependency chains never hit the recursion limit.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence

from .models import Task


def build_successors(tasks: Mapping[str, Task]) -> None:
    """Populate ``Task.successors`` as the inverse of the dependency edges.

    Runs as a separate pass once every task exists, so declaration order in
    the document does not matter.
    """
    for task in tasks.values():
        task.successors = []

    for task in tasks.values():
        for dep in task.dependencies:
            predecessor = tasks.get(dep.task_id)
            if predecessor is not None:
                predecessor.successors.append(task.id)


def dependency_graph(tasks: Mapping[str, Task]) -> dict[str, list[str]]:
    """Map each task id to the ids it depends on."""
    return {task_id: task.dependency_ids for task_id, task in tasks.items()}


def successor_graph(tasks: Mapping[str, Task]) -> dict[str, list[str]]:
    """Map each task id to the ids that depend on it."""
    return {task_id: list(task.successors) for task_id, task in tasks.items()}


def find_cycle(graph: Mapping[str, Sequence[str]]) -> list[str] | None:
    """Depth-first search for a cycle.

    Returns:
        The cycle as a closed path (``["A", "B", "A"]``), or None if acyclic.
    """
    finished: set[str] = set()

    for root in graph:
        if root in finished:
            continue

        path = [root]
        on_path = {root}
        pending: list[Iterator[str]] = [iter(graph[root])]

        while pending:
            neighbour = next(pending[-1], None)
            if neighbour is None:
                node = path.pop()
                on_path.discard(node)
                finished.add(node)
                pending.pop()
                continue

            if neighbour in on_path:
                return path[path.index(neighbour) :] + [neighbour]
            if neighbour in finished or neighbour not in graph:
                continue

            path.append(neighbour)
            on_path.add(neighbour)
            pending.append(iter(graph[neighbour]))

    return None


def topological_order(graph: Mapping[str, Sequence[str]]) -> list[str]:
    """Post-order DFS: every node comes after all nodes it points to.

    Given a dependency graph this yields predecessors first; given a successor
    graph it yields successors first. The graph must be acyclic.
    """
    order: list[str] = []
    visited: set[str] = set()

    for root in graph:
        if root in visited:
            continue

        visited.add(root)
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(graph[root]))]
        while stack:
            node, neighbours = stack[-1]
            neighbour = next(neighbours, None)
            if neighbour is None:
                stack.pop()
                order.append(node)
                continue
            if neighbour in visited or neighbour not in graph:
                continue
            visited.add(neighbour)
            stack.append((neighbour, iter(graph[neighbour])))

    return order
