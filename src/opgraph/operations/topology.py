# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Critical path lengths and cycle detection.

An operation's priority is the weight of the heaviest chain of consumers
hanging off it, itself included:

    priority(op) = op.weight + max(priority(c) for c in op.consumers)

or ``op.weight`` when nothing consumes it. Operations that block a lot of
downstream work get the highest values and are admitted to the gate first.

Example:
    P1 depends on Start, T1 (weight 2) depends on P1, Finish depends on
    both P1 and T1:

        Finish = 1
        T1     = 2 + 1         = 3
        P1     = 1 + max(3, 1) = 4
        Start  = 1 + 4         = 5
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import TYPE_CHECKING

from opgraph.errors import CyclicDependencyError

if TYPE_CHECKING:
    from .node import Operation

__all__ = ("calculate_critical_paths", "find_shortest_cycle")


def calculate_critical_paths(operations: Iterable[Operation]) -> dict[Operation, float]:
    """Set ``priority`` on every operation and return the computed values.

    Walks consumer edges depth-first with memoization, so each operation is
    resolved once.

    Raises:
        CyclicDependencyError: If the graph has a cycle; ``cycle`` holds the
            shortest cycle through the first operation found revisited.
    """
    resolved: dict[Operation, float] = {}
    on_stack: set[Operation] = set()

    def visit(operation: Operation) -> float:
        if operation in resolved:
            return resolved[operation]
        if operation in on_stack:
            cycle = find_shortest_cycle(operation)
            raise CyclicDependencyError([op.name for op in cycle])

        on_stack.add(operation)
        downstream = 0.0
        for consumer in operation.consumers:
            downstream = max(downstream, visit(consumer))
        on_stack.discard(operation)

        priority = operation.weight + downstream
        operation.priority = priority
        resolved[operation] = priority
        return priority

    for operation in operations:
        visit(operation)

    return resolved


def find_shortest_cycle(start: Operation) -> list[Operation]:
    """Shortest dependency cycle through ``start``.

    Breadth-first over dependency edges from ``start`` until reaching an
    operation that depends on ``start``.

    Returns:
        Operations in dependency order, beginning and ending with ``start``
        (each entry depends on the next). Empty if ``start`` is not on a cycle.
    """
    parents: dict[Operation, Operation | None] = {start: None}
    queue: deque[Operation] = deque([start])

    while queue:
        current = queue.popleft()
        if start in current.dependencies:
            path: list[Operation] = []
            node: Operation | None = current
            while node is not None:
                path.append(node)
                node = parents[node]
            path.reverse()
            path.append(start)
            return path

        for dependency in current.dependencies:
            if dependency not in parents:
                parents[dependency] = current
                queue.append(dependency)

    return []
