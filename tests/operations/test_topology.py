# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for opgraph.operations.topology - priorities and cycle detection."""

from __future__ import annotations

import pytest

from opgraph.errors import CyclicDependencyError
from opgraph.operations import Operation, calculate_critical_paths, find_shortest_cycle


def assert_real_cycle(names: list[str], ops: dict[str, Operation]) -> None:
    assert names[0] == names[-1]
    for current, nxt in zip(names, names[1:]):
        assert ops[nxt] in ops[current].dependencies


class TestCriticalPaths:
    def test_single_dependency(self):
        alpha = Operation("alpha")
        beta = Operation("beta")
        alpha.add_dependency(beta)

        calculate_critical_paths([alpha, beta])

        assert alpha.priority == 1
        assert beta.priority == 2

    def test_weighted_graph(self):
        """Start -> P1 -> {T1 (weight 2), Finish}, T1 -> Finish."""
        start = Operation("Start")
        p1 = Operation("P1")
        t1 = Operation("T1", weight=2)
        finish = Operation("Finish")
        p1.add_dependency(start)
        t1.add_dependency(p1)
        finish.add_dependency(p1)
        finish.add_dependency(t1)

        result = calculate_critical_paths([start, p1, t1, finish])

        assert finish.priority == 1
        assert t1.priority == 3
        assert p1.priority == 4
        assert start.priority == 5
        assert result[start] == 5

    def test_priority_is_weight_plus_max_consumer(self):
        root = Operation("root")
        left = Operation("left", weight=4)
        right = Operation("right", weight=1)
        leaf = Operation("leaf", weight=0.5)
        left.add_dependency(root)
        right.add_dependency(root)
        leaf.add_dependency(right)

        ops = [root, left, right, leaf]
        calculate_critical_paths(ops)

        for op in ops:
            downstream = max((c.priority for c in op.consumers), default=0)
            assert op.priority == op.weight + downstream
        assert root.priority == 5

    def test_zero_weight_is_honored(self):
        cache = Operation("restore-cache", weight=0)
        assert cache.weight == 0

        calculate_critical_paths([cache])
        assert cache.priority == 0

    def test_unanalyzed_priority_is_none(self):
        assert Operation("fresh").priority is None

    def test_diamond_resolves_each_node_once(self):
        top = Operation("top")
        a = Operation("a")
        b = Operation("b")
        bottom = Operation("bottom")
        a.add_dependency(top)
        b.add_dependency(top)
        bottom.add_dependency(a)
        bottom.add_dependency(b)

        result = calculate_critical_paths([bottom, a, b, top])

        assert len(result) == 4
        assert top.priority == 3


class TestCycleDetection:
    def test_two_node_cycle(self):
        a = Operation("a")
        b = Operation("b")
        a.add_dependency(b)
        b.add_dependency(a)

        with pytest.raises(CyclicDependencyError) as exc_info:
            calculate_critical_paths([a, b])

        cycle = exc_info.value.cycle
        assert len(cycle) == 3
        assert set(cycle) == {"a", "b"}
        assert_real_cycle(cycle, {"a": a, "b": b})

    def test_self_dependency(self):
        a = Operation("a")
        a.add_dependency(a)

        with pytest.raises(CyclicDependencyError) as exc_info:
            calculate_critical_paths([a])

        assert exc_info.value.cycle == ["a", "a"]

    def test_reports_shortest_cycle(self):
        """a is on a 4-cycle (a, d, c, b) and a 2-cycle (a, b)."""
        a, b, c, d = (Operation(n) for n in "abcd")
        b.add_dependency(a)
        c.add_dependency(b)
        d.add_dependency(c)
        a.add_dependency(d)
        a.add_dependency(b)

        with pytest.raises(CyclicDependencyError) as exc_info:
            calculate_critical_paths([a, b, c, d])

        assert exc_info.value.cycle == ["a", "b", "a"]

    def test_cycle_behind_acyclic_prefix(self):
        ops = {n: Operation(n) for n in ("entry", "x", "y", "z")}
        ops["x"].add_dependency(ops["entry"])
        ops["y"].add_dependency(ops["x"])
        ops["z"].add_dependency(ops["y"])
        ops["x"].add_dependency(ops["z"])

        with pytest.raises(CyclicDependencyError) as exc_info:
            calculate_critical_paths(ops.values())

        cycle = exc_info.value.cycle
        assert "entry" not in cycle
        assert len(cycle) == 4
        assert_real_cycle(cycle, ops)

    def test_message_lists_path(self):
        a = Operation("lint")
        b = Operation("build")
        a.add_dependency(b)
        b.add_dependency(a)

        with pytest.raises(CyclicDependencyError, match="cyclic dependency"):
            calculate_critical_paths([a, b])


class TestFindShortestCycle:
    def test_not_on_cycle(self):
        a = Operation("a")
        b = Operation("b")
        a.add_dependency(b)
        assert find_shortest_cycle(a) == []

    def test_returns_operations(self):
        a = Operation("a")
        b = Operation("b")
        a.add_dependency(b)
        b.add_dependency(a)

        assert find_shortest_cycle(a) == [a, b, a]
