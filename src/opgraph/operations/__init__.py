# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Operations: graph nodes with dependency-aware, concurrency-limited execution.

Core types:
    Operation: Graph node and its per-pass state machine.
    OperationRunner: Contract for the work an operation performs.
    OperationGroupRecord: Start/finish bookkeeping for labeled groups.

Execution:
    OperationExecutionManager: Validates a graph and runs passes over it.
    PriorityWorkQueue: Bounded, priority-ordered concurrency gate.
    calculate_critical_paths(): Priorities and cycle detection.
"""

from __future__ import annotations

from .gate import PriorityWorkQueue
from .group import OperationGroupRecord
from .manager import OperationExecutionManager
from .node import ExecuteOperationContext, Operation, RequestRunCallback
from .report import ExecutionSummary, OperationRecord
from .runner import (
    FunctionRunner,
    NullRunner,
    OperationRunner,
    OperationRunnerContext,
    QueueWork,
    RunnerRequestRun,
)
from .state import OperationState
from .topology import calculate_critical_paths, find_shortest_cycle

__all__ = (
    "ExecuteOperationContext",
    "ExecutionSummary",
    "FunctionRunner",
    "NullRunner",
    "Operation",
    "OperationExecutionManager",
    "OperationGroupRecord",
    "OperationRecord",
    "OperationRunner",
    "OperationRunnerContext",
    "OperationState",
    "PriorityWorkQueue",
    "QueueWork",
    "RequestRunCallback",
    "RunnerRequestRun",
    "calculate_critical_paths",
    "find_shortest_cycle",
)
