# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""opgraph - dependency-graph operation scheduler.

Top-level re-exports for convenient imports:
- opgraph.core: status values, stopwatch, cancellation
- opgraph.operations: Operation, runners, execution manager
- opgraph.watch: WatchLoop for repeated passes
- opgraph.config: ExecutionConfig, parse_parallelism
"""

from __future__ import annotations

from typing import TYPE_CHECKING

# Lazy import mapping
_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    # core
    "CancellationToken": ("opgraph.core.cancellation", "CancellationToken"),
    "CancellationTokenSource": ("opgraph.core.cancellation", "CancellationTokenSource"),
    "OperationStatus": ("opgraph.core.status", "OperationStatus"),
    "Stopwatch": ("opgraph.core.stopwatch", "Stopwatch"),
    # config
    "ExecutionConfig": ("opgraph.config", "ExecutionConfig"),
    "parse_parallelism": ("opgraph.config", "parse_parallelism"),
    # operations
    "ExecutionSummary": ("opgraph.operations.report", "ExecutionSummary"),
    "FunctionRunner": ("opgraph.operations.runner", "FunctionRunner"),
    "NullRunner": ("opgraph.operations.runner", "NullRunner"),
    "Operation": ("opgraph.operations.node", "Operation"),
    "OperationExecutionManager": ("opgraph.operations.manager", "OperationExecutionManager"),
    "OperationGroupRecord": ("opgraph.operations.group", "OperationGroupRecord"),
    "OperationRunner": ("opgraph.operations.runner", "OperationRunner"),
    "OperationRunnerContext": ("opgraph.operations.runner", "OperationRunnerContext"),
    # watch
    "WatchLoop": ("opgraph.watch", "WatchLoop"),
    "WatchLoopState": ("opgraph.watch", "WatchLoopState"),
}

_LOADED: dict[str, object] = {}


def __getattr__(name: str) -> object:
    """Lazy import attributes on first access."""
    if name in _LOADED:
        return _LOADED[name]

    if name in _LAZY_IMPORTS:
        from importlib import import_module

        module_name, attr_name = _LAZY_IMPORTS[name]
        module = import_module(module_name)
        value = getattr(module, attr_name)
        _LOADED[name] = value
        return value

    raise AttributeError(f"module 'opgraph' has no attribute {name!r}")


def __dir__() -> list[str]:
    """Return all available attributes for autocomplete."""
    return list(__all__)


# TYPE_CHECKING block for static analysis
if TYPE_CHECKING:
    from opgraph.config import ExecutionConfig, parse_parallelism
    from opgraph.core.cancellation import CancellationToken, CancellationTokenSource
    from opgraph.core.status import OperationStatus
    from opgraph.core.stopwatch import Stopwatch
    from opgraph.operations.group import OperationGroupRecord
    from opgraph.operations.manager import OperationExecutionManager
    from opgraph.operations.node import Operation
    from opgraph.operations.report import ExecutionSummary
    from opgraph.operations.runner import (
        FunctionRunner,
        NullRunner,
        OperationRunner,
        OperationRunnerContext,
    )
    from opgraph.watch import WatchLoop, WatchLoopState

__all__ = (
    "CancellationToken",
    "CancellationTokenSource",
    "ExecutionConfig",
    "ExecutionSummary",
    "FunctionRunner",
    "NullRunner",
    "Operation",
    "OperationExecutionManager",
    "OperationGroupRecord",
    "OperationRunner",
    "OperationRunnerContext",
    "OperationStatus",
    "Stopwatch",
    "WatchLoop",
    "WatchLoopState",
    "parse_parallelism",
)
